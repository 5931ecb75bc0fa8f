from __future__ import annotations

import json
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

STDIN_MARKER = "-"


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def ensure_dir(path: str | Path) -> Path:
    directory = Path(path)
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def read_json(path: str | Path) -> Any:
    with Path(path).open("r", encoding="utf-8") as handle:
        return json.load(handle)


def write_json(path: str | Path, payload: Any) -> None:
    out_path = Path(path)
    ensure_dir(out_path.parent)
    with out_path.open("w", encoding="utf-8") as handle:
        json.dump(payload, handle, indent=2, ensure_ascii=False)


def read_input_text(path: str | Path | None = None) -> str:
    """Read the whole input as UTF-8 text.

    ``None`` or ``"-"`` reads standard input to end of stream. Decoding is
    strict; undecodable bytes raise ``UnicodeDecodeError`` like any other read
    failure.
    """
    if path is None or str(path) == STDIN_MARKER:
        return sys.stdin.buffer.read().decode("utf-8")
    with Path(path).open("r", encoding="utf-8", newline="") as handle:
        return handle.read()


def source_label(path: str | Path | None) -> str:
    if path is None or str(path) == STDIN_MARKER:
        return "<stdin>"
    return str(path)
