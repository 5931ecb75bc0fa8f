from __future__ import annotations

import argparse
from pathlib import Path
import sys
from typing import Any, Iterator

import jsonschema

if __package__ is None or __package__ == "":
    sys.path.append(str(Path(__file__).resolve().parents[2]))

from scripts.passports.common import (
    STDIN_MARKER,
    now_iso,
    read_input_text,
    read_json,
    source_label,
    write_json,
)
from scripts.passports.rules import REQUIRED_FIELDS, field_is_valid, field_reason

RECORD_SEPARATOR = "\n\n"
FIELD_SEPARATOR = ":"
REASON_EMPTY_TOKEN = "empty_token"
DEFAULT_SCHEMA_PATH = Path(__file__).resolve().with_name("passport_report.schema.json")


class ReportValidationError(ValueError):
    def __init__(self, issues: list[str]) -> None:
        super().__init__(f"report failed schema validation with {len(issues)} issue(s)")
        self.issues = issues


def split_records(text: str) -> Iterator[str]:
    # Empty input still yields one (empty, invalid) record.
    yield from text.split(RECORD_SEPARATOR)


def tokenize_record(record: str) -> list[str]:
    return record.replace("\n", " ").split(" ")


def split_field(token: str) -> tuple[str, str | None]:
    key, separator, value = token.partition(FIELD_SEPARATOR)
    if not separator:
        return key, None
    return key, value


def field_passes(token: str) -> bool:
    key, value = split_field(token)
    return field_is_valid(key, value)


def validate_record(record: str) -> bool:
    """A record is valid when exactly as many tokens pass as there are required fields.

    Passing tokens are counted, not distinct keys, so a repeated valid key can
    make up for a missing one.
    """
    passing = sum(1 for token in tokenize_record(record) if field_passes(token))
    return passing == len(REQUIRED_FIELDS)


def count_valid_passports(text: str) -> int:
    return sum(1 for record in split_records(text) if validate_record(record))


def explain_token(token: str) -> dict[str, Any]:
    key, value = split_field(token)
    reason = REASON_EMPTY_TOKEN if token == "" else field_reason(key, value)
    return {
        "token": token,
        "key": key,
        "value": value,
        "passed": reason is None,
        "reason_code": reason,
    }


def explain_record(record: str, record_index: int = 0) -> dict[str, Any]:
    verdicts = [explain_token(token) for token in tokenize_record(record)]
    passing_count = sum(1 for verdict in verdicts if verdict["passed"])
    passed_keys = {verdict["key"] for verdict in verdicts if verdict["passed"]}
    return {
        "record_index": record_index,
        "valid": passing_count == len(REQUIRED_FIELDS),
        "passing_count": passing_count,
        "missing_fields": sorted(key for key in REQUIRED_FIELDS if key not in passed_keys),
        "tokens": verdicts,
    }


def build_report(text: str, source: str = "<stdin>") -> dict[str, Any]:
    records = [explain_record(record, idx) for idx, record in enumerate(split_records(text))]
    valid_count = sum(1 for record in records if record["valid"])
    return {
        "generated_at": now_iso(),
        "source": source,
        "stats": {
            "record_count": len(records),
            "valid_count": valid_count,
            "invalid_count": len(records) - valid_count,
        },
        "records": records,
    }


def _issue_location(issue: jsonschema.ValidationError) -> str:
    # records.3.tokens.0.reason_code style, matching the report's own nesting.
    return ".".join(str(part) for part in issue.absolute_path) or "<root>"


def validate_report(payload: dict[str, Any], schema: dict[str, Any]) -> list[str]:
    """Check a passport report against its schema.

    Issues come back ordered by where they sit in the report, so problems in
    ``stats`` or a given record's tokens read together.
    """
    validator = jsonschema.Draft202012Validator(schema)
    issues = sorted(validator.iter_errors(payload), key=lambda issue: [str(part) for part in issue.absolute_path])
    return [f"schema_error at {_issue_location(issue)}: {issue.message}" for issue in issues]


def write_report(
    text: str,
    out_path: str | Path,
    source: str = "<stdin>",
    schema_path: str | Path = DEFAULT_SCHEMA_PATH,
) -> Path:
    payload = build_report(text, source=source)
    issues = validate_report(payload, read_json(schema_path))
    if issues:
        raise ReportValidationError(issues)
    report_path = Path(out_path)
    write_json(report_path, payload)
    return report_path


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Count passport records that pass field validation.")
    parser.add_argument(
        "--input",
        default=STDIN_MARKER,
        help="Batch file to read; '-' reads standard input.",
    )
    parser.add_argument("--report", default=None, help="Optional path for a per-record JSON report.")
    parser.add_argument(
        "--schema",
        default=str(DEFAULT_SCHEMA_PATH),
        help="JSON schema used to check the report before writing it.",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    text = read_input_text(args.input)
    print(count_valid_passports(text))

    if not args.report:
        return
    try:
        report_path = write_report(
            text,
            out_path=args.report,
            source=source_label(args.input),
            schema_path=args.schema,
        )
    except ReportValidationError as exc:
        for issue in exc.issues:
            print(f"[ERROR] {issue}", file=sys.stderr)
        raise SystemExit(1) from exc
    print(f"Report written to {report_path}", file=sys.stderr)


if __name__ == "__main__":
    main()
