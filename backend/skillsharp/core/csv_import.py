"""MCQ CSV Import — pure parsing and row validation for bulk question uploads.

Invariants:
    - Header names matched case- and whitespace-insensitively
    - Line numbers are 1-based with the header on line 1
    - Blank rows are skipped, never reported
    - parse_mcq_csv never raises for bad rows; it collects row errors
    - ensure_importable raises CsvImportError if anything at all is wrong (all-or-nothing)
"""

import csv
import io
from dataclasses import dataclass, field

from skillsharp.core.errors import CsvImportError
from skillsharp.core.scoring import normalize_option


REQUIRED_COLUMNS: tuple[str, ...] = (
    "question", "option_a", "option_b", "option_c", "option_d", "correct_option",
)
OPTIONAL_COLUMNS: tuple[str, ...] = ("explanation",)


@dataclass(frozen=True)
class McqRow:
    question: str
    option_a: str
    option_b: str
    option_c: str
    option_d: str
    correct_option: str
    explanation: str | None = None

    def as_dict(self) -> dict:
        return {
            "question": self.question,
            "option_a": self.option_a,
            "option_b": self.option_b,
            "option_c": self.option_c,
            "option_d": self.option_d,
            "correct_option": self.correct_option,
            "explanation": self.explanation,
        }


@dataclass
class CsvParseResult:
    rows: list[McqRow] = field(default_factory=list)
    errors: list[dict] = field(default_factory=list)
    missing_columns: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors and not self.missing_columns and bool(self.rows)


def decode_upload(raw: bytes) -> str:
    """Decode an uploaded file as UTF-8, tolerating a BOM."""
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise CsvImportError("CSV file must be UTF-8 encoded")


def _normalize_header(name: str | None) -> str:
    return (name or "").strip().lower().replace(" ", "_")


def parse_mcq_csv(text: str) -> CsvParseResult:
    """Parse CSV text into MCQ rows plus per-line errors."""
    result = CsvParseResult()
    reader = csv.reader(io.StringIO(text.lstrip("\ufeff")))
    try:
        header = next(reader)
    except StopIteration:
        result.missing_columns = list(REQUIRED_COLUMNS)
        return result

    columns = [_normalize_header(h) for h in header]
    result.missing_columns = [c for c in REQUIRED_COLUMNS if c not in columns]
    if result.missing_columns:
        return result
    index = {name: i for i, name in enumerate(columns) if name}

    # a quoted cell may span lines; report where each record starts
    next_line = reader.line_num + 1
    for raw_row in reader:
        line_no, next_line = next_line, reader.line_num + 1
        if not any(cell.strip() for cell in raw_row):
            continue
        row, error = _parse_row(raw_row, index)
        if error:
            result.errors.append({"line": line_no, "message": error})
        else:
            result.rows.append(row)
    return result


def _cell(raw_row: list[str], index: dict[str, int], name: str) -> str:
    position = index.get(name)
    if position is None or position >= len(raw_row):
        return ""
    return raw_row[position].strip()


def _parse_row(raw_row: list[str], index: dict[str, int]) -> tuple[McqRow | None, str | None]:
    values = {name: _cell(raw_row, index, name) for name in REQUIRED_COLUMNS}
    empty = [name for name, value in values.items() if not value]
    if empty:
        return None, f"missing value for {', '.join(empty)}"
    try:
        correct = normalize_option(values["correct_option"])
    except ValueError as e:
        return None, str(e)
    explanation = _cell(raw_row, index, "explanation") or None
    return McqRow(
        question=values["question"],
        option_a=values["option_a"],
        option_b=values["option_b"],
        option_c=values["option_c"],
        option_d=values["option_d"],
        correct_option=correct,
        explanation=explanation,
    ), None


def ensure_importable(result: CsvParseResult, max_rows: int) -> list[McqRow]:
    """Return the rows if the whole file is importable, else raise CsvImportError."""
    if result.missing_columns:
        raise CsvImportError(
            f"CSV is missing required columns: {', '.join(result.missing_columns)}",
        )
    if result.errors:
        raise CsvImportError(
            f"CSV has {len(result.errors)} invalid row(s)", result.errors,
        )
    if not result.rows:
        raise CsvImportError("CSV contains no questions")
    if len(result.rows) > max_rows:
        raise CsvImportError(
            f"CSV has {len(result.rows)} questions; the limit is {max_rows}",
        )
    return result.rows
