"""Field transformers: one pure function per TransformKind."""

from __future__ import annotations

import math
import re
import unicodedata
from typing import Any, Callable, Mapping, NamedTuple

from models import TransformKind

Transformer = Callable[[str, Mapping[str, Any]], Any]

_ISO_DATE_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
# Longest leading float literal, the way the export tool parses numbers.
_FLOAT_PREFIX_RE = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_COMBINING_MARKS_RE = re.compile("[\u0300-\u036f]")
_YEAR_TOKEN_RE = re.compile(r"[0-9]{2}")

SPANISH_MONTHS: dict[str, int] = {
    "ene": 1,
    "feb": 2,
    "mar": 3,
    "abr": 4,
    "may": 5,
    "jun": 6,
    "jul": 7,
    "ago": 8,
    "sep": 9,
    "oct": 10,
    "nov": 11,
    "dic": 12,
}


class FormatError(ValueError):
    """Raised when a raw value cannot be normalized."""


class InvalidDateFormat(FormatError):
    pass


class MonthYear(NamedTuple):
    month: int
    year: int


def passthrough(raw: str, params: Mapping[str, Any] | None = None) -> str:
    return raw


def normalize_text(raw: str, params: Mapping[str, Any] | None = None) -> str:
    """Uppercase and strip accents, optionally removing dots/commas and joining words with '_'.

    Steps run in a fixed order: decompose, drop punctuation, uppercase,
    collapse whitespace, then strip combining marks and line breaks.
    """
    params = params or {}
    replace_spaces = bool(params.get("replace_spaces", False))
    replace_dots = bool(params.get("replace_dots", True))

    result = unicodedata.normalize("NFD", str(raw))
    if replace_dots:
        result = result.replace(".", "").replace(",", "")
    result = result.upper()
    if replace_spaces:
        result = re.sub(r"\s+", "_", result)
    result = _COMBINING_MARKS_RE.sub("", result)
    return result.replace("\n", "").replace("\r", "")


def parse_decimal(raw: str, params: Mapping[str, Any] | None = None) -> float | None:
    """Parse a decimal that may use a comma separator. Returns None when unparsable."""
    sanitized = str(raw).replace(",", ".", 1)
    match = _FLOAT_PREFIX_RE.match(sanitized)
    if match is None:
        return None
    value = float(match.group(1))
    if not math.isfinite(value):
        return None
    return value


def reformat_date(raw: str, params: Mapping[str, Any] | None = None) -> str:
    """Convert 'dd/mm/yyyy' to 'yyyy-mm-dd'. ISO input is returned unchanged."""
    if _ISO_DATE_RE.fullmatch(raw):
        return raw

    parts = raw.split("/")
    if len(parts) != 3:
        raise InvalidDateFormat(f"Invalid date format {raw!r}, expected dd/mm/yyyy")

    day, month, year = parts
    return f"{year}-{month.rjust(2, '0')}-{day.rjust(2, '0')}"


def split_month_year(raw: str, params: Mapping[str, Any] | None = None) -> MonthYear:
    """Split a 'mon-yy' token such as 'jun-23' into MonthYear(6, 2023)."""
    tokens = raw.lower().split("-")
    month_token = tokens[0]
    year_token = tokens[1] if len(tokens) > 1 else ""

    month = SPANISH_MONTHS.get(month_token)
    if month is None or not _YEAR_TOKEN_RE.fullmatch(year_token):
        raise InvalidDateFormat(f'Invalid date format {raw!r}, expected "mon-yy"')

    return MonthYear(month=month, year=int("20" + year_token))


TRANSFORMERS: dict[TransformKind, Transformer] = {
    TransformKind.PASSTHROUGH: passthrough,
    TransformKind.TEXT_NORMALIZE: normalize_text,
    TransformKind.DECIMAL: parse_decimal,
    TransformKind.DATE: reformat_date,
    TransformKind.MONTH_YEAR_TOKEN: split_month_year,
}


def check_registry(registry: Mapping[TransformKind, Transformer]) -> None:
    """Raise RuntimeError unless every TransformKind has a transformer."""
    missing = set(TransformKind) - set(registry)
    if missing:
        names = ", ".join(sorted(kind.name for kind in missing))
        raise RuntimeError(f"No transformer registered for {names}")


check_registry(TRANSFORMERS)


def apply_transform(kind: TransformKind, raw: str, params: Mapping[str, Any] | None = None) -> Any:
    return TRANSFORMERS[kind](raw, params or {})
