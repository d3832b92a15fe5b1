"""Substitution loader — read ``old,new`` pairs from a CSV file.

Each record must have exactly two fields.  Standard CSV quoting applies, so
patterns containing commas, quotes or newlines are written as quoted fields.
Blank lines are ignored.
"""
from __future__ import annotations

import csv
import os
from typing import Any

from kawatte.domain.entities.substitution import SubstitutionPair
from kawatte.infrastructure.logging import get_logger
from kawatte.shared.exceptions import InvalidSubstitutionError, PatternFileError

FIELDS_PER_RECORD = 2


def load_substitutions(path: str | os.PathLike[str], log: Any = None) -> tuple[SubstitutionPair, ...]:
    """Load the ordered substitution pairs stored in *path*.

    Raises:
        PatternFileError: the file cannot be opened, is not valid CSV, has a
            record that is not exactly two fields, or has an empty pattern.
    """
    log = log if log is not None else get_logger(__name__)
    source = os.fspath(path)

    try:
        f = open(source, "r", encoding="utf-8-sig", newline="")
    except OSError as exc:
        raise PatternFileError(
            f"opening substitution patterns file: {exc}",
            context={"path": source},
        ) from exc

    pairs: list[SubstitutionPair] = []
    with f:
        reader = csv.reader(f, strict=True)
        try:
            for record in reader:
                if not record:
                    continue
                pairs.append(_to_pair(record, source, reader.line_num))
        except (csv.Error, UnicodeDecodeError) as exc:
            raise PatternFileError(
                f"reading substitution patterns file {source!r}: {exc}",
                context={"path": source, "line": reader.line_num},
            ) from exc

    if not pairs:
        log.warning("substitutions.none_found", path=source)
    else:
        log.info("substitutions.loaded", path=source, count=len(pairs))
    return tuple(pairs)


def _to_pair(record: list[str], source: str, line: int) -> SubstitutionPair:
    if len(record) != FIELDS_PER_RECORD:
        raise PatternFileError(
            f"reading substitution patterns file {source!r}: record on line {line}: "
            f"wrong number of fields (expected {FIELDS_PER_RECORD}, got {len(record)})",
            context={"path": source, "line": line, "fields": len(record)},
        )
    try:
        return SubstitutionPair(old=record[0], new=record[1])
    except InvalidSubstitutionError as exc:
        raise PatternFileError(
            f"reading substitution patterns file {source!r}: record on line {line}: {exc.message}",
            context={"path": source, "line": line},
        ) from exc


__all__ = ["FIELDS_PER_RECORD", "load_substitutions"]
