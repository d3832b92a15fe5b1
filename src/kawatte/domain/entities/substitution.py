"""Substitution pair entity — one immutable ``old -> new`` mapping."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from kawatte.shared.exceptions import InvalidSubstitutionError


@dataclass(frozen=True)
class SubstitutionPair:
    """A single literal substitution.

    ``old`` must be non-empty; ``new`` may be empty, which deletes every
    occurrence of ``old``.
    """

    old: str
    new: str

    def __post_init__(self) -> None:
        if not isinstance(self.old, str) or not isinstance(self.new, str):
            raise InvalidSubstitutionError(
                "substitution fields must be strings",
                context={"old": repr(self.old), "new": repr(self.new)},
            )
        if self.old == "":
            raise InvalidSubstitutionError(
                "substitution pattern must not be empty",
                context={"new": self.new},
            )

    def encoded(self, encoding: str = "utf-8") -> tuple[bytes, bytes]:
        return self.old.encode(encoding), self.new.encode(encoding)


def as_pairs(pairs: Iterable[SubstitutionPair | tuple[str, str]]) -> tuple[SubstitutionPair, ...]:
    """Normalise an iterable of pairs or 2-tuples into a tuple of entities, keeping order."""
    out: list[SubstitutionPair] = []
    for item in pairs:
        if isinstance(item, SubstitutionPair):
            out.append(item)
        else:
            old, new = item
            out.append(SubstitutionPair(old=old, new=new))
    return tuple(out)
