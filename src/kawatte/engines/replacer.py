"""
Replacement engine — simultaneous multi-pattern literal substitution.

All ``old`` patterns are compiled into one prefix trie.  The scan walks the
input once, left to right.  At every position it follows the trie as deep as
the input allows and keeps the deepest terminal node it passed: that is the
longest pattern starting there.  The pattern is replaced and the scan resumes
after the consumed input, so replacement text is never scanned again.

Equal-length patterns at the same position share one trie node; the first
listed pair claims it and later duplicates are unreachable.

The same engine works on ``str`` and on ``bytes``.  Byte input uses a second
trie built from the UTF-8 encoding of the pairs, so files that do not decode
cleanly are still rewritten byte for byte.
"""
from __future__ import annotations

from typing import Any, Iterable, TypeVar

from kawatte.domain.entities.substitution import SubstitutionPair, as_pairs
from kawatte.infrastructure.logging import get_logger

logger = get_logger(__name__)

AnyText = TypeVar("AnyText", str, bytes)


# ---------------------------------------------------------------------------
# Trie
# ---------------------------------------------------------------------------

class _Node:
    __slots__ = ("children", "replacement")

    def __init__(self) -> None:
        self.children: dict[Any, _Node] = {}
        # None marks a non-terminal node; "" / b"" is a valid deletion.
        self.replacement: Any = None


class _Automaton:
    """Trie over one key alphabet (characters or byte values)."""

    __slots__ = ("root", "first", "max_depth", "size")

    def __init__(self, patterns: Iterable[tuple[Any, Any]]) -> None:
        self.root = _Node()
        self.first: set[Any] = set()
        self.max_depth = 0
        self.size = 0
        for old, new in patterns:
            self._insert(old, new)

    def _insert(self, old: Any, new: Any) -> None:
        node = self.root
        for unit in old:
            node = node.children.setdefault(unit, _Node())
        if node.replacement is not None:
            return
        node.replacement = new
        self.first.add(old[0])
        self.max_depth = max(self.max_depth, len(old))
        self.size += 1

    def longest_match(self, data: Any, start: int) -> tuple[Any, int] | None:
        """Return ``(replacement, end)`` for the longest pattern at *start*."""
        node = self.root
        best: tuple[Any, int] | None = None
        pos = start
        end = len(data)
        while pos < end:
            node = node.children.get(data[pos])
            if node is None:
                break
            pos += 1
            if node.replacement is not None:
                best = (node.replacement, pos)
        return best

    def scan(self, data: Any, empty: Any) -> tuple[Any, int]:
        if self.size == 0 or not data:
            return data, 0

        chunks: list[Any] = []
        count = 0
        run_start = 0
        pos = 0
        end = len(data)
        first = self.first
        while pos < end:
            if data[pos] not in first:
                pos += 1
                continue
            match = self.longest_match(data, pos)
            if match is None:
                pos += 1
                continue
            replacement, consumed_to = match
            if run_start < pos:
                chunks.append(data[run_start:pos])
            chunks.append(replacement)
            count += 1
            pos = run_start = consumed_to

        if count == 0:
            return data, 0
        chunks.append(data[run_start:])
        return empty.join(chunks), count


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

class Replacer:
    """Compiled, immutable set of substitutions.

    Build one with :meth:`build`; apply it to any number of inputs.
    """

    def __init__(self, pairs: tuple[SubstitutionPair, ...], encoding: str = "utf-8") -> None:
        self._pairs = pairs
        self._encoding = encoding
        self._text = _Automaton((p.old, p.new) for p in pairs)
        self._bytes: _Automaton | None = None

    @classmethod
    def build(
        cls,
        pairs: Iterable[SubstitutionPair | tuple[str, str]],
        encoding: str = "utf-8",
    ) -> "Replacer":
        compiled = cls(as_pairs(pairs), encoding=encoding)
        logger.debug(
            "replacer.built",
            pairs=len(compiled._pairs),
            reachable=len(compiled),
            longest=compiled._text.max_depth,
        )
        return compiled

    @property
    def pairs(self) -> tuple[SubstitutionPair, ...]:
        return self._pairs

    def __len__(self) -> int:
        return self._text.size

    def __repr__(self) -> str:
        return f"Replacer(pairs={len(self._pairs)}, reachable={len(self)})"

    def apply(self, text: AnyText) -> AnyText:
        """Return *text* with every pattern replaced in one left-to-right pass."""
        return self.substitute(text)[0]

    def count(self, text: AnyText) -> int:
        """Number of substitutions :meth:`apply` would make on *text*."""
        return self.substitute(text)[1]

    def substitute(self, text: Any) -> tuple[Any, int]:
        """Return ``(replaced_text, substitution_count)`` for *text*."""
        if isinstance(text, str):
            return self._text.scan(text, "")
        if isinstance(text, (bytes, bytearray, memoryview)):
            data = bytes(text)
            return self._byte_automaton().scan(data, b"")
        raise TypeError(f"Replacer.apply expects str or bytes, got {type(text).__name__}")

    def _byte_automaton(self) -> _Automaton:
        if self._bytes is None:
            self._bytes = _Automaton(p.encoded(self._encoding) for p in self._pairs)
        return self._bytes
