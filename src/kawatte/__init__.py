"""kawatte — recursive, filtered, simultaneous multi-pattern find-and-replace.

Library use::

    from kawatte import GlobFilterSet, Orchestrator, Replacer, select

    replacer = Replacer.build([("a", "b"), ("b", "c"), ("c", "a")])
    replacer.apply("abcdef")  # "bcadef"
"""

from __future__ import annotations

__version__ = "0.3.0"

from kawatte.application.orchestrator import FileResult, Orchestrator, RunSummary  # noqa: E402
from kawatte.domain.entities import GlobFilterSet, SubstitutionPair  # noqa: E402
from kawatte.engines.replacer import Replacer  # noqa: E402
from kawatte.engines.traversal import TraversalReport, TreeFilter, select  # noqa: E402
from kawatte.infrastructure.loaders import load_substitutions  # noqa: E402

__all__ = [
    "FileResult",
    "GlobFilterSet",
    "Orchestrator",
    "Replacer",
    "RunSummary",
    "SubstitutionPair",
    "TraversalReport",
    "TreeFilter",
    "__version__",
    "load_substitutions",
    "select",
]
