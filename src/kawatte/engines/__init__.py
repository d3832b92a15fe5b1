"""Core engines: tree traversal filter and replacement automaton."""

from kawatte.engines.replacer import Replacer
from kawatte.engines.traversal import TraversalEvent, TraversalReport, TreeFilter, select

__all__ = ["Replacer", "TraversalEvent", "TraversalReport", "TreeFilter", "select"]
