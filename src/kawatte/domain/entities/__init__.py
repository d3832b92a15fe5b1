from kawatte.domain.entities.filters import GlobFilterSet, first_match
from kawatte.domain.entities.substitution import SubstitutionPair, as_pairs

__all__ = ["GlobFilterSet", "SubstitutionPair", "as_pairs", "first_match"]
