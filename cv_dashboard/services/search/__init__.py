"""
Semantic search over CV profiles.

The provider ranks candidates; this package correlates its hits back to
profile ids, filters and orders the current list, and decides what to show
when the provider is unavailable.
"""

from cv_dashboard.services.search.client import SearchProviderClient
from cv_dashboard.services.search.ranking import SearchRankingEngine, apply_ranking, parse_results
from cv_dashboard.services.search.session import SearchSession

__all__ = [
    "SearchProviderClient",
    "SearchRankingEngine",
    "SearchSession",
    "apply_ranking",
    "parse_results",
]
