"""Search index, query analysis and ranking components."""

from .analysis import QueryAnalysis, analyze_query, generate_search_suggestions
from .engine import SearchEngine, SearchResult, SearchResults
from .fuzzy_index import FuzzyIndex, IndexBuildError
from .ranking import Strategy

__all__ = [
    "FuzzyIndex",
    "IndexBuildError",
    "QueryAnalysis",
    "SearchEngine",
    "SearchResult",
    "SearchResults",
    "Strategy",
    "analyze_query",
    "generate_search_suggestions",
]
