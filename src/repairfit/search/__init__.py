from .local import SearchResult, run_search

__all__ = ["SearchResult", "run_search"]
