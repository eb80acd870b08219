"""
Caching Package - Shared Caches for Immutable Artifacts.

Components:
    - ExpressionCache: LRU cache of parsed expressions keyed by source
"""

from pipeline_dispatcher.caching.expression_cache import (
    CacheConfig,
    CacheStats,
    ExpressionCache,
    default_cache,
)

__all__ = ["CacheConfig", "CacheStats", "ExpressionCache", "default_cache"]
