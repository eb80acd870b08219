"""
Expression Cache - Shared LRU Cache for Parsed Expressions.

Identical source strings share one parsed Expression. Parsed trees are
immutable, so entries never expire; the cache only bounds its size.

Design Notes:
    - LRU eviction when max entries exceeded
    - Thread-safe with reentrant lock
    - Hit/miss statistics for observability
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Optional, Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from pipeline_dispatcher.expression.ast import Expression

logger = logging.getLogger(__name__)

DEFAULT_MAX_ENTRIES = 4096


class ExpressionCacheProtocol(Protocol):
    """Protocol for expression cache implementations."""

    def get_or_parse(
        self, source: str, parser: Callable[[str], "Expression"]
    ) -> "Expression":
        """Return the cached expression for source, parsing on miss."""
        ...

    def clear(self) -> None:
        """Clear all cache entries."""
        ...


@dataclass
class CacheConfig:
    """Configuration for the expression cache."""

    max_entries: int = DEFAULT_MAX_ENTRIES

    # Whether to enable caching
    enabled: bool = True

    # Log cache hits/misses
    log_access: bool = False


@dataclass
class CacheStats:
    """Cache statistics."""

    hits: int = 0
    misses: int = 0
    evictions: int = 0
    current_entries: int = 0

    @property
    def hit_rate(self) -> float:
        """Calculate cache hit rate."""
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0


class ExpressionCache:
    """
    LRU cache of parsed expressions keyed by source text.

    Parse failures are not cached: a ParseError propagates to the caller
    every time the malformed source is submitted.
    """

    def __init__(self, config: Optional[CacheConfig] = None) -> None:
        """
        Initialize expression cache.

        Args:
            config: Cache configuration
        """
        self.config = config or CacheConfig()
        self._cache: "OrderedDict[str, Expression]" = OrderedDict()
        self._lock = threading.RLock()
        self._stats = CacheStats()

    def get(self, source: str) -> Optional["Expression"]:
        """
        Get a parsed expression from cache.

        Args:
            source: Expression source text

        Returns:
            Cached Expression or None if not present
        """
        if not self.config.enabled:
            return None

        with self._lock:
            entry = self._cache.get(source)
            if entry is None:
                self._stats.misses += 1
                if self.config.log_access:
                    logger.debug(f"Expression cache MISS: {source!r}")
                return None

            self._cache.move_to_end(source)
            self._stats.hits += 1
            if self.config.log_access:
                logger.debug(f"Expression cache HIT: {source!r}")
            return entry

    def set(self, source: str, expression: "Expression") -> None:
        """Store a parsed expression."""
        if not self.config.enabled:
            return

        with self._lock:
            self._cache[source] = expression
            self._cache.move_to_end(source)
            while len(self._cache) > self.config.max_entries:
                evicted, _ = self._cache.popitem(last=False)
                self._stats.evictions += 1
                logger.debug(f"Expression cache evicted: {evicted!r}")
            self._stats.current_entries = len(self._cache)

    def get_or_parse(
        self, source: str, parser: Callable[[str], "Expression"]
    ) -> "Expression":
        """
        Return the cached expression for source, parsing on miss.

        Args:
            source: Expression source text
            parser: Uncached parse function

        Returns:
            Parsed Expression

        Raises:
            ParseError: If source is malformed
        """
        cached = self.get(source)
        if cached is not None:
            return cached

        expression = parser(source)
        self.set(source, expression)
        return expression

    def invalidate(self, source: str) -> bool:
        """Remove one entry. Returns True if it was present."""
        with self._lock:
            if source not in self._cache:
                return False
            del self._cache[source]
            self._stats.current_entries = len(self._cache)
            return True

    def resize(self, max_entries: int) -> None:
        """Change the entry bound, evicting least recently used entries as needed."""
        if max_entries < 1:
            raise ValueError(f"max_entries must be positive, got {max_entries}")

        with self._lock:
            self.config.max_entries = max_entries
            while len(self._cache) > max_entries:
                self._cache.popitem(last=False)
                self._stats.evictions += 1
            self._stats.current_entries = len(self._cache)

    def clear(self) -> None:
        """Clear all cache entries."""
        with self._lock:
            self._cache.clear()
            self._stats.current_entries = 0
            logger.info("Expression cache cleared")

    def get_stats(self) -> CacheStats:
        """Get a snapshot of cache statistics."""
        with self._lock:
            return CacheStats(
                hits=self._stats.hits,
                misses=self._stats.misses,
                evictions=self._stats.evictions,
                current_entries=len(self._cache),
            )

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def __contains__(self, source: object) -> bool:
        with self._lock:
            return source in self._cache


_default_cache = ExpressionCache()


def default_cache() -> ExpressionCache:
    """Process-wide cache used when no explicit cache is supplied."""
    return _default_cache
