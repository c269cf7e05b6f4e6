"""
Monitoring for the explorer block caches.

Exposes prometheus metrics for the block and summary stores: lookups by
outcome, admission decisions under the confirmation rule, and store sizes.
"""
from typing import Any, Dict

import structlog
from prometheus_client import Counter, Gauge

logger = structlog.get_logger()

CACHE_HITS = Counter('insight_cache_hits_total', 'Total number of cache hits', ['cache_type'])
CACHE_MISSES = Counter('insight_cache_misses_total', 'Total number of cache misses', ['cache_type'])
CACHE_ADMISSIONS = Counter(
    'insight_cache_admissions_total',
    'Entries admitted to a cache',
    ['cache_type']
)
CACHE_REJECTIONS = Counter(
    'insight_cache_rejections_total',
    'Entries refused for having too few confirmations',
    ['cache_type']
)
CACHE_SIZE = Gauge('insight_cache_size', 'Current number of items in cache', ['cache_type'])

# Cache types for metrics
BLOCK_CACHE = 'block'
SUMMARY_CACHE = 'summary'


class CacheMonitor:
    """Records cache activity as prometheus metrics."""

    def record_hit(self, cache_type: str) -> None:
        CACHE_HITS.labels(cache_type=cache_type).inc()

    def record_miss(self, cache_type: str) -> None:
        CACHE_MISSES.labels(cache_type=cache_type).inc()

    def record_admission(self, cache_type: str, size: int) -> None:
        CACHE_ADMISSIONS.labels(cache_type=cache_type).inc()
        CACHE_SIZE.labels(cache_type=cache_type).set(size)

    def record_rejection(self, cache_type: str) -> None:
        CACHE_REJECTIONS.labels(cache_type=cache_type).inc()

    def log_metrics(self, stats: Dict[str, Any]) -> None:
        """Log a cache statistics report."""
        logger.info("cache_metrics_report", **stats)


monitor = CacheMonitor()


def get_monitor() -> CacheMonitor:
    """Get the global cache monitor instance."""
    return monitor
