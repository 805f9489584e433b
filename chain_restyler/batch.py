"""
Batch restyling of independent fragments.

Fragments share nothing but the frozen catalog, so they are processed
concurrently in a ThreadPoolExecutor. Results come back in input order.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, TimeoutError
from dataclasses import dataclass, field

from .api import RewriteResult, apply, get_default_catalog
from .restyler_logging import LogCategory, get_category_logger
from .rules.base import RewriteWarning, WarningKind
from .rules.catalog import PatternCatalog, load_default_catalog
from .rules.config import StyleConfig

logger = get_category_logger(LogCategory.BATCH)

DEFAULT_MAX_WORKERS = 4


@dataclass
class BatchResult:
    """Results of a batch run, one per input in input order."""

    results: list[RewriteResult] = field(default_factory=list)
    execution_time_ms: float = 0.0

    @property
    def changed_count(self) -> int:
        return sum(1 for r in self.results if r.changed)

    @property
    def error_count(self) -> int:
        return sum(1 for r in self.results if r.syntax_error is not None)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "results": [r.to_dict() for r in self.results],
            "execution_time_ms": self.execution_time_ms,
            "summary": {
                "total": len(self.results),
                "changed": self.changed_count,
                "syntax_errors": self.error_count,
            },
        }


def _timed_out(source: str, timeout_seconds: float) -> RewriteResult:
    message = f"Fragment not processed within {timeout_seconds}s; left unchanged"
    return RewriteResult(
        text=source,
        original=source,
        warnings=[RewriteWarning(WarningKind.TIMED_OUT, message)],
    )


def restyle_many(
    sources: list[str],
    catalog: PatternCatalog | None = None,
    config: StyleConfig | None = None,
    max_workers: int = DEFAULT_MAX_WORKERS,
    max_passes: int | None = None,
    timeout_seconds: float | None = None,
) -> BatchResult:
    """Restyle independent fragments concurrently.

    Args:
        sources: Fragment texts
        catalog: Shared frozen catalog (built from ``config`` if omitted)
        config: Style configuration
        max_workers: Thread pool size
        max_passes: Pass cap forwarded to every fragment
        timeout_seconds: Per-fragment wait; a fragment that exceeds it is
            returned unchanged with a TIMED_OUT warning, and the call does
            not wait for its worker to finish

    Returns:
        BatchResult with one RewriteResult per source, in input order
    """
    if max_workers < 1:
        raise ValueError("max_workers must be at least 1")
    if catalog is None:
        catalog = get_default_catalog() if config is None else load_default_catalog(config)

    start_time = time.time()
    if not sources:
        return BatchResult()

    workers = min(max_workers, len(sources))
    logger.debug(f"Restyling {len(sources)} fragments with {workers} workers")

    results: list[RewriteResult] = []
    executor = ThreadPoolExecutor(max_workers=workers)
    try:
        futures = [
            executor.submit(apply, source, catalog, max_passes, config)
            for source in sources
        ]
        for index, (source, future) in enumerate(zip(sources, futures, strict=True)):
            try:
                results.append(future.result(timeout=timeout_seconds))
            except TimeoutError:
                future.cancel()
                logger.warning(
                    f"Fragment {index} timed out after {timeout_seconds}s",
                    extra={"duration_ms": timeout_seconds * 1000},
                )
                results.append(_timed_out(source, timeout_seconds))
    finally:
        # Timed-out workers finish in the background; their results are dropped.
        executor.shutdown(wait=False, cancel_futures=True)

    return BatchResult(
        results=results,
        execution_time_ms=(time.time() - start_time) * 1000,
    )
