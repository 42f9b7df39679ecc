"""Transport-neutral handlers for the search, health, metrics and info endpoints.

Each handler returns ``(status_code, payload)`` so any web layer (or the
CLI) can serve it.
"""

from __future__ import annotations

import logging
import os
import sys
import time
from datetime import datetime, timezone
from typing import Any

from personfinder import __version__
from personfinder.metrics import MetricsCollector
from personfinder.repository import PersonRepository
from personfinder.usecase import INTERNAL_ERROR_MESSAGE, SearchPersonUseCase
from personfinder.utils.privacy import redact_query

logger = logging.getLogger(__name__)

ENDPOINTS: dict[str, str] = {
    "POST /api/search": "Search a person by email or company",
    "GET /health": "Application status",
    "GET /metrics": "System metrics",
    "GET /api/info": "API information",
}


class SearchController:
    def __init__(
        self,
        use_case: SearchPersonUseCase,
        metrics: MetricsCollector,
        repository: PersonRepository,
        *,
        provider_names: list[str],
        environment: str | None = None,
    ) -> None:
        self._use_case = use_case
        self._metrics = metrics
        self._repository = repository
        self._provider_names = list(provider_names)
        self._environment = environment or os.getenv("PERSONFINDER_ENV", "development")
        self._started = time.monotonic()

    async def search(self, body: Any) -> tuple[int, dict[str, Any]]:
        started = time.perf_counter()
        self._metrics.increment("search_requests_total")

        query = body.get("query") if isinstance(body, dict) else None
        search_type = body.get("type") if isinstance(body, dict) else None
        if not query or not search_type:
            self._metrics.increment("search_requests_invalid")
            return 400, {"success": False, "error": "query and type are required"}

        extra = {"query_type": str(search_type)}
        logger.info(
            "Search request received for %s", redact_query(str(query), str(search_type)),
            extra=extra,
        )

        try:
            result = await self._use_case.execute(query, search_type)
        except Exception:
            self._metrics.increment("search_requests_error")
            logger.exception("Unhandled error in search endpoint", extra=extra)
            return 500, {"success": False, "error": INTERNAL_ERROR_MESSAGE}

        if result.success:
            self._metrics.increment("search_requests_successful")
            self._metrics.increment("search_cache_hits" if result.cached else "search_cache_misses")
        elif result.error_kind == "internal":
            self._metrics.increment("search_requests_error")
        else:
            self._metrics.increment("search_requests_failed")

        logger.info(
            "Search finished success=%s cached=%s", result.success, result.cached,
            extra={**extra, "duration_ms": round((time.perf_counter() - started) * 1000)},
        )
        status = 500 if result.error_kind == "internal" else 200
        return status, result.to_json()

    def health(self) -> tuple[int, dict[str, Any]]:
        return 200, {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "uptime": round(time.monotonic() - self._started, 3),
            "memory": _memory_usage(),
            "version": __version__,
        }

    async def metrics(self) -> tuple[int, str]:
        self._metrics.set_gauge("providers_configured", len(self._provider_names))
        self._metrics.set_gauge("cache_entries", await self._repository.count())
        return 200, self._metrics.render()

    def info(self) -> tuple[int, dict[str, Any]]:
        return 200, {
            "service": "PersonFinder API",
            "version": __version__,
            "description": "Find contact information about a person by email or company",
            "endpoints": dict(ENDPOINTS),
            "providers": list(self._provider_names),
            "environment": self._environment,
        }


def _memory_usage() -> dict[str, int]:
    """Peak resident set size of this process, in bytes."""
    if sys.platform == "win32":
        return {}
    import resource

    peak = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
    # ru_maxrss is kilobytes on Linux, bytes on macOS
    return {"max_rss": peak if sys.platform == "darwin" else peak * 1024}
