"""Helper functions for tracking page fetch metrics."""

from __future__ import annotations

from contextlib import asynccontextmanager
import logging
import time
from typing import TYPE_CHECKING

from crowdstrike_connector.core.exceptions import ConnectorException
from crowdstrike_connector.infra.metrics import prometheus

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)


class PageFetchTracker:
    """Mutable holder the tracked block uses to report its record count."""

    def __init__(self) -> None:
        self.record_count = 0


@asynccontextmanager
async def track_page_fetch(entity: str) -> AsyncIterator[PageFetchTracker]:
    """Track duration, outcome and record count of one page fetch.

    The outcome label is ``success`` or the ``type`` of the ConnectorException
    raised inside the block; anything else is labelled ``error``.

    Example:
            async with track_page_fetch("user") as tracker:
                page = await datasource.get_page(request)
                tracker.record_count = len(page.objects)
    """
    tracker = PageFetchTracker()
    start = time.perf_counter()
    outcome = "success"
    try:
        yield tracker
    except ConnectorException as e:
        outcome = e.type
        raise
    except Exception:
        outcome = "error"
        raise
    finally:
        duration = time.perf_counter() - start
        prometheus.page_fetch_total.labels(entity=entity, outcome=outcome).inc()
        prometheus.page_fetch_duration_seconds.labels(entity=entity).observe(duration)
        if outcome == "success":
            prometheus.page_records_returned.labels(entity=entity).observe(tracker.record_count)
        logger.debug(
            "Tracked page fetch",
            extra={"entity": entity, "outcome": outcome, "duration": duration},
        )


def track_datasource_request(surface: str, status: int | str) -> None:
    """Count one HTTP request sent to the datasource.

    Args:
        surface: ``graphql`` or ``rest``
        status: Response status code, or a short failure label
    """
    prometheus.datasource_requests_total.labels(surface=surface, status=str(status)).inc()
