"""Pass-through metrics sinks. Nothing in the pipeline depends on what they record."""
import logging
from typing import Dict, Optional

logger = logging.getLogger(__name__)

Tags = Optional[Dict[str, str]]


class MetricsSink:
    """Discards everything. Subclass and override to ship metrics somewhere."""

    def increment_counter(self, name: str, value: int = 1, tags: Tags = None) -> None:
        pass

    def record_timing(self, name: str, duration_ms: float, tags: Tags = None) -> None:
        pass

    def record_gauge(self, name: str, value: float, tags: Tags = None) -> None:
        pass


class LoggingMetrics(MetricsSink):
    """Writes every metric to the application log."""

    def increment_counter(self, name: str, value: int = 1, tags: Tags = None) -> None:
        logger.debug("counter %s += %s %s", name, value, tags or {})

    def record_timing(self, name: str, duration_ms: float, tags: Tags = None) -> None:
        logger.info("timing %s = %.1fms %s", name, duration_ms, tags or {})

    def record_gauge(self, name: str, value: float, tags: Tags = None) -> None:
        logger.debug("gauge %s = %s %s", name, value, tags or {})
