"""Reset harvested metrics from the registry once their values are safely merged."""

from __future__ import annotations

from .extraction import Snapshot
from .logging_setup import get_logger
from .registry import MetricRepository

logger = get_logger(__name__)


class RetentionPolicy:
    def apply(self, registry: MetricRepository, snapshot: Snapshot, delete_on_finish: bool) -> int:
        """Remove every entry named in ``snapshot`` when ``delete_on_finish`` is set.

        Returns the number of names reset.
        """

        if not delete_on_finish:
            return 0

        names = snapshot.names
        for name in names:
            registry.reset(name)
        logger.debug("retention.reset", count=len(names))
        return len(names)


__all__ = ["RetentionPolicy"]
