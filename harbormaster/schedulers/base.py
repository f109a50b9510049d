"""Common interface for scheduler adapters."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from pydantic import ValidationError

from harbormaster.credentials import ClusterConnection
from harbormaster.exceptions import BackendFault, FaultKind
from harbormaster.logging_config import get_logger
from harbormaster.models import AggregationWarning, Cluster, Node, Scheduler, Service

logger = get_logger(__name__)


@dataclass
class ClusterListing:
    """Normalized clusters plus the raw connection metadata some schedulers need later."""

    clusters: list[Cluster] = field(default_factory=list)
    connections: list[ClusterConnection] = field(default_factory=list)

    def extend(self, other: "ClusterListing") -> None:
        self.clusters.extend(other.clusters)
        self.connections.extend(other.connections)

    def connection_for(self, cluster: Cluster) -> ClusterConnection | None:
        """Find the raw metadata for an EKS cluster by ARN."""
        if cluster.scheduler != Scheduler.EKS:
            return None
        return next((c for c in self.connections if c.arn == cluster.arn), None)


def chunked(items: list, size: int):
    """Yield successive ``size``-sized slices of ``items``."""
    for start in range(0, len(items), size):
        yield items[start : start + size]


class SchedulerAdapter(ABC):
    """Translates one scheduler's native API into normalized entities.

    Adapters are built per request. Failures are raised as typed
    harbormaster exceptions; absorbable sub-failures (e.g. one namespace
    that cannot be listed) are recorded and handed out by drain_warnings().
    """

    scheduler: Scheduler

    def __init__(self, deadline):
        self.deadline = deadline
        self._warnings: list[AggregationWarning] = []

    @abstractmethod
    def list_clusters(self) -> ClusterListing:
        """List every cluster this scheduler knows about."""

    @abstractmethod
    def describe_cluster(self, name: str) -> ClusterListing:
        """Describe one cluster by name, raising ResourceNotFound if absent."""

    @abstractmethod
    def list_nodes(self, cluster: Cluster, connection: ClusterConnection | None = None) -> list[Node]:
        """List the nodes registered to ``cluster``."""

    @abstractmethod
    def list_services(
        self, cluster: Cluster, connection: ClusterConnection | None = None
    ) -> list[Service]:
        """List the services running in ``cluster``."""

    def normalize(self, operation: str, factory, record, *args):
        """Build one normalized entity from a raw backend record.

        A record missing required fields is reported as a BackendFault for
        ``operation`` so it is isolated like any other backend failure.
        """
        try:
            return factory(record, *args)
        except (KeyError, TypeError, AttributeError, ValidationError) as e:
            logger.error(f"{operation} returned a malformed record: {e!r}")
            raise BackendFault(
                f"{operation} returned a malformed record",
                str(e),
                fault=FaultKind.UNKNOWN,
                scheduler=self.scheduler.value,
                operation=operation,
            )

    def warn(self, error, cluster: str = "") -> None:
        self._warnings.append(
            AggregationWarning.from_error(error, scheduler=self.scheduler.value, cluster=cluster)
        )

    def drain_warnings(self) -> list[AggregationWarning]:
        """Return and forget the warnings recorded so far."""
        warnings, self._warnings = self._warnings, []
        return warnings
