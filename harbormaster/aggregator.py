"""Fan-out over scheduler adapters and best-effort merge of their results."""

from harbormaster.exceptions import DeadlineExceeded, HarbormasterError, InvalidScheduler
from harbormaster.logging_config import get_logger
from harbormaster.models import AggregateResult, AggregationWarning, Cluster, Node, Service
from harbormaster.models.cluster import Scheduler
from harbormaster.schedulers import (
    ClusterListing,
    SchedulerAdapter,
    build_adapter,
    resolve_scheduler,
)

logger = get_logger(__name__)


class Aggregator:
    """Queries every configured scheduler and merges the normalized results.

    Adapters are consulted in registration order, so ECS results precede
    EKS results. When no scheduler is named, a failing backend or cluster is
    recorded as a warning and the remaining results are still returned.
    Scoped requests (a scheduler, or a scheduler and cluster name) fail as a
    whole instead.
    """

    def __init__(self, adapters: dict[Scheduler, SchedulerAdapter]):
        self.adapters = dict(adapters)

    @classmethod
    def from_clients(cls, clients, schedulers=None, **adapter_kwargs) -> "Aggregator":
        """Build adapters for ``schedulers`` (default: all) from BackendClients."""
        schedulers = schedulers or list(Scheduler)
        return cls({s: build_adapter(s, clients, **adapter_kwargs) for s in schedulers})

    def adapter(self, scheduler) -> SchedulerAdapter:
        scheduler = resolve_scheduler(scheduler)
        if scheduler not in self.adapters:
            raise InvalidScheduler(
                f"Scheduler '{scheduler.value}' is not enabled",
                f"Enabled schedulers: {', '.join(s.value for s in self.adapters)}",
            )
        return self.adapters[scheduler]

    def _cluster_listing(self, scheduler=None) -> tuple[ClusterListing, list[AggregationWarning]]:
        if scheduler is not None:
            return self.adapter(scheduler).list_clusters(), []

        listing = ClusterListing()
        warnings = []
        errors = []
        for key, adapter in self.adapters.items():
            try:
                listing.extend(adapter.list_clusters())
            except DeadlineExceeded:
                raise
            except HarbormasterError as e:
                logger.warning(f"Listing {key.value} clusters failed, continuing: {e.message}")
                warnings.append(AggregationWarning.from_error(e, scheduler=key.value))
                errors.append(e)

        if errors and len(errors) == len(self.adapters):
            logger.error("Every scheduler failed to list clusters")
            raise errors[0]
        return listing, warnings

    def _scope(self, scheduler=None, name=None) -> tuple[ClusterListing, list[AggregationWarning]]:
        if name is None:
            return self._cluster_listing(scheduler)
        if scheduler is None:
            raise InvalidScheduler(
                f"A scheduler is required to look up cluster '{name}'",
                f"Expected one of: {', '.join(s.value for s in Scheduler)}",
            )
        return self.adapter(scheduler).describe_cluster(name), []

    def list_clusters(self, scheduler=None) -> AggregateResult[Cluster]:
        """List clusters from one scheduler, or merge every scheduler's clusters."""
        listing, warnings = self._cluster_listing(scheduler)
        return AggregateResult[Cluster](items=listing.clusters, warnings=warnings)

    def get_cluster(self, scheduler, name: str) -> Cluster:
        """Look up one cluster by its (scheduler, name) key.

        Raises:
            InvalidScheduler: For an unknown scheduler, before any backend call
            ResourceNotFound: If the scheduler has no such cluster
        """
        adapter = self.adapter(scheduler)
        return adapter.describe_cluster(name).clusters[0]

    def _collect(self, method: str, scheduler=None, name=None) -> AggregateResult:
        listing, warnings = self._scope(scheduler, name)
        items = []
        for cluster in listing.clusters:
            adapter = self.adapters[cluster.scheduler]
            connection = listing.connection_for(cluster)
            try:
                items.extend(getattr(adapter, method)(cluster, connection))
            except DeadlineExceeded:
                raise
            except HarbormasterError as e:
                if name is not None:
                    raise
                logger.warning(
                    f"{method} failed for {cluster.scheduler.value} cluster {cluster.name}, "
                    f"continuing: {e.message}"
                )
                warnings.append(
                    AggregationWarning.from_error(
                        e, scheduler=cluster.scheduler.value, cluster=cluster.name
                    )
                )
            finally:
                warnings.extend(adapter.drain_warnings())
        return AggregateResult(items=items, warnings=warnings)

    def list_nodes(self, scheduler=None, name=None) -> AggregateResult[Node]:
        """List nodes across every in-scope cluster."""
        result = self._collect("list_nodes", scheduler, name)
        return AggregateResult[Node](items=result.items, warnings=result.warnings)

    def list_services(self, scheduler=None, name=None) -> AggregateResult[Service]:
        """List services across every in-scope cluster."""
        result = self._collect("list_services", scheduler, name)
        return AggregateResult[Service](items=result.items, warnings=result.warnings)
