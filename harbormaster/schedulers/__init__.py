"""Scheduler adapters and discriminator dispatch."""

from harbormaster.exceptions import InvalidScheduler
from harbormaster.models import Scheduler
from harbormaster.schedulers.base import ClusterListing, SchedulerAdapter
from harbormaster.schedulers.ecs import EcsAdapter
from harbormaster.schedulers.eks import EksAdapter

__all__ = [
    "ClusterListing",
    "EcsAdapter",
    "EksAdapter",
    "SchedulerAdapter",
    "build_adapter",
    "resolve_scheduler",
]


def resolve_scheduler(value) -> Scheduler:
    """Parse a caller-supplied scheduler discriminator.

    Raises:
        InvalidScheduler: If ``value`` is not a known scheduler
    """
    if isinstance(value, Scheduler):
        return value
    try:
        return Scheduler(value)
    except ValueError:
        allowed = ", ".join(s.value for s in Scheduler)
        raise InvalidScheduler(f"Invalid scheduler '{value}'", f"Expected one of: {allowed}")


def build_adapter(scheduler: Scheduler, clients, **kwargs) -> SchedulerAdapter:
    """Create the adapter for ``scheduler`` from a request's BackendClients."""
    if scheduler == Scheduler.ECS:
        return EcsAdapter(clients.ecs, clients.deadline)
    if scheduler == Scheduler.EKS:
        return EksAdapter(clients.eks, clients.sts, clients.deadline, **kwargs)
    raise InvalidScheduler(f"Invalid scheduler '{scheduler}'")
