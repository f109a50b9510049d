"""Normalized entity models shared by every scheduler."""

from harbormaster.models.cluster import Cluster, Scheduler
from harbormaster.models.node import Node, NodeReadiness
from harbormaster.models.result import AggregateResult, AggregationWarning
from harbormaster.models.service import Service

__all__ = [
    "AggregateResult",
    "AggregationWarning",
    "Cluster",
    "Node",
    "NodeReadiness",
    "Scheduler",
    "Service",
]
