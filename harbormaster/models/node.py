"""Data models for normalized nodes (ECS container instances, EKS nodes)."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from harbormaster.models.cluster import Cluster, Scheduler


class NodeReadiness(str, Enum):
    """Readiness of a Kubernetes node, derived from its Ready condition."""

    READY = "Ready"
    NOT_READY = "NotReady"
    UNKNOWN = "Unknown"


def trailing_segment(identifier: str | None) -> str:
    """Return the part of a '/'-separated identifier after the last slash."""
    if not identifier:
        return ""
    return identifier.rsplit("/", 1)[-1]


def readiness_from_conditions(conditions) -> NodeReadiness:
    """Derive node readiness from a list of Kubernetes node conditions.

    Args:
        conditions: Iterable of objects with ``type`` and ``status`` attributes

    Returns:
        READY if the Ready condition is "True", NOT_READY for any other value,
        UNKNOWN when there is no Ready condition at all
    """
    status = NodeReadiness.UNKNOWN
    for condition in conditions or []:
        if condition.type == "Ready":
            status = NodeReadiness.READY if condition.status == "True" else NodeReadiness.NOT_READY
    return status


class Node(BaseModel):
    """A worker instance registered to a cluster."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    arn: str = ""  # EKS nodes have no ARN
    instance_id: str = Field(default="", alias="instanceId")
    scheduler: Scheduler
    status: str
    cluster: Cluster

    def lookup_key(self) -> tuple[str, str]:
        """Return the (scheduler, name) key of the owning cluster."""
        return self.cluster.lookup_key()

    @classmethod
    def from_ecs(cls, data: dict, cluster: Cluster) -> "Node":
        """Normalize an ECS DescribeContainerInstances entry."""
        arn = data["containerInstanceArn"]
        return cls(
            name=trailing_segment(arn),
            arn=arn,
            instance_id=data.get("ec2InstanceId", ""),
            scheduler=Scheduler.ECS,
            status=data.get("status", ""),
            cluster=cluster,
        )

    @classmethod
    def from_kubernetes(cls, node, cluster: Cluster) -> "Node":
        """Normalize a ``kubernetes.client.V1Node``.

        The node name is its UID, which stays unique within the cluster. The
        instance id is the trailing segment of ``spec.provider_id``
        (``aws:///us-west-2a/i-0123456789abcdef0``).
        """
        provider_id = node.spec.provider_id if node.spec else None
        conditions = node.status.conditions if node.status else None
        return cls(
            name=node.metadata.uid,
            arn="",
            instance_id=trailing_segment(provider_id),
            scheduler=Scheduler.EKS,
            status=readiness_from_conditions(conditions).value,
            cluster=cluster,
        )
