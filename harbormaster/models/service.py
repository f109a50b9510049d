"""Data models for normalized services."""

import json

from pydantic import BaseModel, ConfigDict, Field

from harbormaster.models.cluster import Cluster, Scheduler

# EKS has no launch type concept; workloads run on EC2 worker nodes
EKS_LAUNCH_TYPE = "ec2"


class Service(BaseModel):
    """A deployed workload within a cluster (and namespace, for EKS)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    arn: str = ""
    status: str
    cluster: Cluster
    scheduler: Scheduler
    launch_type: str = Field(default="", alias="launchType")
    namespace: str = ""  # ECS has no namespaces

    def lookup_key(self) -> tuple[str, str]:
        """Return the (scheduler, name) key of the owning cluster."""
        return self.cluster.lookup_key()

    def identity(self) -> tuple[str, str, str, str]:
        """Return the tuple that identifies this service within one query."""
        return (self.scheduler.value, self.cluster.arn, self.namespace, self.name)

    @classmethod
    def from_ecs(cls, data: dict, cluster: Cluster) -> "Service":
        """Normalize an ECS DescribeServices entry."""
        return cls(
            name=data["serviceName"],
            arn=data.get("serviceArn", ""),
            status=data.get("status", ""),
            cluster=cluster,
            scheduler=Scheduler.ECS,
            # Services using capacity provider strategies carry no launchType
            launch_type=(data.get("launchType") or "").lower(),
            namespace="",
        )

    @classmethod
    def from_kubernetes(cls, service, cluster: Cluster) -> "Service":
        """Normalize a ``kubernetes.client.V1Service``."""
        return cls(
            name=service.metadata.name,
            arn="",
            status=stringify_status(service.status),
            cluster=cluster,
            scheduler=Scheduler.EKS,
            launch_type=EKS_LAUNCH_TYPE,
            namespace=service.metadata.namespace or "",
        )


def stringify_status(status) -> str:
    """Render a Kubernetes ServiceStatus as compact, key-sorted JSON."""
    if status is None:
        return ""
    return json.dumps(status.to_dict(), default=str, sort_keys=True, separators=(",", ":"))
