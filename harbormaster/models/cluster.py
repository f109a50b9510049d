"""Data models for normalized clusters."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, field_validator


class Scheduler(str, Enum):
    """Backend discriminator carried by every normalized entity."""

    ECS = "ecs"
    EKS = "eks"


class Cluster(BaseModel):
    """A logical orchestration cluster, normalized across schedulers."""

    model_config = ConfigDict(frozen=True)

    name: str
    arn: str
    scheduler: Scheduler
    status: str  # backend-native, e.g. ACTIVE, CREATING, FAILED

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate cluster name is not empty."""
        if not v:
            raise ValueError("name cannot be empty")
        return v

    def lookup_key(self) -> tuple[str, str]:
        """Return the (scheduler, name) pair used to look this cluster up again."""
        return (self.scheduler.value, self.name)

    @classmethod
    def from_ecs(cls, data: dict) -> "Cluster":
        """Normalize an ECS DescribeClusters entry."""
        return cls(
            name=data["clusterName"],
            arn=data["clusterArn"],
            scheduler=Scheduler.ECS,
            status=data.get("status", ""),
        )

    @classmethod
    def from_eks(cls, data: dict) -> "Cluster":
        """Normalize an EKS DescribeCluster ``cluster`` object."""
        return cls(
            name=data["name"],
            arn=data.get("arn", ""),
            scheduler=Scheduler.EKS,
            status=data.get("status", ""),
        )
