"""Property-based tests for cluster and service normalization."""

import pytest
from hypothesis import given
from hypothesis import strategies as st
from kubernetes import client as k8s
from pydantic import ValidationError

from harbormaster.exceptions import InvalidScheduler
from harbormaster.models import Cluster, Scheduler, Service
from harbormaster.schedulers import resolve_scheduler

names = st.text(alphabet="abcdefghijklmnopqrstuvwxyz0123456789-_", min_size=1, max_size=40)
statuses = st.sampled_from(["ACTIVE", "INACTIVE", "PROVISIONING", "CREATING", "FAILED", "DELETING"])


def test_ecs_cluster_example():
    cluster = Cluster.from_ecs(
        {
            "clusterName": "prod",
            "clusterArn": "arn:aws:ecs:us-east-1:123456789012:cluster/prod",
            "status": "ACTIVE",
        }
    )

    assert cluster.model_dump(mode="json") == {
        "name": "prod",
        "arn": "arn:aws:ecs:us-east-1:123456789012:cluster/prod",
        "scheduler": "ecs",
        "status": "ACTIVE",
    }


@given(name=names, status=statuses)
def test_ecs_lookup_key_round_trip(name, status):
    """Normalizing an ECS record reproduces the (scheduler, name) key used to fetch it."""
    cluster = Cluster.from_ecs(
        {
            "clusterName": name,
            "clusterArn": f"arn:aws:ecs:us-east-1:123456789012:cluster/{name}",
            "status": status,
        }
    )

    scheduler, key_name = cluster.lookup_key()
    assert resolve_scheduler(scheduler) is Scheduler.ECS
    assert key_name == name
    assert cluster.status == status


@given(name=names, status=statuses)
def test_eks_lookup_key_round_trip(name, status):
    cluster = Cluster.from_eks(
        {"name": name, "arn": f"arn:aws:eks:us-east-1:123456789012:cluster/{name}", "status": status}
    )

    assert cluster.lookup_key() == ("eks", name)


@given(value=st.text().filter(lambda v: v not in ("ecs", "eks")))
def test_unknown_scheduler_rejected(value):
    with pytest.raises(InvalidScheduler):
        resolve_scheduler(value)


def test_clusters_are_immutable():
    cluster = Cluster(name="prod", arn="arn", scheduler=Scheduler.ECS, status="ACTIVE")

    with pytest.raises(ValidationError):
        cluster.status = "INACTIVE"


@given(name=names, namespace=names)
def test_eks_service_normalization(name, namespace):
    cluster = Cluster(name="platform", arn="arn:eks", scheduler=Scheduler.EKS, status="ACTIVE")
    service = k8s.V1Service(metadata=k8s.V1ObjectMeta(name=name, namespace=namespace))

    normalized = Service.from_kubernetes(service, cluster)

    assert normalized.identity() == ("eks", "arn:eks", namespace, name)
    assert normalized.launch_type == "ec2"
    assert normalized.arn == ""
    assert normalized.status == ""
    assert normalized.model_dump(mode="json", by_alias=True)["launchType"] == "ec2"


@given(launch_type=st.sampled_from(["EC2", "FARGATE", "EXTERNAL"]), name=names)
def test_ecs_service_launch_type_lowercased(launch_type, name):
    cluster = Cluster(name="prod", arn="arn:ecs", scheduler=Scheduler.ECS, status="ACTIVE")

    service = Service.from_ecs(
        {"serviceName": name, "serviceArn": f"arn:svc/{name}", "status": "ACTIVE", "launchType": launch_type},
        cluster,
    )

    assert service.launch_type == launch_type.lower()
    assert service.namespace == ""
    assert service.identity() == ("ecs", "arn:ecs", "", name)
