"""Pytest configuration and shared fixtures."""

import base64
from contextlib import contextmanager
from unittest.mock import Mock

import pytest
from botocore.exceptions import ClientError
from hypothesis import Verbosity, settings
from kubernetes import client as k8s

from harbormaster.clients import Deadline

# Configure Hypothesis for property-based testing
settings.register_profile("default", max_examples=100, verbosity=Verbosity.normal)
settings.register_profile("ci", max_examples=1000, verbosity=Verbosity.verbose)
settings.register_profile("dev", max_examples=10, verbosity=Verbosity.verbose)

# Load the default profile
settings.load_profile("default")

FAKE_CA = base64.b64encode(
    b"-----BEGIN CERTIFICATE-----\nZmFrZQ==\n-----END CERTIFICATE-----\n"
).decode()


@pytest.fixture
def deadline():
    """An unbounded request deadline."""
    return Deadline(None)


@pytest.fixture
def client_error():
    """Factory for botocore ClientErrors with a given error code."""

    def make(code: str, operation: str = "ListClusters", message: str = "boom"):
        return ClientError({"Error": {"Code": code, "Message": message}}, operation)

    return make


@pytest.fixture
def paginator():
    """Factory for a mock paginator returning the given pages."""

    def make(*pages):
        mock = Mock()
        mock.paginate.return_value = list(pages)
        return mock

    return make


@pytest.fixture
def ecs_cluster_data():
    """Sample ECS DescribeClusters entry."""
    return {
        "clusterName": "prod",
        "clusterArn": "arn:aws:ecs:us-east-1:123456789012:cluster/prod",
        "status": "ACTIVE",
    }


@pytest.fixture
def eks_cluster_data():
    """Sample EKS DescribeCluster ``cluster`` object."""
    return {
        "name": "platform",
        "arn": "arn:aws:eks:us-east-1:123456789012:cluster/platform",
        "status": "ACTIVE",
        "endpoint": "https://ABCDEF.gr7.us-east-1.eks.amazonaws.com",
        "certificateAuthority": {"data": FAKE_CA},
    }


@pytest.fixture
def kube_api():
    """Mock CoreV1Api."""
    return Mock()


@pytest.fixture
def api_factory(kube_api):
    """Context manager factory yielding ``kube_api`` and recording credentials."""
    calls = []

    @contextmanager
    def factory(credentials):
        calls.append(credentials)
        yield kube_api

    factory.calls = calls
    return factory


@pytest.fixture
def tokens():
    """Mock TokenGenerator returning a fixed token."""
    generator = Mock()
    generator.get_token.return_value = "k8s-aws-v1.dGVzdA"
    return generator


def make_kube_node(
    name: str, provider_id: str | None, ready: str | None = "True", uid: str | None = None
):
    """Build a V1Node with an optional Ready condition; the UID defaults to "uid-<name>"."""
    conditions = [k8s.V1NodeCondition(type="MemoryPressure", status="False")]
    if ready is not None:
        conditions.append(k8s.V1NodeCondition(type="Ready", status=ready))
    return k8s.V1Node(
        metadata=k8s.V1ObjectMeta(name=name, uid=uid or f"uid-{name}"),
        spec=k8s.V1NodeSpec(provider_id=provider_id),
        status=k8s.V1NodeStatus(conditions=conditions),
    )


def make_kube_service(name: str, namespace: str):
    return k8s.V1Service(
        metadata=k8s.V1ObjectMeta(name=name, namespace=namespace),
        status=k8s.V1ServiceStatus(load_balancer=k8s.V1LoadBalancerStatus()),
    )


@pytest.fixture
def kube_node():
    return make_kube_node


@pytest.fixture
def kube_service():
    return make_kube_service
