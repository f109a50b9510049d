"""Amazon EKS adapter.

Cluster metadata comes from the EKS API; nodes and services come from each
cluster's own Kubernetes API, reached with credentials derived per cluster
for every call.
"""

from botocore.exceptions import BotoCoreError, ClientError
from kubernetes.client.rest import ApiException
from urllib3.exceptions import HTTPError

from harbormaster.credentials import (
    ClusterConnection,
    TokenGenerator,
    derive_credentials,
    open_core_api,
)
from harbormaster.exceptions import (
    AuthDerivationFailure,
    BackendFault,
    ResourceNotFound,
    backend_fault,
)
from harbormaster.logging_config import get_logger
from harbormaster.models import Cluster, Node, Scheduler, Service
from harbormaster.schedulers.base import ClusterListing, SchedulerAdapter

logger = get_logger(__name__)


def _cluster_entry(raw: dict) -> tuple[Cluster, ClusterConnection]:
    return Cluster.from_eks(raw), ClusterConnection.from_eks(raw)


class EksAdapter(SchedulerAdapter):
    """Adapter for EKS clusters and their Kubernetes workloads."""

    scheduler = Scheduler.EKS

    def __init__(self, eks_client, sts_client, deadline, api_factory=open_core_api, tokens=None):
        """Initialize the adapter.

        Args:
            eks_client: boto3 EKS client for this request
            sts_client: boto3 STS client used to sign cluster tokens
            deadline: Request Deadline
            api_factory: Context manager factory turning KubeCredentials into a CoreV1Api
            tokens: Optional TokenGenerator (built from sts_client when omitted)
        """
        super().__init__(deadline)
        self.client = eks_client
        self.api_factory = api_factory
        self.tokens = tokens or TokenGenerator(sts_client)

    def _call(self, operation: str, func, **kwargs) -> dict:
        self.deadline.check(operation)
        logger.debug(f"Calling {operation}")
        try:
            return func(**kwargs)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"{operation} failed: {e}")
            raise backend_fault(e, self.scheduler.value, operation)

    def _kube_call(self, operation: str, func, *args):
        self.deadline.check(operation)
        logger.debug(f"Calling {operation}")
        try:
            return func(*args, _request_timeout=self.deadline.remaining())
        except (ApiException, HTTPError) as e:
            logger.error(f"{operation} failed: {e}")
            raise backend_fault(e, self.scheduler.value, operation)

    def _describe(self, name: str) -> dict:
        result = self._call("eks:DescribeCluster", self.client.describe_cluster, name=name)
        return result.get("cluster")

    def list_clusters(self) -> ClusterListing:
        self.deadline.check("eks:ListClusters")
        names = []
        try:
            for page in self.client.get_paginator("list_clusters").paginate():
                self.deadline.check("eks:ListClusters")
                names.extend(page.get("clusters", []))
        except (ClientError, BotoCoreError) as e:
            logger.error(f"eks:ListClusters failed: {e}")
            raise backend_fault(e, self.scheduler.value, "eks:ListClusters")

        # No batch describe exists for EKS
        listing = ClusterListing()
        for name in names:
            cluster, connection = self.normalize(
                "eks:DescribeCluster", _cluster_entry, self._describe(name)
            )
            listing.clusters.append(cluster)
            listing.connections.append(connection)

        logger.info(f"Found {len(listing.clusters)} EKS clusters")
        return listing

    def describe_cluster(self, name: str) -> ClusterListing:
        cluster, connection = self.normalize(
            "eks:DescribeCluster", _cluster_entry, self._describe(name)
        )
        return ClusterListing(clusters=[cluster], connections=[connection])

    def _credentials(self, cluster: Cluster, connection: ClusterConnection | None):
        if connection is None:
            raise AuthDerivationFailure(
                f"No connection metadata for EKS cluster {cluster.name}",
                "Credentials cannot be derived from the normalized cluster alone",
            )
        return derive_credentials(connection, self.tokens)

    def list_nodes(self, cluster: Cluster, connection: ClusterConnection | None = None) -> list[Node]:
        credentials = self._credentials(cluster, connection)
        with self.api_factory(credentials) as api:
            result = self._kube_call("k8s:ListNodes", api.list_node)

        nodes = [
            self.normalize("k8s:ListNodes", Node.from_kubernetes, n, cluster)
            for n in result.items or []
        ]
        logger.info(f"Found {len(nodes)} nodes in EKS cluster {cluster.name}")
        return nodes

    def list_services(
        self, cluster: Cluster, connection: ClusterConnection | None = None
    ) -> list[Service]:
        credentials = self._credentials(cluster, connection)
        services = []
        with self.api_factory(credentials) as api:
            namespaces = self._kube_call("k8s:ListNamespaces", api.list_namespace)
            for namespace in namespaces.items or []:
                ns_name = namespace.metadata.name
                try:
                    result = self._kube_call(
                        f"k8s:ListServices({ns_name})", api.list_namespaced_service, ns_name
                    )
                except (BackendFault, ResourceNotFound) as e:
                    logger.warning(
                        f"Skipping namespace {ns_name} in EKS cluster {cluster.name}: {e}"
                    )
                    self.warn(e, cluster=cluster.name)
                    continue
                services.extend(
                    self.normalize(
                        f"k8s:ListServices({ns_name})", Service.from_kubernetes, s, cluster
                    )
                    for s in result.items or []
                )

        logger.info(f"Found {len(services)} services in EKS cluster {cluster.name}")
        return services
