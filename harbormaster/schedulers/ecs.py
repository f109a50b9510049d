"""Amazon ECS adapter."""

from botocore.exceptions import BotoCoreError, ClientError

from harbormaster.exceptions import ResourceNotFound, backend_fault
from harbormaster.logging_config import get_logger
from harbormaster.models import Cluster, Node, Scheduler, Service
from harbormaster.schedulers.base import ClusterListing, SchedulerAdapter, chunked

logger = get_logger(__name__)

# DescribeX batch limits
DESCRIBE_CLUSTERS_LIMIT = 100
DESCRIBE_CONTAINER_INSTANCES_LIMIT = 100
DESCRIBE_SERVICES_LIMIT = 10


class EcsAdapter(SchedulerAdapter):
    """Two-phase list -> describe adapter for ECS."""

    scheduler = Scheduler.ECS

    def __init__(self, ecs_client, deadline):
        """Initialize the adapter.

        Args:
            ecs_client: boto3 ECS client for this request
            deadline: Request Deadline
        """
        super().__init__(deadline)
        self.client = ecs_client

    def _call(self, operation: str, func, **kwargs) -> dict:
        self.deadline.check(operation)
        logger.debug(f"Calling {operation}")
        try:
            return func(**kwargs)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"{operation} failed: {e}")
            raise backend_fault(e, self.scheduler.value, operation)

    def _paginate(self, operation: str, method: str, key: str, **kwargs) -> list[str]:
        self.deadline.check(operation)
        logger.debug(f"Paginating {operation}")
        results = []
        try:
            for page in self.client.get_paginator(method).paginate(**kwargs):
                self.deadline.check(operation)
                results.extend(page.get(key, []))
        except (ClientError, BotoCoreError) as e:
            logger.error(f"{operation} failed: {e}")
            raise backend_fault(e, self.scheduler.value, operation)
        return results

    def list_clusters(self) -> ClusterListing:
        arns = self._paginate("ecs:ListClusters", "list_clusters", "clusterArns")
        if not arns:
            logger.info("No ECS clusters found")
            return ClusterListing()

        clusters = []
        for batch in chunked(arns, DESCRIBE_CLUSTERS_LIMIT):
            result = self._call(
                "ecs:DescribeClusters", self.client.describe_clusters, clusters=batch
            )
            clusters.extend(
                self.normalize("ecs:DescribeClusters", Cluster.from_ecs, c)
                for c in result.get("clusters", [])
            )

        logger.info(f"Found {len(clusters)} ECS clusters")
        return ClusterListing(clusters=clusters)

    def describe_cluster(self, name: str) -> ClusterListing:
        result = self._call("ecs:DescribeClusters", self.client.describe_clusters, clusters=[name])
        found = result.get("clusters", [])
        if not found:
            reasons = ", ".join(f.get("reason", "") for f in result.get("failures", []))
            raise ResourceNotFound(
                f"ECS cluster '{name}' not found", reasons or "No cluster returned"
            )
        return ClusterListing(
            clusters=[self.normalize("ecs:DescribeClusters", Cluster.from_ecs, found[0])]
        )

    def list_nodes(self, cluster: Cluster, connection=None) -> list[Node]:
        arns = self._paginate(
            "ecs:ListContainerInstances",
            "list_container_instances",
            "containerInstanceArns",
            cluster=cluster.arn,
        )
        if not arns:
            logger.info(f"No container instances in ECS cluster {cluster.name}")
            return []

        nodes = []
        for batch in chunked(arns, DESCRIBE_CONTAINER_INSTANCES_LIMIT):
            result = self._call(
                "ecs:DescribeContainerInstances",
                self.client.describe_container_instances,
                cluster=cluster.arn,
                containerInstances=batch,
            )
            nodes.extend(
                self.normalize("ecs:DescribeContainerInstances", Node.from_ecs, i, cluster)
                for i in result.get("containerInstances", [])
            )

        logger.info(f"Found {len(nodes)} nodes in ECS cluster {cluster.name}")
        return nodes

    def list_services(self, cluster: Cluster, connection=None) -> list[Service]:
        arns = self._paginate(
            "ecs:ListServices", "list_services", "serviceArns", cluster=cluster.arn
        )
        if not arns:
            logger.info(f"No services in ECS cluster {cluster.name}")
            return []

        services = []
        for batch in chunked(arns, DESCRIBE_SERVICES_LIMIT):
            result = self._call(
                "ecs:DescribeServices",
                self.client.describe_services,
                cluster=cluster.arn,
                services=batch,
            )
            services.extend(
                self.normalize("ecs:DescribeServices", Service.from_ecs, s, cluster)
                for s in result.get("services", [])
            )

        logger.info(f"Found {len(services)} services in ECS cluster {cluster.name}")
        return services
