"""Credential derivation for EKS clusters.

EKS authenticates Kubernetes API callers with a bearer token that is a
presigned STS GetCallerIdentity URL bound to the cluster name through the
``x-k8s-aws-id`` header. Tokens are generated per cluster per request and
never cached.
"""

import base64
import binascii
import os
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass

from botocore.exceptions import BotoCoreError, ClientError

from harbormaster.exceptions import AuthDerivationFailure
from harbormaster.logging_config import get_logger

logger = get_logger(__name__)

K8S_AWS_ID_HEADER = "x-k8s-aws-id"
TOKEN_PREFIX = "k8s-aws-v1."
TOKEN_EXPIRES_IN = 60


@dataclass(frozen=True)
class ClusterConnection:
    """Raw EKS connection metadata from DescribeCluster."""

    name: str
    arn: str
    endpoint: str | None
    certificate_authority: str | None  # base64-encoded PEM bundle

    @classmethod
    def from_eks(cls, data: dict) -> "ClusterConnection":
        return cls(
            name=data["name"],
            arn=data.get("arn", ""),
            endpoint=data.get("endpoint"),
            certificate_authority=(data.get("certificateAuthority") or {}).get("data"),
        )


@dataclass(frozen=True)
class KubeCredentials:
    """Everything needed to open a Kubernetes API connection to one cluster."""

    endpoint: str
    token: str
    ca_data: bytes

    def __repr__(self) -> str:
        return f"KubeCredentials(endpoint={self.endpoint!r}, token=<redacted>)"


class TokenGenerator:
    """Generates EKS bearer tokens from an STS client."""

    def __init__(self, sts_client):
        """Initialize the generator.

        Args:
            sts_client: boto3 STS client pointed at the cluster's region
        """
        self._sts = sts_client
        events = sts_client.meta.events
        events.register(
            "provide-client-params.sts.GetCallerIdentity",
            self._retrieve_cluster_id,
            unique_id="harbormaster-retrieve-k8s-aws-id",
        )
        events.register(
            "before-sign.sts.GetCallerIdentity",
            self._inject_cluster_id_header,
            unique_id="harbormaster-inject-k8s-aws-id",
        )

    @staticmethod
    def _retrieve_cluster_id(params, context, **kwargs):
        if K8S_AWS_ID_HEADER in params:
            context[K8S_AWS_ID_HEADER] = params.pop(K8S_AWS_ID_HEADER)

    @staticmethod
    def _inject_cluster_id_header(request, **kwargs):
        if K8S_AWS_ID_HEADER in request.context:
            request.headers[K8S_AWS_ID_HEADER] = request.context[K8S_AWS_ID_HEADER]

    def get_token(self, cluster_name: str) -> str:
        """Return a short-lived bearer token scoped to ``cluster_name``."""
        url = self._sts.generate_presigned_url(
            "get_caller_identity",
            Params={K8S_AWS_ID_HEADER: cluster_name},
            ExpiresIn=TOKEN_EXPIRES_IN,
            HttpMethod="GET",
        )
        encoded = base64.urlsafe_b64encode(url.encode("utf-8")).decode("utf-8")
        return TOKEN_PREFIX + encoded.rstrip("=")


def derive_credentials(connection: ClusterConnection, tokens: TokenGenerator) -> KubeCredentials:
    """Derive bearer token and CA material for one EKS cluster.

    Args:
        connection: Raw metadata from DescribeCluster
        tokens: Token generator bound to this request's STS client

    Returns:
        KubeCredentials for the cluster's API endpoint

    Raises:
        AuthDerivationFailure: If any part of the derivation fails
    """
    logger.debug(f"Deriving credentials for EKS cluster {connection.name}")

    if not connection.endpoint:
        raise AuthDerivationFailure(
            f"EKS cluster {connection.name} has no API endpoint",
            "The cluster may still be creating",
        )
    if not connection.certificate_authority:
        raise AuthDerivationFailure(
            f"EKS cluster {connection.name} has no certificate authority data"
        )

    try:
        ca_data = base64.b64decode(connection.certificate_authority, validate=True)
    except (binascii.Error, ValueError) as e:
        logger.error(f"Failed to decode CA data for {connection.name}: {e}")
        raise AuthDerivationFailure(
            f"Certificate authority data for {connection.name} is not valid base64", str(e)
        )

    try:
        token = tokens.get_token(connection.name)
    except (BotoCoreError, ClientError) as e:
        logger.error(f"Failed to generate token for {connection.name}: {e}")
        raise AuthDerivationFailure(
            f"Failed to generate an authentication token for {connection.name}",
            f"{e}\n\nCheck that AWS credentials are available to this process",
        )

    return KubeCredentials(endpoint=connection.endpoint, token=token, ca_data=ca_data)


@contextmanager
def open_core_api(credentials: KubeCredentials):
    """Open a Kubernetes CoreV1Api for the given credentials.

    The CA bundle lives in a private temp file for the duration of the block.

    Yields:
        kubernetes.client.CoreV1Api
    """
    from kubernetes import client

    fd, ca_path = tempfile.mkstemp(prefix="harbormaster-ca-", suffix=".crt")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(credentials.ca_data)

        configuration = client.Configuration()
        configuration.host = credentials.endpoint
        configuration.api_key = {"authorization": f"Bearer {credentials.token}"}
        configuration.ssl_ca_cert = ca_path
        configuration.verify_ssl = True

        api_client = client.ApiClient(configuration)
        try:
            yield client.CoreV1Api(api_client)
        finally:
            api_client.close()
    finally:
        os.unlink(ca_path)
