"""Per-request AWS clients and the request deadline."""

import time
from dataclasses import dataclass, field

import boto3
from botocore.config import Config

from harbormaster.config import HarbormasterConfig
from harbormaster.exceptions import DeadlineExceeded
from harbormaster.logging_config import get_logger

logger = get_logger(__name__)


class Deadline:
    """Time budget shared by every backend call made for one request."""

    def __init__(self, timeout: float | None, clock=time.monotonic):
        """Initialize the deadline.

        Args:
            timeout: Seconds available to the whole request; None means unbounded
            clock: Monotonic clock, injectable for tests
        """
        self._clock = clock
        self.timeout = timeout
        self._expires_at = clock() + timeout if timeout is not None else None

    @classmethod
    def for_invocation(
        cls, timeout: float | None, context=None, clock=time.monotonic
    ) -> "Deadline":
        """Bound ``timeout`` by the time a Lambda invocation has left.

        Args:
            timeout: Configured request budget in seconds
            context: Lambda context exposing ``get_remaining_time_in_millis()``
            clock: Monotonic clock, injectable for tests
        """
        if context is not None:
            left = max(0.0, context.get_remaining_time_in_millis() / 1000.0)
            timeout = left if timeout is None else min(timeout, left)
        return cls(timeout, clock=clock)

    def remaining(self) -> float | None:
        """Seconds left, or None when unbounded."""
        if self._expires_at is None:
            return None
        return max(0.0, self._expires_at - self._clock())

    def expired(self) -> bool:
        remaining = self.remaining()
        return remaining is not None and remaining <= 0

    def check(self, operation: str) -> None:
        """Raise DeadlineExceeded if no time is left for ``operation``."""
        if self.expired():
            logger.error(f"Deadline of {self.timeout}s exceeded before {operation}")
            raise DeadlineExceeded(
                f"Request deadline exceeded before {operation}",
                f"The request budget was {self.timeout} seconds",
            )


@dataclass
class BackendClients:
    """Authenticated AWS clients for one request.

    Built fresh for every request and discarded afterwards; nothing here is
    shared across requests.
    """

    session: object
    ecs: object
    eks: object
    sts: object
    region: str
    deadline: Deadline = field(default_factory=lambda: Deadline(None))

    @classmethod
    def from_config(
        cls, config: HarbormasterConfig, session=None, deadline: Deadline | None = None
    ) -> "BackendClients":
        """Resolve a boto3 session and create the ECS, EKS and STS clients.

        Socket timeouts never exceed what is left of the request deadline.

        Args:
            config: Deployment configuration (region, profile, timeouts)
            session: Optional pre-built boto3 session
            deadline: Request deadline; defaults to ``config.request_timeout``

        Returns:
            BackendClients scoped to the configured account and region
        """
        session = session or boto3.Session(profile_name=config.profile, region_name=config.region)
        region = session.region_name or config.region
        logger.debug(f"Creating AWS clients for region {region} (profile: {config.profile})")
        deadline = deadline or Deadline(config.request_timeout)
        read_timeout = config.request_timeout
        budget = deadline.remaining()
        if budget is not None:
            read_timeout = min(read_timeout, budget)

        client_config = Config(
            connect_timeout=min(config.connect_timeout, read_timeout),
            read_timeout=read_timeout,
            retries={"total_max_attempts": 1, "mode": "standard"},
        )
        return cls(
            session=session,
            ecs=session.client("ecs", region_name=region, config=client_config),
            eks=session.client("eks", region_name=region, config=client_config),
            # EKS validates tokens against the regional STS endpoint
            sts=session.client(
                "sts",
                region_name=region,
                endpoint_url=f"https://sts.{region}.amazonaws.com" if region else None,
                config=client_config,
            ),
            region=region,
            deadline=deadline,
        )
