"""Tests for error handling across components."""

import pytest
from botocore.exceptions import EndpointConnectionError
from kubernetes.client.rest import ApiException

from harbormaster.exceptions import (
    AuthDerivationFailure,
    BackendFault,
    ConfigurationError,
    DeadlineExceeded,
    FaultKind,
    HarbormasterError,
    InvalidScheduler,
    PartialAggregation,
    ResourceNotFound,
    backend_fault,
    classify_error_code,
)
from harbormaster.logging_config import get_logger, setup_logging


def test_custom_exception_with_details():
    """Test that custom exceptions support message and details."""
    error = AuthDerivationFailure("Token generation failed", "Check AWS credentials")

    assert error.message == "Token generation failed"
    assert error.details == "Check AWS credentials"
    assert "Token generation failed" in str(error)
    assert "Check AWS credentials" in str(error)


def test_custom_exception_without_details():
    """Test that custom exceptions work without details."""
    error = ResourceNotFound("Cluster not found")

    assert error.message == "Cluster not found"
    assert error.details is None
    assert str(error) == "Cluster not found"


def test_exception_hierarchy():
    """Test that all custom exceptions inherit from HarbormasterError."""
    for cls in [
        BackendFault,
        AuthDerivationFailure,
        ResourceNotFound,
        InvalidScheduler,
        PartialAggregation,
        DeadlineExceeded,
        ConfigurationError,
    ]:
        assert issubclass(cls, HarbormasterError)


def test_error_kinds_are_stable():
    """Each error class exposes the kind used in responses."""
    assert BackendFault("x").kind == "BackendFault"
    assert AuthDerivationFailure("x").kind == "AuthDerivationFailure"
    assert ResourceNotFound("x").kind == "ResourceNotFound"
    assert InvalidScheduler("x").kind == "InvalidScheduler"
    assert PartialAggregation("x").kind == "PartialAggregation"


@pytest.mark.parametrize(
    "code,expected",
    [
        ("ServerException", FaultKind.SERVER_FAULT),
        ("ClientException", FaultKind.CLIENT_FAULT),
        ("InvalidParameterException", FaultKind.INVALID_PARAMETER),
        ("AccessDeniedException", FaultKind.UNKNOWN),
        ("", FaultKind.UNKNOWN),
        (None, FaultKind.UNKNOWN),
    ],
)
def test_classify_error_code(code, expected):
    assert classify_error_code(code) is expected


def test_backend_fault_from_client_error(client_error):
    error = backend_fault(client_error("ServerException"), "ecs", "ecs:ListClusters")

    assert isinstance(error, BackendFault)
    assert error.fault is FaultKind.SERVER_FAULT
    assert error.scheduler == "ecs"
    assert error.operation == "ecs:ListClusters"
    assert "ServerException" in error.message
    assert error.details == "boom"


def test_backend_fault_not_found_code(client_error):
    error = backend_fault(
        client_error("ResourceNotFoundException", "DescribeCluster"), "eks", "eks:DescribeCluster"
    )

    assert isinstance(error, ResourceNotFound)


def test_backend_fault_from_api_exception():
    server = backend_fault(ApiException(status=503, reason="Unavailable"), "eks", "k8s:ListNodes")
    forbidden = backend_fault(ApiException(status=403, reason="Forbidden"), "eks", "k8s:ListNodes")
    missing = backend_fault(ApiException(status=404, reason="Not Found"), "eks", "k8s:ListNodes")

    assert server.fault is FaultKind.SERVER_FAULT
    assert forbidden.fault is FaultKind.CLIENT_FAULT
    assert isinstance(missing, ResourceNotFound)


def test_backend_fault_from_connection_error():
    error = backend_fault(
        EndpointConnectionError(endpoint_url="https://ecs.us-east-1.amazonaws.com"),
        "ecs",
        "ecs:ListClusters",
    )

    assert isinstance(error, BackendFault)
    assert error.fault is FaultKind.UNKNOWN


def test_logging_setup():
    """Test that logging can be configured."""
    setup_logging(level="INFO", verbose=False)

    logger = get_logger("test")
    assert logger is not None
    assert logger.name == "test"


def test_logging_quiets_aws_clients():
    import logging

    setup_logging(verbose=True)

    assert logging.getLogger("botocore").level == logging.WARNING
    assert logging.getLogger("kubernetes").level == logging.WARNING


def test_exception_can_be_caught_as_base_class():
    """Test that specific exceptions can be caught as HarbormasterError."""
    try:
        raise InvalidScheduler("Test error")
    except HarbormasterError as e:
        assert isinstance(e, InvalidScheduler)
        assert e.message == "Test error"


def test_logging_level_applies_to_root_and_console():
    import logging

    setup_logging(level="error", console_level="ERROR")

    root = logging.getLogger()
    assert root.level == logging.ERROR
    assert [h.level for h in root.handlers] == [logging.ERROR]
