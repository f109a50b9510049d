"""Custom exceptions for harbormaster."""

from enum import Enum


class FaultKind(str, Enum):
    """Classification of a backend-reported failure."""

    SERVER_FAULT = "ServerFault"
    CLIENT_FAULT = "ClientFault"
    INVALID_PARAMETER = "InvalidParameter"
    UNKNOWN = "Unknown"


class HarbormasterError(Exception):
    """Base exception for all harbormaster errors."""

    kind = "HarbormasterError"

    def __init__(self, message: str, details: str = None):
        """Initialize the exception.

        Args:
            message: Main error message
            details: Additional details or suggestions
        """
        self.message = message
        self.details = details
        super().__init__(self.format_message())

    def format_message(self) -> str:
        """Format the complete error message.

        Returns:
            Formatted error message with details
        """
        if self.details:
            return f"{self.message}\n\nDetails: {self.details}"
        return self.message


class BackendFault(HarbormasterError):
    """Exception raised when a backend list/describe call fails."""

    kind = "BackendFault"

    def __init__(
        self,
        message: str,
        details: str = None,
        fault: FaultKind = FaultKind.UNKNOWN,
        scheduler: str = "",
        operation: str = "",
    ):
        self.fault = fault
        self.scheduler = scheduler
        self.operation = operation
        super().__init__(message, details)


class AuthDerivationFailure(HarbormasterError):
    """Exception raised when token or CA derivation for an EKS cluster fails."""

    kind = "AuthDerivationFailure"


class ResourceNotFound(HarbormasterError):
    """Exception raised when a named lookup resolves to nothing."""

    kind = "ResourceNotFound"


class InvalidScheduler(HarbormasterError):
    """Exception raised for an unrecognized scheduler discriminator."""

    kind = "InvalidScheduler"


class PartialAggregation(HarbormasterError):
    """Exception raised when a caller asks for strict results and some backends failed."""

    kind = "PartialAggregation"


class DeadlineExceeded(HarbormasterError):
    """Exception raised when the request deadline runs out before a backend call."""

    kind = "DeadlineExceeded"


class ConfigurationError(HarbormasterError):
    """Exception raised for configuration errors."""

    kind = "ConfigurationError"


_FAULT_CODES = {
    "ServerException": FaultKind.SERVER_FAULT,
    "ClientException": FaultKind.CLIENT_FAULT,
    "InvalidParameterException": FaultKind.INVALID_PARAMETER,
}

_NOT_FOUND_CODES = {"ResourceNotFoundException", "ClusterNotFoundException"}


def classify_error_code(code: str | None) -> FaultKind:
    """Map a backend error code to a FaultKind.

    Args:
        code: Error code reported by the backend (e.g. "ServerException")

    Returns:
        The matching FaultKind, FaultKind.UNKNOWN for anything unrecognized
    """
    return _FAULT_CODES.get(code or "", FaultKind.UNKNOWN)


def backend_fault(error: Exception, scheduler: str, operation: str) -> HarbormasterError:
    """Convert a raw client error into a typed harbormaster exception.

    Handles botocore ``ClientError`` (classified by its error code) and
    Kubernetes ``ApiException`` (classified by HTTP status). Anything else is
    reported as an unknown backend fault.

    Args:
        error: The exception raised by the backend client
        scheduler: Scheduler discriminator of the adapter that made the call
        operation: Name of the backend operation (e.g. "ecs:ListClusters")

    Returns:
        ResourceNotFound for backend "not found" answers, BackendFault otherwise
    """
    from botocore.exceptions import ClientError
    from kubernetes.client.rest import ApiException

    if isinstance(error, ClientError):
        code = error.response.get("Error", {}).get("Code")
        message = error.response.get("Error", {}).get("Message") or str(error)
        if code in _NOT_FOUND_CODES:
            return ResourceNotFound(f"{operation} found nothing: {message}")
        fault = classify_error_code(code)
        return BackendFault(
            f"{operation} failed with {code or 'unknown error'}",
            message,
            fault=fault,
            scheduler=scheduler,
            operation=operation,
        )

    if isinstance(error, ApiException):
        if error.status == 404:
            return ResourceNotFound(f"{operation} found nothing: {error.reason}")
        if error.status and error.status >= 500:
            fault = FaultKind.SERVER_FAULT
        elif error.status and error.status >= 400:
            fault = FaultKind.CLIENT_FAULT
        else:
            fault = FaultKind.UNKNOWN
        return BackendFault(
            f"{operation} failed with HTTP {error.status}",
            error.reason,
            fault=fault,
            scheduler=scheduler,
            operation=operation,
        )

    return BackendFault(
        f"{operation} failed: {error}",
        fault=FaultKind.UNKNOWN,
        scheduler=scheduler,
        operation=operation,
    )
