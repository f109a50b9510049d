"""API Gateway proxy handlers.

Each handler reads ``pathParameters`` (``scheduler``, ``name``) from the
event, runs the matching Aggregator operation against freshly built clients,
and returns a proxy response with a JSON body.
"""

import json

from harbormaster.aggregator import Aggregator
from harbormaster.clients import BackendClients, Deadline
from harbormaster.config import load_config
from harbormaster.exceptions import HarbormasterError, InvalidScheduler
from harbormaster.logging_config import get_logger, setup_logging
from harbormaster.schedulers import resolve_scheduler

logger = get_logger(__name__)

RESPONSE_HEADERS = {
    "Content-Type": "application/json",
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Credentials": "true",
}

ERROR_STATUS = {
    "InvalidScheduler": 400,
    "ResourceNotFound": 404,
    "BackendFault": 502,
    "AuthDerivationFailure": 502,
    "DeadlineExceeded": 504,
    "ConfigurationError": 500,
}


def default_engine(context=None) -> Aggregator:
    """Build an Aggregator from configuration and fresh AWS clients.

    The request deadline is the configured timeout, shortened to whatever the
    Lambda invocation has left when a context is given.
    """
    config = load_config()
    setup_logging(level=config.log_level, console_level=config.log_level)
    deadline = Deadline.for_invocation(config.request_timeout, context)
    clients = BackendClients.from_config(config, deadline=deadline)
    return Aggregator.from_clients(clients, config.schedulers)


def response(status_code: int, body) -> dict:
    """Build an API Gateway proxy response."""
    return {
        "statusCode": status_code,
        "headers": dict(RESPONSE_HEADERS),
        "body": json.dumps(body),
    }


def error_response(error: HarbormasterError) -> dict:
    """Map a typed error to a client-facing response with a stable kind."""
    status = ERROR_STATUS.get(error.kind, 500)
    body = {"error": {"kind": error.kind, "message": error.message}}
    if error.details:
        body["error"]["details"] = error.details
    return response(status, body)


def _path_parameters(event: dict) -> tuple[str | None, str | None]:
    params = (event or {}).get("pathParameters") or {}
    scheduler = params.get("scheduler") or None
    name = params.get("name") or None
    if scheduler is not None:
        # Reject unknown schedulers before any client is built
        resolve_scheduler(scheduler)
    return scheduler, name


def _handle(event: dict, context, run, engine_factory) -> dict:
    try:
        scheduler, name = _path_parameters(event)
        engine = engine_factory() if engine_factory else default_engine(context)
        return run(engine, scheduler, name)
    except HarbormasterError as e:
        logger.error(f"Request failed with {e.kind}: {e.message}")
        return error_response(e)


def list_clusters_handler(event: dict, context=None, engine_factory=None) -> dict:
    """GET /clusters[/{scheduler}]"""

    def run(engine, scheduler, name):
        return response(200, engine.list_clusters(scheduler).to_response())

    return _handle(event, context, run, engine_factory)


def cluster_detail_handler(event: dict, context=None, engine_factory=None) -> dict:
    """GET /clusters/{scheduler}/{name}"""

    def run(engine, scheduler, name):
        if scheduler is None or name is None:
            raise InvalidScheduler("Both scheduler and name are required")
        cluster = engine.get_cluster(scheduler, name)
        return response(200, cluster.model_dump(mode="json", by_alias=True))

    return _handle(event, context, run, engine_factory)


def list_nodes_handler(event: dict, context=None, engine_factory=None) -> dict:
    """GET /nodes[/{scheduler}[/{name}]]"""

    def run(engine, scheduler, name):
        return response(200, engine.list_nodes(scheduler, name).to_response())

    return _handle(event, context, run, engine_factory)


def list_services_handler(event: dict, context=None, engine_factory=None) -> dict:
    """GET /services[/{scheduler}[/{name}]]"""

    def run(engine, scheduler, name):
        return response(200, engine.list_services(scheduler, name).to_response())

    return _handle(event, context, run, engine_factory)
