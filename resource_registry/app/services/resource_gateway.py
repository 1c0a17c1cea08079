"""
Request gateway between untrusted input and the resource store.

The gateway validates raw payloads and query parameters with the
schemas from ``schemas.resource``, calls the store, and turns the
result into a ``GatewayResponse``: an outcome kind plus the response
envelope (``{"data": ...}`` on success, ``{"error": ...}`` on
failure).  It knows nothing about HTTP; the API layer maps outcome
kinds to status codes through ``Outcome.status_code``.

Validation errors and missing records are reported with a descriptive
message.  Any other failure is logged here with its traceback and
reported to the caller only as ``"Unexpected error"``.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from ..core.errors import ResourceNotFound, ValidationFailure
from ..schemas.resource import Resource, ResourceCreate, ResourceFilters, ResourceUpdate
from .resource_store import ResourceStore


logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

GENERIC_ERROR = "Unexpected error"


class Outcome(enum.Enum):
    OK = "ok"
    CREATED = "created"
    NO_CONTENT = "ok-no-content"
    CLIENT_ERROR = "client-error"
    NOT_FOUND = "not-found"
    SERVER_ERROR = "server-error"

    @property
    def status_code(self) -> int:
        return _STATUS_CODES[self]


_STATUS_CODES = {
    Outcome.OK: 200,
    Outcome.CREATED: 201,
    Outcome.NO_CONTENT: 204,
    Outcome.CLIENT_ERROR: 400,
    Outcome.NOT_FOUND: 404,
    Outcome.SERVER_ERROR: 500,
}


@dataclass(frozen=True)
class GatewayResponse:
    """Outcome kind plus envelope.  ``body`` is ``None`` for no-content."""

    outcome: Outcome
    body: Optional[Dict[str, Any]] = None

    @property
    def status_code(self) -> int:
        return self.outcome.status_code

    @classmethod
    def error(cls, outcome: Outcome, message: str) -> "GatewayResponse":
        return cls(outcome, {"error": message})


def serialize(resource: Resource) -> Dict[str, Any]:
    return resource.model_dump(mode="json", by_alias=True)


def describe_validation_error(exc: ValidationError) -> str:
    """Turn the first pydantic error into a message fit for the client."""
    first = exc.errors()[0]
    field = ".".join(str(part) for part in first.get("loc", ()))
    if first["type"] == "value_error":
        return str(first["ctx"]["error"])
    if first["type"] == "missing":
        return f"{field} is required"
    return f"{field}: {first['msg']}" if field else first["msg"]


def validate_payload(model: Type[ModelT], payload: Any) -> ModelT:
    """Validate a request body, raising ``ValidationFailure`` on bad input."""
    if not isinstance(payload, Mapping):
        raise ValidationFailure("Request body must be a JSON object")
    try:
        return model.model_validate(dict(payload))
    except ValidationError as exc:
        raise ValidationFailure(describe_validation_error(exc)) from exc


def validate_filters(query: Optional[Mapping[str, Any]]) -> ResourceFilters:
    """Validate list query parameters (``search``, ``tag``, ``updatedAfter``)."""
    known = {key: query[key] for key in ("search", "tag", "updatedAfter") if key in query} if query else {}
    try:
        return ResourceFilters.model_validate(known)
    except ValidationError as exc:
        raise ValidationFailure(describe_validation_error(exc)) from exc


class ResourceGateway:
    """Translate requests into store calls and store results into responses."""

    def __init__(self, store: ResourceStore) -> None:
        self.store = store

    async def list_resources(self, query: Optional[Mapping[str, Any]] = None) -> GatewayResponse:
        async def run() -> GatewayResponse:
            filters = validate_filters(query)
            resources = await self.store.list(filters)
            return GatewayResponse(Outcome.OK, {"data": [serialize(r) for r in resources]})

        return await self._handle(run)

    async def get_resource(self, resource_id: str) -> GatewayResponse:
        async def run() -> GatewayResponse:
            resource = await self.store.find_by_id(resource_id)
            if resource is None:
                raise ResourceNotFound(resource_id)
            return GatewayResponse(Outcome.OK, {"data": serialize(resource)})

        return await self._handle(run)

    async def create_resource(self, payload: Any) -> GatewayResponse:
        async def run() -> GatewayResponse:
            data = validate_payload(ResourceCreate, payload)
            resource = await self.store.insert(data)
            return GatewayResponse(Outcome.CREATED, {"data": serialize(resource)})

        return await self._handle(run)

    async def update_resource(self, resource_id: str, payload: Any) -> GatewayResponse:
        async def run() -> GatewayResponse:
            data = validate_payload(ResourceUpdate, payload)
            resource = await self.store.update(resource_id, data)
            if resource is None:
                raise ResourceNotFound(resource_id)
            return GatewayResponse(Outcome.OK, {"data": serialize(resource)})

        return await self._handle(run)

    async def delete_resource(self, resource_id: str) -> GatewayResponse:
        async def run() -> GatewayResponse:
            if not await self.store.remove(resource_id):
                raise ResourceNotFound(resource_id)
            return GatewayResponse(Outcome.NO_CONTENT)

        return await self._handle(run)

    @staticmethod
    async def _handle(operation: Callable[[], Awaitable[GatewayResponse]]) -> GatewayResponse:
        try:
            return await operation()
        except ValidationFailure as exc:
            logger.debug("Rejected request: %s", exc)
            return GatewayResponse.error(Outcome.CLIENT_ERROR, str(exc))
        except ResourceNotFound as exc:
            return GatewayResponse.error(Outcome.NOT_FOUND, str(exc))
        except Exception:
            logger.exception("Request failed")
            return GatewayResponse.error(Outcome.SERVER_ERROR, GENERIC_ERROR)
