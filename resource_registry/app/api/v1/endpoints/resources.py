"""
Resource endpoints for API v1.

These routes expose the CRUD API of the registry.  Request bodies are
accepted as raw JSON and handed to the gateway untouched, so that
validation and its error messages live in one place.  Every response
uses the ``{"data": ...}`` envelope on success and ``{"error": ...}``
on failure; a successful delete returns ``204 No Content``.
"""

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, Response
from fastapi.responses import JSONResponse

from resource_registry.app.api.deps import get_gateway
from resource_registry.app.services.resource_gateway import GatewayResponse, ResourceGateway

router = APIRouter()


def _to_response(result: GatewayResponse) -> Response:
    if result.body is None:
        return Response(status_code=result.status_code)
    return JSONResponse(status_code=result.status_code, content=result.body)


@router.get("")
async def list_resources(
    search: Optional[str] = Query(None, description="Case-insensitive match on name or description"),
    tag: Optional[str] = Query(None, description="Only resources carrying this tag"),
    updated_after: Optional[str] = Query(None, alias="updatedAfter", description="ISO-8601 timestamp"),
    gateway: ResourceGateway = Depends(get_gateway),
) -> Response:
    """Return resources matching the optional filters.

    Results are not paginated and come back in creation order.
    """
    query = {"search": search, "tag": tag, "updatedAfter": updated_after}
    result = await gateway.list_resources({k: v for k, v in query.items() if v is not None})
    return _to_response(result)


@router.post("", status_code=201)
async def create_resource(
    payload: Any = Body(None),
    gateway: ResourceGateway = Depends(get_gateway),
) -> Response:
    """Create a resource.  ``name`` is required."""
    return _to_response(await gateway.create_resource(payload))


@router.get("/{resource_id}")
async def get_resource(resource_id: str, gateway: ResourceGateway = Depends(get_gateway)) -> Response:
    """Retrieve a single resource by ID.  Returns 404 if it does not exist."""
    return _to_response(await gateway.get_resource(resource_id))


@router.put("/{resource_id}")
async def update_resource(
    resource_id: str,
    payload: Any = Body(None),
    gateway: ResourceGateway = Depends(get_gateway),
) -> Response:
    """Update some fields of a resource.

    At least one of ``name``, ``description`` or ``tags`` must be
    supplied.  The resource ``version`` is incremented on success.
    """
    return _to_response(await gateway.update_resource(resource_id, payload))


@router.delete("/{resource_id}", status_code=204)
async def delete_resource(resource_id: str, gateway: ResourceGateway = Depends(get_gateway)) -> Response:
    """Delete a resource.  Returns 404 if it does not exist."""
    return _to_response(await gateway.delete_resource(resource_id))
