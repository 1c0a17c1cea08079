"""
FastAPI dependencies shared by the routers.

The store lives on ``app.state`` so that each application instance
(the production app, or one built by a test) owns exactly one store.
Routers never touch the store directly; they receive a gateway wrapped
around it.
"""

from fastapi import Request

from ..services.resource_gateway import ResourceGateway
from ..services.resource_store import ResourceStore


def get_store(request: Request) -> ResourceStore:
    return request.app.state.store


def get_gateway(request: Request) -> ResourceGateway:
    return ResourceGateway(get_store(request))
