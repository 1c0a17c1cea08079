"""
Application package initializer.

The registry is organised into a few small pieces: ``core`` holds
configuration, logging and the error types, ``schemas`` the pydantic
models, ``services`` the resource store and the request gateway, and
``api`` the FastAPI routers.  Versioned endpoints live under
``api/<version>/``.
"""

from .main import app  # noqa: F401
