"""Control application factory for the start command.

This module provides a factory function for creating the in-process
FastAPI control application that exposes supervisor control endpoints.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import FastAPI

from fwgate.supervisor import create_control_router

if TYPE_CHECKING:
    from fwgate.supervisor import SupervisorService


def create_control_app(supervisor: SupervisorService) -> FastAPI:
    """Create the FastAPI control application.

    Creates a minimal FastAPI app with the supervisor control router
    mounted for managing daemons.

    Args:
        supervisor: The SupervisorService instance to control.

    Returns:
        A FastAPI application with supervisor control endpoints.
    """
    app = FastAPI(
        title="fwgate Control",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    control_router = create_control_router(supervisor)
    app.include_router(control_router)

    return app
