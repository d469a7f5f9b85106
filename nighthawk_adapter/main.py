#!/usr/bin/env python3
"""
Nighthawk Adapter - Main Entry Point

This is the thin orchestration layer that:
1. Loads configuration and creates the adapter context
2. Starts capability registration beside the service
3. Runs the HTTP service

All registration logic is in the modules, following black box principles.
"""

import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from nighthawk_adapter import __version__
from nighthawk_adapter.config.provider import ConfigurationError, EnvConfigProvider
from nighthawk_adapter.context import AgentContext, create_context
from nighthawk_adapter.logging_config import configure_logging, get_logging_config
from nighthawk_adapter.modules.api import CapabilitiesResponse, HealthResponse, RegistrationStatus
from nighthawk_adapter.modules.registration import RegistrationSupervisor

logger = logging.getLogger("nighthawk_adapter.main")


def create_app(
    context: AgentContext, supervisor: Optional[RegistrationSupervisor] = None
) -> FastAPI:
    """
    Create the adapter application.

    Registration tasks are started in the lifespan so they run on the
    service's event loop without delaying startup.
    """
    supervisor = supervisor or RegistrationSupervisor.from_context(context)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Component listening at port: {context.port}")
        supervisor.start()

        yield

        logger.info("Shutting down Nighthawk adapter...")
        await supervisor.stop()
        logger.info("Nighthawk adapter shutdown complete")

    app = FastAPI(
        title="Nighthawk Adapter",
        description="Advertises Nighthawk components to Meshery Server",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.context = context
    app.state.supervisor = supervisor

    @app.get("/healthz")
    async def healthz():
        """Minimal liveness probe."""
        return {"status": "ok"}

    @app.get("/health", response_model=HealthResponse)
    async def health(request: Request):
        """Adapter health including registration state."""
        ctx: AgentContext = request.app.state.context
        status = RegistrationStatus(**request.app.state.supervisor.status())
        healthy = not status.failed_tasks
        body = HealthResponse(
            status="healthy" if healthy else "degraded",
            service=ctx.build_info.service_name,
            instance_id=ctx.instance_id,
            version=ctx.build_info.version,
            git_sha=ctx.build_info.git_sha,
            latest_component_version=ctx.build_info.latest_version,
            started_at=ctx.started_at.isoformat(),
            registration=status,
        )
        if not healthy:
            return JSONResponse(status_code=503, content=body.model_dump())
        return body

    @app.get("/capabilities", response_model=CapabilitiesResponse)
    async def capabilities(request: Request):
        """Capability set the adapter currently advertises."""
        ctx: AgentContext = request.app.state.context
        try:
            current = await asyncio.to_thread(ctx.store.load)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load capability set: {e}")
            raise HTTPException(status_code=500, detail=str(e))
        return CapabilitiesResponse(
            instance_id=ctx.instance_id,
            count=len(current),
            versions=current.to_dict(),
        )

    return app


def main() -> None:
    """Main entry point."""
    provider = EnvConfigProvider()
    try:
        service = provider.get_service_config()
        configure_logging(service.log_level)
        context = create_context(provider)
    except ConfigurationError as e:
        logging.basicConfig(level=logging.ERROR)
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    app = create_app(context)
    uvicorn.run(
        app,
        host=context.service.host,
        port=context.port,
        log_level=context.service.log_level.lower(),
        log_config=get_logging_config(context.service.log_level),
    )


if __name__ == "__main__":
    main()
