from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from livetrack.adapters.api.controllers.realtime import router as realtime_router
from livetrack.adapters.api.controllers.routes import router as routes_router
from livetrack.adapters.api.controllers.seats import router as seats_router
from livetrack.adapters.api.dependencies import TrackingContainer, build_container
from livetrack.adapters.config import RuntimeConfig
from livetrack.domain.exceptions import RouteNotFound


def create_app(
    container: TrackingContainer | None = None,
    config: RuntimeConfig | None = None,
) -> FastAPI:
    config = config or (container.config if container else RuntimeConfig.from_env())

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if app.state.container is None:
            app.state.container = build_container(config)
        current: TrackingContainer = app.state.container

        tasks = [asyncio.create_task(current.reaper.run())]
        if current.status_writer is not None:
            tasks.append(asyncio.create_task(current.status_writer.run()))
        try:
            yield
        finally:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            if current.status_writer is not None:
                await current.status_writer.flush()

    app = FastAPI(title="LiveTrack", lifespan=lifespan)
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=config.cors_origins != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(routes_router)
    app.include_router(seats_router)
    app.include_router(realtime_router)

    @app.exception_handler(RouteNotFound)
    async def route_not_found_handler(request: Request, exc: RouteNotFound) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Ensure API errors are JSON so clients can display them.

        Starlette's default 500 handler may return plain text/HTML.
        """

        logging.getLogger("uvicorn.error").exception(
            "Unhandled exception", extra={"path": str(request.url.path)}
        )

        if config.reveal_errors or isinstance(exc, (FileNotFoundError, ValueError)):
            detail = str(exc) or exc.__class__.__name__
        else:
            detail = "Internal Server Error"

        return JSONResponse(status_code=500, content={"detail": detail})

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


app = create_app()


def run() -> None:
    config = RuntimeConfig.from_env()
    uvicorn.run("livetrack.main:app", host=config.host, port=config.port)
