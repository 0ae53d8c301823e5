"""Main FastAPI application"""
from typing import Optional

from config.settings import HOST, PORT
from context.lifespan import lifespan
from context.telemetry import TelemetryContext
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from middleware.errors import unhandled_exception_handler, validation_exception_handler
from middleware.logging import log_requests
from routes import api_router, device_data_router


def create_app(telemetry: Optional[TelemetryContext] = None) -> FastAPI:
    app = FastAPI(
        title="Device Telemetry API",
        version="1.0.0",
        lifespan=lifespan
    )
    if telemetry is not None:
        app.state.telemetry = telemetry

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request logging middleware
    app.middleware("http")(log_requests)

    # Error responses
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # Include routers
    app.include_router(api_router)
    app.include_router(device_data_router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=HOST, port=PORT)
