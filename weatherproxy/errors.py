"""Custom exceptions and centralized FastAPI error handlers."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class WeatherProxyError(Exception):
    """Base exception with HTTP status code."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.status_code = status_code


class InvalidCityError(WeatherProxyError):
    def __init__(self, message: str = "Query parameter 'city' is required"):
        super().__init__(message, status_code=400)


class UpstreamError(WeatherProxyError):
    """The forecast provider failed or returned something unusable."""

    def __init__(self, message: str, status_code: int = 502, upstream_status: int | None = None):
        super().__init__(message, status_code=status_code)
        self.upstream_status = upstream_status


class UpstreamTimeoutError(UpstreamError):
    def __init__(self, message: str):
        super().__init__(message, status_code=504)


class CityNotFoundError(UpstreamError):
    def __init__(self, city: str):
        super().__init__(f"City not found: {city}", status_code=404, upstream_status=404)
        self.city = city


class CacheStoreError(WeatherProxyError):
    def __init__(self, message: str):
        super().__init__(message, status_code=503)


class CacheReadError(CacheStoreError):
    pass


class CacheWriteError(CacheStoreError):
    pass


def register_error_handlers(app: FastAPI) -> None:
    """Register centralized exception handlers on the FastAPI app."""

    @app.exception_handler(WeatherProxyError)
    async def handle_weatherproxy_error(_request: Request, exc: WeatherProxyError):
        return JSONResponse({"error": str(exc)}, status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def handle_unexpected(_request: Request, exc: Exception):
        logger.exception("Unhandled error: %s", exc)
        return JSONResponse(
            {"error": "Internal server error"},
            status_code=500,
        )
