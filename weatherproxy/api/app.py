"""FastAPI application: the /weather cache-aside endpoint plus health checks."""

import logging

from fastapi import FastAPI, Query, Request, Response

from weatherproxy.errors import register_error_handlers
from weatherproxy.pipeline.lookup_pipeline import LookupPipeline
from weatherproxy.reporting.health_checker import HealthChecker

logger = logging.getLogger(__name__)

SERVICE_NAME = "weatherproxy"


def create_app(pipeline: LookupPipeline, health_checker: HealthChecker) -> FastAPI:
    app = FastAPI(title="Weather Proxy", version="0.1.0")
    app.state.pipeline = pipeline
    app.state.health_checker = health_checker

    # Centralized error handlers
    register_error_handlers(app)

    # Sync routes run on the server thread pool, one request per thread.
    @app.get("/weather")
    def get_weather(request: Request, city: str | None = Query(default=None)) -> Response:
        """Forecast for a city, served from cache when fresh."""
        result = request.app.state.pipeline.run(city)
        logger.info("city=%s source=%s", result.city, result.source.value)
        return Response(
            content=result.payload,
            media_type="application/json",
            headers={"X-Cache": "HIT" if result.cache_hit else "MISS"},
        )

    @app.get("/health")
    def health(request: Request, upstream: bool = False) -> dict:
        """Cache reachability, and optionally upstream reachability."""
        status = request.app.state.health_checker.check(probe_upstream=upstream)
        result = {
            "status": "ok" if status.ok else "degraded",
            "service": SERVICE_NAME,
            "cache_backend": status.cache_backend,
            "cache": status.cache_reachable,
            "checked_at": status.checked_at,
        }
        if status.upstream_reachable is not None:
            result["upstream"] = status.upstream_reachable
        return result

    return app
