"""CLI entry point for the weather proxy."""

import argparse
import json
import logging
import sys

from weatherproxy.config.loader import get_config_value, load_config, set_config_value
from weatherproxy.config.schema import CacheBackend, LoggingConfig, ProxyConfig
from weatherproxy.errors import WeatherProxyError
from weatherproxy.ingest.openweather_client import OpenWeatherClient
from weatherproxy.pipeline.lookup_pipeline import build_pipeline
from weatherproxy.reporting.health_checker import HealthChecker
from weatherproxy.storage.cache_store import build_cache_store

DEFAULT_CONFIG = "weatherproxy.yaml"

TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="weatherproxy",
        description="Caching proxy for OpenWeatherMap forecasts",
    )
    parser.add_argument(
        "--config", default=DEFAULT_CONFIG, help="Config YAML path"
    )

    sub = parser.add_subparsers(dest="command")

    # serve
    serve_p = sub.add_parser("serve", help="Run the HTTP server")
    serve_p.add_argument(
        "--api-key", "--weather-api-key", dest="api_key",
        help="OpenWeatherMap API key (or WEATHER_API_KEY)",
    )
    serve_p.add_argument(
        "--port", "--http-port", dest="port", type=int, help="Listen port"
    )
    serve_p.add_argument("--host", help="Listen address")

    # lookup
    lookup_p = sub.add_parser("lookup", help="Look up one city through the cache")
    lookup_p.add_argument("city", help="City name, e.g. Cairns")
    lookup_p.add_argument("--api-key", "--weather-api-key", dest="api_key")

    # health
    health_p = sub.add_parser("health", help="Run health checks")
    health_p.add_argument(
        "--upstream", action="store_true", help="Also probe OpenWeatherMap"
    )

    # config show / config set
    config_p = sub.add_parser("config", help="Config operations")
    config_sub = config_p.add_subparsers(dest="config_command")
    config_sub.add_parser("show", help="Display current config")
    set_p = config_sub.add_parser("set", help="Set a config value")
    set_p.add_argument("keyvalue", help="key=value to set")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    config = load_config(args.config)
    configure_logging(config.logging)

    if args.command == "serve":
        return _cmd_serve(config, args)
    elif args.command == "lookup":
        return _cmd_lookup(config, args)
    elif args.command == "health":
        return _cmd_health(config, args)
    elif args.command == "config":
        return _cmd_config(config, args)
    else:
        parser.print_help()
        return 1


class JsonFormatter(logging.Formatter):
    """One JSON object per line. Message text is escaped by json.dumps."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "time": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def configure_logging(settings: LoggingConfig) -> None:
    if settings.json_format:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JsonFormatter())
        logging.basicConfig(level=settings.level.upper(), handlers=[handler])
    else:
        logging.basicConfig(level=settings.level.upper(), format=TEXT_FORMAT)


def _with_overrides(config: ProxyConfig, args) -> ProxyConfig:
    if getattr(args, "api_key", None):
        config = set_config_value(config, "upstream.api_key", args.api_key)
    if getattr(args, "port", None):
        config = set_config_value(config, "server.port", args.port)
    if getattr(args, "host", None):
        config = set_config_value(config, "server.host", args.host)
    return config


def _cmd_serve(config: ProxyConfig, args) -> int:
    import uvicorn

    from weatherproxy.api.app import create_app

    config = _with_overrides(config, args)
    if not config.upstream.api_key:
        print("Error: an OpenWeatherMap API key is required (--api-key or WEATHER_API_KEY)")
        return 1

    cache = build_cache_store(config.cache)
    if config.cache.backend == CacheBackend.REDIS and not cache.ping():
        logger.error(
            "Redis not reachable at %s:%d", config.cache.host, config.cache.port
        )
        return 1

    pipeline = build_pipeline(config, cache=cache)
    checker = HealthChecker(cache, pipeline.gateway)
    app = create_app(pipeline, checker)

    logger.info(
        "Serving on %s:%d (cache=%s, ttl=%dm)",
        config.server.host, config.server.port,
        config.cache.backend.value, config.cache.ttl_minutes,
    )
    uvicorn.run(
        app,
        host=config.server.host,
        port=config.server.port,
        log_level=config.logging.level.lower(),
    )
    return 0


def _cmd_lookup(config: ProxyConfig, args) -> int:
    config = _with_overrides(config, args)
    pipeline = build_pipeline(config)
    try:
        result = pipeline.run(args.city)
    except WeatherProxyError as e:
        print(f"Error ({e.status_code}): {e}")
        return 1
    print(result.payload)
    logger.info("city=%s source=%s", result.city, result.source.value)
    return 0


def _cmd_health(config: ProxyConfig, args) -> int:
    cache = build_cache_store(config.cache)
    client = OpenWeatherClient(
        api_key=config.upstream.api_key,
        base_url=config.upstream.base_url,
        timeout=config.upstream.timeout_seconds,
    )
    status = HealthChecker(cache, client).check(probe_upstream=args.upstream)

    print(f"Cache ({status.cache_backend}): {'OK' if status.cache_reachable else 'FAIL'}")
    if status.upstream_reachable is not None:
        print(f"OpenWeatherMap: {'OK' if status.upstream_reachable else 'FAIL'}")
    return 0 if status.ok else 1


def _cmd_config(config: ProxyConfig, args) -> int:
    if args.config_command == "show":
        print(config.model_dump_json(indent=2))
        return 0
    elif args.config_command == "set":
        kv = args.keyvalue
        if "=" not in kv:
            print("Error: use key=value format")
            return 1
        key, value = kv.split("=", 1)
        try:
            new_config = set_config_value(config, key.strip(), value.strip())
            print(f"Set {key} = {get_config_value(new_config, key.strip())}")
            return 0
        except Exception as e:
            print(f"Error: {e}")
            return 1
    else:
        print("Use: config show | config set key=value")
        return 1
