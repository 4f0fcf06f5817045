"""Default endpoints, ports and cache policy."""

OPENWEATHER_BASE_URL = "https://api.openweathermap.org/data/2.5"
DEFAULT_UPSTREAM_TIMEOUT = 2.0  # seconds, per upstream call

DEFAULT_HTTP_PORT = 8090

DEFAULT_REDIS_HOST = "localhost"
DEFAULT_REDIS_PORT = 6379
DEFAULT_CACHE_TTL_MINUTES = 600

# Environment variables consulted by load_config, mapped to dotted config keys.
ENV_OVERRIDES: dict[str, str] = {
    "WEATHER_API_KEY": "upstream.api_key",
    "WEATHERPROXY_PORT": "server.port",
    "REDIS_HOST": "cache.host",
    "REDIS_PORT": "cache.port",
}
