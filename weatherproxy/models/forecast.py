"""OpenWeatherMap 5-day / 3-hour forecast data models."""

import json
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class MainMetrics:
    temp: float = 0.0
    feels_like: float = 0.0
    temp_min: float = 0.0
    temp_max: float = 0.0
    pressure: int = 0
    sea_level: int = 0
    grnd_level: int = 0
    humidity: int = 0
    temp_kf: float = 0.0


@dataclass(frozen=True)
class WeatherCondition:
    id: int
    main: str
    description: str
    icon: str


@dataclass(frozen=True)
class Clouds:
    all: int = 0


@dataclass(frozen=True)
class Wind:
    speed: float = 0.0
    deg: int = 0
    gust: float | None = None


@dataclass(frozen=True)
class Precipitation:
    three_hours: float = 0.0  # JSON key "3h"


@dataclass(frozen=True)
class EntrySys:
    pod: str = ""  # "d" or "n"


@dataclass(frozen=True)
class ForecastEntry:
    dt: int
    main: MainMetrics
    weather: tuple[WeatherCondition, ...]
    clouds: Clouds
    wind: Wind
    sys: EntrySys
    dt_txt: str
    rain: Precipitation | None = None
    snow: Precipitation | None = None
    visibility: int | None = None
    pop: float | None = None


@dataclass(frozen=True)
class Coord:
    lat: float = 0.0
    lon: float = 0.0


@dataclass(frozen=True)
class CityInfo:
    id: int
    name: str
    coord: Coord
    country: str
    population: int
    timezone: int
    sunrise: int
    sunset: int


@dataclass(frozen=True)
class ForecastRecord:
    """Canonical forecast response, as returned upstream and stored in the cache."""

    cod: str
    message: int | float
    cnt: int
    entries: tuple[ForecastEntry, ...]
    city: CityInfo

    @classmethod
    def from_dict(cls, raw: Any) -> "ForecastRecord":
        """Build a record from a decoded JSON payload.

        Missing or null scalar fields take their zero value. Raises
        ValueError when the payload does not have the forecast shape.
        """
        if not isinstance(raw, dict):
            raise ValueError(f"Forecast payload must be an object, got {type(raw).__name__}")
        raw = _as_dict(raw, "forecast")
        try:
            entries = tuple(_parse_entry(e) for e in _as_list(raw.get("list"), "list"))
            return cls(
                cod=str(raw.get("cod", "")),
                message=_as_number(raw.get("message", 0)),
                cnt=int(raw.get("cnt", 0)),
                entries=entries,
                city=_parse_city(_as_dict(raw.get("city"), "city")),
            )
        except (TypeError, ValueError) as e:
            raise ValueError(f"Malformed forecast payload: {e}") from e

    @classmethod
    def from_json(cls, text: str | bytes) -> "ForecastRecord":
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as e:
            raise ValueError(f"Forecast payload is not valid JSON: {e}") from e
        return cls.from_dict(raw)

    def to_dict(self) -> dict:
        return {
            "cod": self.cod,
            "message": self.message,
            "cnt": self.cnt,
            "list": [_entry_to_dict(e) for e in self.entries],
            "city": _city_to_dict(self.city),
        }

    def to_json(self) -> str:
        """Serialize deterministically so equal records give identical text."""
        return json.dumps(self.to_dict(), separators=(",", ":"))


# --- Parsing helpers ---


def _as_dict(value: Any, name: str) -> dict:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"'{name}' must be an object")
    # null reads as absent, so the field falls back to its zero value
    return {k: v for k, v in value.items() if v is not None}


def _as_list(value: Any, name: str) -> list:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"'{name}' must be an array")
    return value


def _as_number(value: Any) -> int | float:
    if isinstance(value, bool):
        raise ValueError("expected a number")
    if isinstance(value, int | float):
        return value
    return float(value)


def _parse_entry(raw: Any) -> ForecastEntry:
    raw = _as_dict(raw, "list[]")
    main = _as_dict(raw.get("main"), "main")
    wind = _as_dict(raw.get("wind"), "wind")
    gust = wind.get("gust")
    visibility = raw.get("visibility")
    pop = raw.get("pop")
    return ForecastEntry(
        dt=int(raw.get("dt", 0)),
        main=MainMetrics(
            temp=float(main.get("temp", 0.0)),
            feels_like=float(main.get("feels_like", 0.0)),
            temp_min=float(main.get("temp_min", 0.0)),
            temp_max=float(main.get("temp_max", 0.0)),
            pressure=int(main.get("pressure", 0)),
            sea_level=int(main.get("sea_level", 0)),
            grnd_level=int(main.get("grnd_level", 0)),
            humidity=int(main.get("humidity", 0)),
            temp_kf=float(main.get("temp_kf", 0.0)),
        ),
        weather=tuple(
            _parse_condition(w) for w in _as_list(raw.get("weather"), "weather")
        ),
        clouds=Clouds(all=int(_as_dict(raw.get("clouds"), "clouds").get("all", 0))),
        wind=Wind(
            speed=float(wind.get("speed", 0.0)),
            deg=int(wind.get("deg", 0)),
            gust=float(gust) if gust is not None else None,
        ),
        sys=EntrySys(pod=str(_as_dict(raw.get("sys"), "sys").get("pod", ""))),
        dt_txt=str(raw.get("dt_txt", "")),
        rain=_parse_precipitation(raw.get("rain"), "rain"),
        snow=_parse_precipitation(raw.get("snow"), "snow"),
        visibility=int(visibility) if visibility is not None else None,
        pop=float(pop) if pop is not None else None,
    )


def _parse_condition(raw: Any) -> WeatherCondition:
    raw = _as_dict(raw, "weather[]")
    return WeatherCondition(
        id=int(raw.get("id", 0)),
        main=str(raw.get("main", "")),
        description=str(raw.get("description", "")),
        icon=str(raw.get("icon", "")),
    )


def _parse_precipitation(raw: Any, name: str) -> Precipitation | None:
    if raw is None:
        return None
    raw = _as_dict(raw, name)
    return Precipitation(three_hours=float(raw.get("3h", 0.0)))


def _parse_city(raw: dict) -> CityInfo:
    coord = _as_dict(raw.get("coord"), "coord")
    return CityInfo(
        id=int(raw.get("id", 0)),
        name=str(raw.get("name", "")),
        coord=Coord(lat=float(coord.get("lat", 0.0)), lon=float(coord.get("lon", 0.0))),
        country=str(raw.get("country", "")),
        population=int(raw.get("population", 0)),
        timezone=int(raw.get("timezone", 0)),
        sunrise=int(raw.get("sunrise", 0)),
        sunset=int(raw.get("sunset", 0)),
    )


# --- Serialization helpers ---


def _entry_to_dict(entry: ForecastEntry) -> dict:
    m = entry.main
    wind: dict[str, Any] = {"speed": entry.wind.speed, "deg": entry.wind.deg}
    if entry.wind.gust is not None:
        wind["gust"] = entry.wind.gust

    data: dict[str, Any] = {
        "dt": entry.dt,
        "main": {
            "temp": m.temp,
            "feels_like": m.feels_like,
            "temp_min": m.temp_min,
            "temp_max": m.temp_max,
            "pressure": m.pressure,
            "sea_level": m.sea_level,
            "grnd_level": m.grnd_level,
            "humidity": m.humidity,
            "temp_kf": m.temp_kf,
        },
        "weather": [
            {"id": w.id, "main": w.main, "description": w.description, "icon": w.icon}
            for w in entry.weather
        ],
        "clouds": {"all": entry.clouds.all},
        "wind": wind,
    }
    if entry.visibility is not None:
        data["visibility"] = entry.visibility
    if entry.pop is not None:
        data["pop"] = entry.pop
    if entry.rain is not None:
        data["rain"] = {"3h": entry.rain.three_hours}
    if entry.snow is not None:
        data["snow"] = {"3h": entry.snow.three_hours}
    data["sys"] = {"pod": entry.sys.pod}
    data["dt_txt"] = entry.dt_txt
    return data


def _city_to_dict(city: CityInfo) -> dict:
    return {
        "id": city.id,
        "name": city.name,
        "coord": {"lat": city.coord.lat, "lon": city.coord.lon},
        "country": city.country,
        "population": city.population,
        "timezone": city.timezone,
        "sunrise": city.sunrise,
        "sunset": city.sunset,
    }
