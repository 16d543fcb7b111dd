"""CWA forecast data models."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class ForecastPeriod:
    start_time: str
    end_time: str
    weather: str = ""
    rain: str = ""
    min_temp: str = ""
    max_temp: str = ""
    comfort: str = ""
    wind_speed: str = ""

    def to_dict(self) -> dict[str, str]:
        return {
            "startTime": self.start_time,
            "endTime": self.end_time,
            "weather": self.weather,
            "rain": self.rain,
            "minTemp": self.min_temp,
            "maxTemp": self.max_temp,
            "comfort": self.comfort,
            "windSpeed": self.wind_speed,
        }


@dataclass(frozen=True)
class ForecastResult:
    city: str  # localized display name, e.g. 臺北市
    city_key: str
    update_time: str
    forecasts: tuple[ForecastPeriod, ...]

    def to_dict(self) -> dict:
        """Serialize with the camelCase keys used on the wire."""
        return {
            "city": self.city,
            "cityKey": self.city_key,
            "updateTime": self.update_time,
            "forecasts": [p.to_dict() for p in self.forecasts],
        }


@dataclass(frozen=True)
class CacheRecord:
    payload: ForecastResult
    captured_at: datetime


@dataclass(frozen=True)
class WeatherLookup:
    """Outcome of a successful city lookup."""
    result: ForecastResult
    cached: bool
