"""Flatten the CWA weather-element payload into per-period forecast records."""

import logging

from weatherproxy.errors import MalformedUpstreamResponseError, NoForecastDataError
from weatherproxy.models.forecast import ForecastPeriod, ForecastResult

logger = logging.getLogger(__name__)

# elementName -> (ForecastPeriod field, suffix)
ELEMENT_FIELDS: dict[str, tuple[str, str]] = {
    "Wx": ("weather", ""),
    "PoP": ("rain", "%"),
    "MinT": ("min_temp", "°C"),
    "MaxT": ("max_temp", "°C"),
    "CI": ("comfort", ""),
    "WS": ("wind_speed", ""),
}


def extract_location(raw: dict, location_name: str = "") -> tuple[dict, str]:
    """Return the first location record and the dataset update time.

    Raises MalformedUpstreamResponseError when `records` is missing and
    NoForecastDataError when the location list is empty.
    """
    records = raw.get("records") if isinstance(raw, dict) else None
    if not isinstance(records, dict):
        raise MalformedUpstreamResponseError(
            "Upstream response is missing the 'records' object"
        )
    locations = records.get("location")
    if not isinstance(locations, list):
        raise MalformedUpstreamResponseError(
            "Upstream response is missing the 'records.location' list"
        )
    if not locations or not isinstance(locations[0], dict):
        raise NoForecastDataError(f"No weather data available for {location_name}".strip())
    return locations[0], str(records.get("datasetDescription", ""))


def transform_forecast(
    location: dict, city_key: str, update_time: str = ""
) -> ForecastResult:
    """Build a ForecastResult from one upstream location record.

    The first element's time series sets the number and bounds of periods.
    Elements with fewer slots leave the remaining fields empty; extra slots
    are ignored.
    """
    elements = _checked_elements(location, city_key)

    _, base_series = elements[0]
    periods: list[ForecastPeriod] = []
    for i, slot in enumerate(base_series):
        values: dict[str, str] = {}
        for name, series in elements:
            mapping = ELEMENT_FIELDS.get(name)
            if mapping is None or i >= len(series):
                continue
            value = series[i].get("parameter", {}).get("parameterName")
            if value is None:
                continue
            field, suffix = mapping
            values[field] = f"{value}{suffix}"

        periods.append(
            ForecastPeriod(
                start_time=str(slot.get("startTime", "")),
                end_time=str(slot.get("endTime", "")),
                **values,
            )
        )

    lengths = {len(series) for _, series in elements}
    if len(lengths) > 1:
        logger.warning(
            "Weather elements for %s disagree in length %s; using %d periods",
            city_key, sorted(lengths), len(periods),
        )

    return ForecastResult(
        city=str(location.get("locationName", "")),
        city_key=city_key,
        update_time=update_time,
        forecasts=tuple(periods),
    )


def _checked_elements(location: dict, city_key: str) -> list[tuple[str, list[dict]]]:
    """Return (elementName, time series) pairs.

    Every element must be an object, every series a list, and every slot an
    object whose optional `parameter` is an object.
    """
    elements = location.get("weatherElement")
    if not elements:
        raise NoForecastDataError(
            f"No weather elements for {location.get('locationName', city_key)}"
        )
    if not isinstance(elements, list):
        raise MalformedUpstreamResponseError("'weatherElement' is not a list")

    checked: list[tuple[str, list[dict]]] = []
    for element in elements:
        if not isinstance(element, dict):
            raise MalformedUpstreamResponseError("Weather element is not an object")
        name = str(element.get("elementName", ""))
        series = element.get("time")
        if series is None:
            series = []
        if not isinstance(series, list):
            raise MalformedUpstreamResponseError(f"'time' of element {name} is not a list")
        for slot in series:
            if not isinstance(slot, dict) or not isinstance(slot.get("parameter", {}), dict):
                raise MalformedUpstreamResponseError(
                    f"Time slot of element {name} is not a valid object"
                )
        checked.append((name, series))
    return checked
