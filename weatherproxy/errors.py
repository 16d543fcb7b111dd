"""Typed errors raised by the lookup path and mapped to HTTP responses."""


class ProxyError(Exception):
    """Base error carrying the HTTP status and label returned to the client."""

    status_code: int = 500
    error: str = "Server error"

    def __init__(self, message: str, details: object | None = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_body(self, **extra) -> dict:
        body = {"success": False, "error": self.error, "message": self.message}
        if self.details is not None:
            body["details"] = self.details
        body.update(extra)
        return body


class UnsupportedCityError(ProxyError):
    status_code = 400
    error = "Unsupported city"

    def __init__(self, city: str, supported: list[str]):
        super().__init__(
            f"Unknown city code '{city}'. Valid codes: {', '.join(supported)}"
        )
        self.city = city
        self.supported = supported

    def to_body(self, **extra) -> dict:
        return super().to_body(supportedCities=self.supported, **extra)


class ConfigurationError(ProxyError):
    status_code = 500
    error = "Server configuration error"


class UpstreamTimeoutError(ProxyError):
    status_code = 504
    error = "Upstream timeout"


class UpstreamAuthError(ProxyError):
    """Upstream rejected our credential (401/403); reported as our own 500."""

    status_code = 500
    error = "Upstream credential rejected"


class UpstreamStatusError(ProxyError):
    """Any other upstream HTTP error; its status is passed through."""

    error = "CWA API error"

    def __init__(self, status_code: int, message: str, details: object | None = None):
        super().__init__(message, details)
        self.status_code = status_code


class UpstreamUnavailableError(ProxyError):
    status_code = 500
    error = "Server error"


class MalformedUpstreamResponseError(ProxyError):
    status_code = 500
    error = "Malformed upstream response"


class NoForecastDataError(ProxyError):
    status_code = 404
    error = "No data"


class InternalProxyError(ProxyError):
    """Any unexpected failure, mapped at the HTTP boundary."""

    status_code = 500
    error = "Server error"
