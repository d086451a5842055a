# === MODULE PURPOSE ===
# Exceptions raised inside the Data Platform clients.
# Redirect loops are turned into Failure outcomes by the clients;
# only TransportError leaves a client.


class DataPlatformError(Exception):
    """Base exception for Data Platform client errors."""


class RedirectLoopError(DataPlatformError):
    """Redirect chain exceeded the configured hop limit."""

    def __init__(self, hops: int, last_location: str, status_code: int, status_text: str):
        self.hops = hops
        self.last_location = last_location
        self.status_code = status_code
        self.status_text = status_text
        super().__init__(f"Too many redirects ({hops}), last location: {last_location}")


class TransportError(DataPlatformError):
    """No HTTP response was received (connection, timeout, protocol errors)."""

    def __init__(self, url: str, cause: Exception):
        self.url = url
        self.cause = cause
        super().__init__(f"HTTP transport error for {url}: {cause}")
