"""Error taxonomy for scan configuration and probe outcomes."""

from enum import Enum


class ConfigurationError(Exception):
    """Raised before any network activity when scan input is unusable."""

    def __init__(self, message: str, value: object = None):
        super().__init__(message)
        self.message = message
        self.value = value

    def __str__(self) -> str:
        if self.value is None:
            return self.message
        return f"{self.message}: {self.value!r}"


class InvalidRange(ConfigurationError):
    """A CIDR string could not be parsed into an IPv4 network."""

    def __init__(self, value: str, reason: str):
        super().__init__(f"Invalid IP range ({reason})", value)
        self.reason = reason


class PatternError(ConfigurationError):
    """The content-match pattern is not a valid regular expression."""

    def __init__(self, value: str, reason: str):
        super().__init__(f"Invalid regex pattern ({reason})", value)
        self.reason = reason


class ProbeError(str, Enum):
    """Why a single probe did not complete."""

    CONNECT_FAILED = "connect_failed"
    TIMEOUT = "timeout"
    READ_FAILED = "read_failed"
    MALFORMED_RESPONSE = "malformed_response"
    TLS_ERROR = "tls_error"
    RESOURCE_EXHAUSTED = "resource_exhausted"


PROBE_ERROR_REASONS = {
    ProbeError.CONNECT_FAILED: "Connection failed",
    ProbeError.TIMEOUT: "Timed out",
    ProbeError.READ_FAILED: "Read failed",
    ProbeError.MALFORMED_RESPONSE: "Malformed HTTP response",
    ProbeError.TLS_ERROR: "TLS handshake failed",
    ProbeError.RESOURCE_EXHAUSTED: "Local resources exhausted",
}
