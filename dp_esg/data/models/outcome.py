# === MODULE PURPOSE ===
# Tagged result of a single Data Platform call.
# Every client operation resolves to exactly one Success or Failure.

# === KEY CONCEPTS ===
# - Success/Failure: Built only once the response branch is known
# - is_success: Derived from the HTTP status code, never stored
# - Status fields: Always describe the response that ended the redirect chain

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field

S = TypeVar("S")
E = TypeVar("E")

HTTP_OK = 200

# Status reported when the upstream said 200 but the body was unusable
BAD_GATEWAY = 502
BAD_GATEWAY_TEXT = "Bad Gateway"


class MalformedResponse(BaseModel):
    """Response body did not match the expected shape."""

    model_config = ConfigDict(frozen=True)

    message: str
    upstream_status: int
    body_excerpt: str = Field(default="", max_length=200)


class RedirectExhausted(BaseModel):
    """Redirect chain exceeded the configured hop limit."""

    model_config = ConfigDict(frozen=True)

    message: str
    hops: int
    last_location: str


def _dump(payload: Any) -> dict[str, Any]:
    if isinstance(payload, BaseModel):
        return payload.model_dump(exclude_none=True)
    return dict(payload)


@dataclass(frozen=True)
class Success(Generic[S]):
    """Upstream answered 200 and the body decoded into the success type."""

    value: S
    status_code: int = HTTP_OK
    status_text: str = "OK"

    def __post_init__(self) -> None:
        if self.status_code != HTTP_OK:
            raise ValueError(f"Success requires status {HTTP_OK}, got {self.status_code}")

    @property
    def is_success(self) -> bool:
        return self.status_code == HTTP_OK

    def to_dict(self) -> dict[str, Any]:
        """Serialize status fields and the payload into one flat dictionary."""
        return {
            "status_code": self.status_code,
            "status_text": self.status_text,
            "is_success": self.is_success,
            **_dump(self.value),
        }


@dataclass(frozen=True)
class Failure(Generic[E]):
    """Upstream error, malformed body or exhausted redirect chain."""

    error: E
    status_code: int
    status_text: str

    def __post_init__(self) -> None:
        if self.status_code == HTTP_OK:
            raise ValueError(f"Failure cannot carry status {HTTP_OK}")

    @property
    def is_success(self) -> bool:
        return self.status_code == HTTP_OK

    def to_dict(self) -> dict[str, Any]:
        """Serialize status fields and the error payload into one flat dictionary."""
        return {
            "status_code": self.status_code,
            "status_text": self.status_text,
            "is_success": self.is_success,
            **_dump(self.error),
        }


Outcome = Union[Success[S], Failure[E]]


def malformed(message: str, status_code: int, status_text: str, body: str) -> Failure[MalformedResponse]:
    """
    Build the failure for a 200 response whose body does not decode.

    Reported as 502 so that is_success keeps tracking the status code; the
    upstream status and reason stay on the payload.
    """
    error = MalformedResponse(
        message=f"{message} (upstream {status_code} {status_text})",
        upstream_status=status_code,
        body_excerpt=body[:200],
    )
    return Failure(error=error, status_code=BAD_GATEWAY, status_text=BAD_GATEWAY_TEXT)


def redirect_exhausted(
    hops: int, last_location: str, status_code: int, status_text: str
) -> Failure[RedirectExhausted]:
    """Build the failure for a redirect chain that hit the hop limit."""
    error = RedirectExhausted(
        message=f"Gave up after {hops} redirects",
        hops=hops,
        last_location=last_location,
    )
    return Failure(error=error, status_code=status_code, status_text=status_text)
