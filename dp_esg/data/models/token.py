# === MODULE PURPOSE ===
# Payload models for the Data Platform OAuth2 token service.

# === KEY CONCEPTS ===
# - TokenSuccess: Body of a 200 response (access token + refresh token)
# - TokenError: RFC 6749 style error body (error, error_description, error_uri)
# - Absent fields stay None and are dropped on serialization

from pydantic import BaseModel, ConfigDict, Field


class TokenSuccess(BaseModel):
    """Access token issued by the token service."""

    model_config = ConfigDict(extra="ignore")

    access_token: str | None = None
    # Upstream sends this as a numeric string ("600"); lax mode coerces it
    expires_in: int = Field(default=0, ge=0)
    refresh_token: str | None = None
    scope: str | None = None
    token_type: str | None = None

    def __str__(self) -> str:
        # Never print the tokens themselves
        return (
            f"TokenSuccess(token_type={self.token_type}, expires_in={self.expires_in}s, "
            f"scope={self.scope}, has_refresh_token={bool(self.refresh_token)})"
        )


class TokenError(BaseModel):
    """Error body returned by the token service on a non-200 status."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    error: str | None = None
    error_description: str | None = None
    error_uri: str | None = None
