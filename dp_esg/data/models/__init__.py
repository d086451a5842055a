# === MODULE PURPOSE ===
# Outcome and payload models for Data Platform responses.

from dp_esg.data.models.outcome import (
    Failure,
    MalformedResponse,
    Outcome,
    RedirectExhausted,
    Success,
)
from dp_esg.data.models.token import TokenError, TokenSuccess
from dp_esg.data.models.universe import (
    ErrorDetail,
    HeaderMeta,
    UniverseError,
    UniverseRow,
    UniverseSuccess,
)

__all__ = [
    "ErrorDetail",
    "Failure",
    "HeaderMeta",
    "MalformedResponse",
    "Outcome",
    "RedirectExhausted",
    "Success",
    "TokenError",
    "TokenSuccess",
    "UniverseError",
    "UniverseRow",
    "UniverseSuccess",
]
