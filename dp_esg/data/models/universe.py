# === MODULE PURPOSE ===
# Payload models for the ESG universe service.

# === KEY CONCEPTS ===
# - Columnar payload: "headers" describes columns, "data" holds row arrays
# - UniverseRow: Cell 0 -> PermId, cell 1 -> PrimaryRic, cell 2 -> CommonName
# - UniverseError: Decoded from the "error" wrapper object, not the top level

# === PAYLOAD SHAPES ===
# Success:
#   {"links": {"count": 9000},
#    "headers": [{"name": "PermId", "title": "...", "type": "string", "description": "..."}],
#    "data": [["4295875633", "AAPL.O", "Apple Inc"], ...]}
# Error:
#   {"error": {"id": "...", "code": "400", "message": "...", "status": "Bad Request",
#              "errors": {"key": "...", "name": "...", "invalidName": "...", "invalidValues": []}}}

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class HeaderMeta(BaseModel):
    """Column description from the "headers" array."""

    model_config = ConfigDict(extra="ignore")

    name: str | None = None
    title: str | None = None
    type: str | None = None
    description: str | None = None


class UniverseRow(BaseModel):
    """One tracked entity of the universe."""

    model_config = ConfigDict(frozen=True)

    perm_id: str | None = None
    primary_ric: str | None = None
    common_name: str | None = None

    @classmethod
    def from_cells(cls, cells: list[str | None]) -> UniverseRow:
        """Map positional cells; short rows leave trailing fields unset, extras are ignored."""
        padded = list(cells[:3]) + [None] * (3 - min(len(cells), 3))
        return cls(perm_id=padded[0], primary_ric=padded[1], common_name=padded[2])


class _Links(BaseModel):
    model_config = ConfigDict(extra="ignore")

    count: int | None = None


class _UniversePayload(BaseModel):
    # Permids may arrive as JSON numbers
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    links: _Links | None = None
    headers: list[HeaderMeta] | None = None
    data: list[list[str | None]] | None = None


class UniverseSuccess(BaseModel):
    """Decoded universe: row count, column metadata and rows."""

    count: int = 0
    header_metas: list[HeaderMeta] = Field(default_factory=list)
    rows: list[UniverseRow] = Field(default_factory=list)

    @classmethod
    def from_json(cls, body: str | bytes) -> UniverseSuccess:
        """
        Decode a 200 response body.

        Raises:
            pydantic.ValidationError: If the body is not a JSON object of the expected shape
        """
        payload = _UniversePayload.model_validate_json(body)
        count = 0
        if payload.links is not None and payload.links.count is not None:
            count = payload.links.count
        return cls(
            count=count,
            header_metas=payload.headers or [],
            rows=[UniverseRow.from_cells(cells) for cells in payload.data or []],
        )

    def __str__(self) -> str:
        return f"UniverseSuccess(count={self.count}, rows={len(self.rows)})"


class ErrorDetail(BaseModel):
    """Field-level detail attached to a universe error."""

    model_config = ConfigDict(
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )

    invalid_name: str | None = None
    invalid_values: list[str] | None = None
    key: str | None = None
    name: str | None = None
    value: str | None = None


class UniverseError(BaseModel):
    """Error object from the universe service."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    code: str | None = None
    id: str | None = None
    message: str | None = None
    status: str | None = None
    errors: ErrorDetail | None = None

    @field_validator("errors", mode="before")
    @classmethod
    def _first_detail(cls, value):
        # Some endpoints send a list of details; keep the first one
        if isinstance(value, list):
            return value[0] if value else None
        return value

    @classmethod
    def from_json(cls, body: str | bytes) -> UniverseError:
        """
        Decode the inner object of an {"error": {...}} body.

        Returns an empty UniverseError when the wrapper is missing.

        Raises:
            pydantic.ValidationError: If the body is not a JSON object of the expected shape
        """
        envelope = _UniverseErrorEnvelope.model_validate_json(body)
        return envelope.error or cls()


class _UniverseErrorEnvelope(BaseModel):
    model_config = ConfigDict(extra="ignore")

    error: UniverseError | None = None
