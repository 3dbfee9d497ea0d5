"""Pydantic models for remote payloads and denormalized results."""

from typing import Dict, List, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class RawRecord(BaseModel):
    """A sales receipt as returned by the records endpoint."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(validation_alias=AliasChoices("receipt_id", "id"))
    date: Optional[str] = None
    seller_id: Optional[str] = None
    customer_id: Optional[str] = None
    total_amount: Optional[float] = None

    @field_validator("id", "seller_id", "customer_id", mode="before")
    @classmethod
    def _coerce_id(cls, value):
        # Ids arrive as strings or integers depending on the backend
        return str(value) if value is not None else None


class RecordsPayload(BaseModel):
    """Body of GET /records."""

    total: int
    items: List[RawRecord] = Field(default_factory=list)


class Record(BaseModel):
    """A receipt joined with its reference labels, ready for display."""

    id: str
    date: Optional[str] = None
    seller_label: Optional[str] = None
    customer_label: Optional[str] = None
    total_amount: Optional[float] = None


class RecordPage(BaseModel):
    total: int
    items: List[Record] = Field(default_factory=list)


class ReferenceEntry(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value):
        return str(value)


def parse_reference_table(data: Union[list, dict]) -> Dict[str, str]:
    """
    Build an id -> label table from a reference payload.

    Accepts an array of {id, name} objects or an already-built id -> name object.

    Raises:
        ValueError: If the payload is neither (pydantic errors are ValueErrors)
    """
    if isinstance(data, dict):
        return {str(key): str(value) for key, value in data.items()}
    if isinstance(data, list):
        entries = [ReferenceEntry.model_validate(item) for item in data]
        return {entry.id: entry.name for entry in entries}
    raise ValueError(f"Unexpected reference payload type: {type(data).__name__}")


class Lookups(BaseModel):
    """Reference tables (id -> label) keyed by entity kind."""

    model_config = ConfigDict(frozen=True)

    tables: Dict[str, Dict[str, str]] = Field(default_factory=dict)

    def table(self, kind: str) -> Dict[str, str]:
        return self.tables.get(kind, {})

    def values(self, kind: str) -> List[str]:
        """Labels only, in table order (for filter option lists)."""
        return list(self.table(kind).values())

    def label(self, kind: str, entity_id: Optional[str]) -> Optional[str]:
        if entity_id is None:
            return None
        return self.table(kind).get(entity_id)

    @property
    def sellers(self) -> Dict[str, str]:
        return self.table("sellers")

    @property
    def customers(self) -> Dict[str, str]:
        return self.table("customers")
