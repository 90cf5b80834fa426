"""Domain models for consumption logging."""

from dataclasses import dataclass
from datetime import datetime

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from calories_info.domain.dictionary import DictionaryEntry, NewDictionaryEntry

DEFAULT_MEAL_TYPE = "unspecified"

# Accepted spellings of the quantity, in order of precedence.
QUANTITY_KEYS = ("quantity_grams", "weight", "quantity_g")


def collapse_quantity_aliases(data: object) -> object:
    """Keep the first non-null quantity spelling as ``quantity_grams``."""
    if not isinstance(data, dict):
        return data
    collapsed = {key: value for key, value in data.items() if key not in QUANTITY_KEYS}
    for key in QUANTITY_KEYS:
        if data.get(key) is not None:
            collapsed["quantity_grams"] = data[key]
            break
    return collapsed


class LogItemInput(BaseModel):
    """One consumption event submitted for ingestion."""

    model_config = ConfigDict(extra="forbid")

    product: str | None = None
    product_id: int | None = Field(default=None, gt=0)
    quantity_grams: float = Field(gt=0, allow_inf_nan=False)
    meal_type: str = DEFAULT_MEAL_TYPE
    occurred_at: datetime | None = None

    @model_validator(mode="before")
    @classmethod
    def _collapse_quantity(cls, data: object) -> object:
        return collapse_quantity_aliases(data)

    @field_validator("product")
    @classmethod
    def _strip_product(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None

    @field_validator("meal_type", mode="before")
    @classmethod
    def _default_meal_type(cls, value: object) -> object:
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_MEAL_TYPE
        return value.strip() if isinstance(value, str) else value

    @model_validator(mode="after")
    def _require_reference(self) -> "LogItemInput":
        if self.product is None and self.product_id is None:
            raise ValueError("Either product or product_id is required")
        return self


class QuantityUpdateInput(BaseModel):
    """Correction of a logged quantity."""

    model_config = ConfigDict(extra="forbid")

    id: int = Field(gt=0)
    quantity_grams: float = Field(gt=0, allow_inf_nan=False)

    @model_validator(mode="before")
    @classmethod
    def _collapse_quantity(cls, data: object) -> object:
        return collapse_quantity_aliases(data)


@dataclass(frozen=True)
class PendingLogEntry:
    """A validated log row waiting for the atomic write.

    ``food`` is either an existing dictionary entry or a new one that the
    write must insert if absent before the log row references it.
    """

    food: DictionaryEntry | NewDictionaryEntry
    quantity_grams: float
    meal_type: str
    occurred_at: datetime | None


@dataclass(frozen=True)
class LogEntry:
    """A persisted consumption event."""

    id: int
    dictionary_id: int
    quantity_grams: float
    meal_type: str
    occurred_at: datetime
