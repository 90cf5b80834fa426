"""Domain models for the food dictionary."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from calories_info.domain.nutrition import MacroProfile


class DictionarySource(StrEnum):
    """How a dictionary entry came to exist."""

    MANUAL = "manual"
    EXTERNAL = "external"
    AI_ESTIMATED = "ai_estimated"


def product_key(product: str) -> str:
    """Return the case-insensitive uniqueness key for a product name."""
    return product.strip().lower()


@dataclass(frozen=True)
class DictionaryEntry:
    """Canonical food with macros per 100 g."""

    id: int
    product: str
    source: DictionarySource
    macros: MacroProfile
    usage_count: int
    last_used_at: datetime | None
    created_at: datetime | None
    updated_at: datetime | None


@dataclass(frozen=True)
class NewDictionaryEntry:
    """A dictionary entry that has not been persisted yet."""

    product: str
    source: DictionarySource
    macros: MacroProfile

    @property
    def key(self) -> str:
        return product_key(self.product)


class MacrosInput(BaseModel):
    """Macros per 100 g supplied by a client."""

    model_config = ConfigDict(extra="forbid")

    kcal_100: float = Field(ge=0, allow_inf_nan=False)
    protein_100: float = Field(ge=0, allow_inf_nan=False)
    fat_100: float = Field(ge=0, allow_inf_nan=False)
    carbs_100: float = Field(ge=0, allow_inf_nan=False)

    def to_profile(self) -> MacroProfile:
        return MacroProfile(
            kcal=self.kcal_100,
            protein=self.protein_100,
            fat=self.fat_100,
            carbs=self.carbs_100,
        )


class DictionaryEntryInput(MacrosInput):
    """A manually added dictionary entry."""

    product: str = Field(min_length=1)
    source: DictionarySource = DictionarySource.MANUAL

    @field_validator("product")
    @classmethod
    def _strip_product(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("product must not be blank")
        return stripped


class DictionaryUpdateInput(MacrosInput):
    """Macro correction for an existing dictionary entry."""

    product_id: int = Field(gt=0)
