"""Nutrition domain models."""

from dataclasses import dataclass
from enum import StrEnum


class FoodSource(StrEnum):
    """Provider that produced a search record."""

    LOCAL = "local"
    EXTERNAL_DB = "external_db"
    AI = "ai"


@dataclass(frozen=True)
class MacroProfile:
    """Calories, protein, fat and carbs, usually per 100 g of product."""

    kcal: float
    protein: float
    fat: float
    carbs: float

    def __add__(self, other: "MacroProfile") -> "MacroProfile":
        return MacroProfile(
            kcal=self.kcal + other.kcal,
            protein=self.protein + other.protein,
            fat=self.fat + other.fat,
            carbs=self.carbs + other.carbs,
        )

    def scaled(self, grams: float) -> "MacroProfile":
        """Return the contribution of ``grams`` of a product with these macros."""
        factor = grams / 100.0
        return MacroProfile(
            kcal=self.kcal * factor,
            protein=self.protein * factor,
            fat=self.fat * factor,
            carbs=self.carbs * factor,
        )

    @classmethod
    def zero(cls) -> "MacroProfile":
        return cls(0.0, 0.0, 0.0, 0.0)


@dataclass(frozen=True)
class FoodRecord:
    """Normalized search candidate returned by a source adapter."""

    source: FoodSource
    id: str
    product: str
    brand: str | None
    kcal_100: float
    protein_100: float
    fat_100: float
    carbs_100: float
    meta: dict[str, object] | None = None

    @property
    def macros(self) -> MacroProfile:
        return MacroProfile(
            kcal=self.kcal_100,
            protein=self.protein_100,
            fat=self.fat_100,
            carbs=self.carbs_100,
        )
