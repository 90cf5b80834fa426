"""Macro estimation for unknown foods using an LLM."""

import logging
from dataclasses import dataclass
from typing import Protocol

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from calories_info.domain.errors import EstimatorNotConfiguredError, UpstreamFatalError
from calories_info.domain.nutrition import MacroProfile

_logger = logging.getLogger(__name__)

MACRO_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "kcal": {"type": "number", "minimum": 0},
        "protein": {"type": "number", "minimum": 0},
        "fat": {"type": "number", "minimum": 0},
        "carbs": {"type": "number", "minimum": 0},
    },
    "required": ["kcal", "protein", "fat", "carbs"],
    "additionalProperties": False,
}

_PROMPT_TEMPLATE = (
    "You are a nutrition assistant. For the product below, which may be "
    "written in any language, return approximate calories and macronutrients "
    "per 100 g of product. Answer strictly with a JSON object of the form "
    '{{"kcal": number, "protein": number, "fat": number, "carbs": number}} '
    "and nothing else.\n\n"
    'Product: "{product}"'
)


class MacroEstimate(BaseModel):
    """Structured estimator reply; exactly four finite non-negative numbers."""

    model_config = ConfigDict(extra="forbid", strict=True)

    kcal: float = Field(ge=0, allow_inf_nan=False)
    protein: float = Field(ge=0, allow_inf_nan=False)
    fat: float = Field(ge=0, allow_inf_nan=False)
    carbs: float = Field(ge=0, allow_inf_nan=False)


class EstimatorClient(Protocol):
    """Interface for a chat-style LLM returning raw message content."""

    async def complete_json(
        self,
        *,
        model: str,
        prompt: str,
        schema: dict[str, object],
        temperature: float,
    ) -> str:
        """Return the message content of a structured-output completion."""


@dataclass
class EstimatorService:
    """Prepares estimator prompts and validates the returned macros."""

    client: EstimatorClient | None
    model: str
    temperature: float = 0.2

    @property
    def is_configured(self) -> bool:
        return self.client is not None

    async def estimate(self, product: str) -> MacroProfile:
        """Estimate macros per 100 g for ``product``.

        Raises ``EstimatorNotConfiguredError`` without credentials and
        ``UpstreamFatalError`` for any failed or invalid reply.
        """
        if self.client is None:
            raise EstimatorNotConfiguredError("Macro estimator is not configured")

        content = await self.client.complete_json(
            model=self.model,
            prompt=_PROMPT_TEMPLATE.format(product=product),
            schema=MACRO_SCHEMA,
            temperature=self.temperature,
        )
        try:
            estimate = MacroEstimate.model_validate_json(content)
        except ValidationError as exc:
            _logger.error(
                "Estimator returned invalid macros",
                extra={"product": product, "content_sample": content[:200]},
            )
            raise UpstreamFatalError("Estimator returned invalid macros") from exc

        return MacroProfile(
            kcal=estimate.kcal,
            protein=estimate.protein,
            fat=estimate.fat,
            carbs=estimate.carbs,
        )
