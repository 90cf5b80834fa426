"""OpenAI chat completions client for macro estimation."""

import logging
from dataclasses import dataclass

from openai import APIStatusError, AsyncOpenAI, OpenAIError

from calories_info.domain.errors import UpstreamFatalError
from calories_info.services.estimator import EstimatorClient

_logger = logging.getLogger(__name__)


@dataclass
class OpenAIEstimatorClient(EstimatorClient):
    """Estimator client backed by the OpenAI chat completions API."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str, timeout_seconds: float) -> "OpenAIEstimatorClient":
        """Create a client with a hard timeout and no automatic retries."""
        return cls(
            client=AsyncOpenAI(
                api_key=api_key, timeout=timeout_seconds, max_retries=0
            )
        )

    async def complete_json(
        self,
        *,
        model: str,
        prompt: str,
        schema: dict[str, object],
        temperature: float,
    ) -> str:
        """Request a strict JSON schema completion and return its content."""
        try:
            response = await self.client.chat.completions.create(
                model=model,
                messages=[{"role": "user", "content": prompt}],
                temperature=temperature,
                response_format={
                    "type": "json_schema",
                    "json_schema": {
                        "name": "macro_estimate",
                        "strict": True,
                        "schema": schema,
                    },
                },
            )
        except APIStatusError as exc:
            _logger.error(
                "Estimator request failed",
                extra={"status": exc.status_code},
            )
            raise UpstreamFatalError("Estimator request failed") from exc
        except OpenAIError as exc:
            _logger.error("Estimator unavailable", extra={"error": str(exc)})
            raise UpstreamFatalError("Estimator unavailable") from exc

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise UpstreamFatalError("Estimator returned an empty response")
        return content

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.client.close()
