"""OpenAI Responses API client for ingredient analysis."""

from dataclasses import dataclass

from openai import AsyncOpenAI, OpenAIError

from pet_food_analyzer.services.analyzer import ReasoningClient, ReasoningServiceError


@dataclass
class OpenAIReasoningClient(ReasoningClient):
    """Reasoning client backed by OpenAI Responses API."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str, timeout_seconds: float) -> "OpenAIReasoningClient":
        """Create an OpenAI client that fails fast instead of retrying."""
        return cls(
            client=AsyncOpenAI(
                api_key=api_key,
                timeout=timeout_seconds,
                max_retries=0,
            )
        )

    async def complete(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        instructions: str,
        prompt: str,
        schema: dict[str, object],
    ) -> str:
        """Call OpenAI Responses API with structured outputs."""
        request_payload: dict[str, object] = {
            "model": model,
            "instructions": instructions,
            "input": prompt,
            "text": {
                "format": {
                    "type": "json_schema",
                    "name": "ingredient_analysis",
                    "strict": True,
                    "schema": schema,
                }
            },
            "store": store,
        }
        if reasoning_effort:
            request_payload["reasoning"] = {"effort": reasoning_effort}

        try:
            response = await self.client.responses.create(**request_payload)
        except OpenAIError as exc:
            raise ReasoningServiceError(f"OpenAI request failed: {exc}") from exc
        output_text = response.output_text
        if not output_text:
            raise ReasoningServiceError("OpenAI returned an empty response")
        return output_text

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.client.close()
