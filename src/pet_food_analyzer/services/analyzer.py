"""Ingredient analysis through an external reasoning service."""

import logging
from dataclasses import dataclass
from typing import Protocol

from pydantic import ValidationError

from pet_food_analyzer.domain.analyses import AnalysisReply, AnalysisResult, PetProfile
from pet_food_analyzer.domain.outcomes import Failure, FailureKind

_logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a veterinary nutritionist assistant specializing in pet food "
    "analysis. You give factual, evidence-based recommendations and put pet "
    "safety first. Reply with valid JSON only."
)

ANALYSIS_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "isRecommended": {"type": "boolean"},
        "justification": {"type": "string"},
        "concerns": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "type": {
                        "type": "string",
                        "enum": ["unacceptable", "questionable"],
                    },
                    "ingredient": {"type": "string"},
                    "reason": {"type": "string"},
                },
                "required": ["type", "ingredient", "reason"],
                "additionalProperties": False,
            },
        },
    },
    "required": ["isRecommended", "justification", "concerns"],
    "additionalProperties": False,
}

_GUIDELINES = """\
## GUIDELINES

### Cats
- Essential nutrients that must be present: taurine (critical), arachidonic \
acid, preformed vitamin A, arginine, high-quality animal protein.
- Toxic / unacceptable: onions, garlic, chives, grapes, raisins, chocolate, \
caffeine, xylitol, alcohol, macadamia nuts.
- Questionable: excessive carbohydrates or grains, low-quality protein \
fillers, artificial preservatives (BHA, BHT, ethoxyquin), unspecified \
by-products.

### Dogs
- Essential nutrients: complete protein sources, essential fatty acids, \
vitamins, minerals with a proper calcium/phosphorus ratio.
- Toxic / unacceptable: onions, garlic in significant amounts, grapes, \
raisins, chocolate, caffeine, xylitol, macadamia nuts, alcohol, avocado.
- Questionable: excessive grain fillers, generic "meat meal", artificial \
preservatives, excessive salt or sugar.

### Additional checks
- Allergens mentioned in the additional information.
- Suitability for the pet's life stage (young, adult, senior).
- Breed-specific dietary needs.
- Any health conditions mentioned.

## OUTPUT FORMAT
Reply with a single JSON object with exactly these fields:
{
  "isRecommended": true or false,
  "justification": "2-4 sentences explaining the recommendation for this pet",
  "concerns": [
    {
      "type": "unacceptable" or "questionable",
      "ingredient": "ingredient name",
      "reason": "why it is a concern"
    }
  ]
}

## DECISION RULES
- isRecommended is false if any unacceptable ingredient is present, a \
critical nutrient is missing, or an ingredient conflicts with the stated \
health conditions or allergies. Otherwise it is true.
- List every problematic ingredient in concerns; use an empty array when \
there are none.
- Use "unacceptable" for toxic ingredients and missing critical nutrients, \
"questionable" for low-quality or suboptimal ones.
- Report a missing nutrient as ingredient "<nutrient> (missing)" with type \
"unacceptable".

Reply with the JSON object only, no other text."""


class ReasoningServiceError(RuntimeError):
    """Raised by reasoning clients when the service cannot be reached."""


class ReasoningClient(Protocol):
    """Interface for the text completion service."""

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
        """Return the raw reply text."""


def build_prompt(ingredients_text: str, pet: PetProfile) -> str:
    """Build the analysis prompt for a pet and ingredient list."""
    additional_info = (pet.additional_info or "").strip() or "None provided"
    return (
        "Analyze the following pet food ingredients for this pet.\n\n"
        "## INPUT\n\n"
        f"Pet species: {pet.species.value}\n"
        f"Pet breed: {pet.breed}\n"
        f"Pet age: {pet.age} years\n"
        f"Additional information: {additional_info}\n\n"
        "Product ingredients:\n"
        f"{ingredients_text}\n\n"
        f"{_GUIDELINES}"
    )


@dataclass
class AnalyzerService:
    """Builds prompts, calls the reasoning service and validates replies."""

    client: ReasoningClient
    model: str
    reasoning_effort: str | None
    store: bool

    async def analyze(
        self, ingredients_text: str, pet: PetProfile
    ) -> AnalysisResult | Failure:
        """Analyze ingredients for a pet.

        Unreachable service and malformed replies both yield a
        REASONING_FAILED failure; a malformed reply is never read as
        "no concerns".
        """
        prompt = build_prompt(ingredients_text, pet)
        try:
            raw = await self.client.complete(
                model=self.model,
                reasoning_effort=self.reasoning_effort,
                store=self.store,
                instructions=SYSTEM_PROMPT,
                prompt=prompt,
                schema=ANALYSIS_SCHEMA,
            )
        except ReasoningServiceError:
            _logger.exception("Reasoning service call failed")
            return _reasoning_failure()

        try:
            reply = AnalysisReply.model_validate_json(raw)
        except ValidationError as exc:
            _logger.warning(
                "Reasoning service reply rejected: %s",
                exc.errors(include_input=False),
            )
            return _reasoning_failure()
        return AnalysisResult.from_reply(reply)


def _reasoning_failure() -> Failure:
    return Failure(
        kind=FailureKind.REASONING_FAILED,
        message="The analysis service is unavailable.",
    )
