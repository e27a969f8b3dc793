"""Domain models for ingredient analyses."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class Species(str, Enum):
    """Pet species supported by the analyzer."""

    CAT = "Cat"
    DOG = "Dog"

    @classmethod
    def parse(cls, raw: str | None) -> "Species | None":
        """Match a species case-insensitively, returning None if unknown."""
        if raw is None:
            return None
        cleaned = raw.strip().lower()
        for species in cls:
            if species.value.lower() == cleaned:
                return species
        return None


class Recommendation(str, Enum):
    """Binary recommendation for a product."""

    RECOMMENDED = "Recommended"
    NOT_RECOMMENDED = "NotRecommended"


class ConcernType(str, Enum):
    """Severity class of an ingredient concern."""

    UNACCEPTABLE = "unacceptable"
    QUESTIONABLE = "questionable"


@dataclass(frozen=True)
class IngredientConcern:
    """Single ingredient flagged by the reasoning service."""

    type: ConcernType
    ingredient: str
    reason: str

    def to_dict(self) -> dict[str, str]:
        return {
            "type": self.type.value,
            "ingredient": self.ingredient,
            "reason": self.reason,
        }


@dataclass(frozen=True)
class PetProfile:
    """Snapshot of the pet the analysis was made for."""

    species: Species
    breed: str
    age: int
    additional_info: str | None = None


class ConcernReply(BaseModel):
    """Concern object as returned by the reasoning service."""

    model_config = ConfigDict(strict=True, extra="forbid")

    type: Literal["unacceptable", "questionable"]
    ingredient: str
    reason: str


class AnalysisReply(BaseModel):
    """Strict schema for the reasoning service reply."""

    model_config = ConfigDict(strict=True, extra="forbid")

    is_recommended: bool = Field(alias="isRecommended")
    justification: str
    concerns: list[ConcernReply]


@dataclass(frozen=True)
class AnalysisResult:
    """Validated outcome of the reasoning service."""

    is_recommended: bool
    justification: str
    concerns: list[IngredientConcern]

    @property
    def recommendation(self) -> Recommendation:
        if self.is_recommended:
            return Recommendation.RECOMMENDED
        return Recommendation.NOT_RECOMMENDED

    @classmethod
    def from_reply(cls, reply: AnalysisReply) -> "AnalysisResult":
        return cls(
            is_recommended=reply.is_recommended,
            justification=reply.justification,
            concerns=[
                IngredientConcern(
                    type=ConcernType(concern.type),
                    ingredient=concern.ingredient,
                    reason=concern.reason,
                )
                for concern in reply.concerns
            ],
        )


@dataclass(frozen=True)
class AnalysisRecord:
    """Persisted analysis row."""

    id: UUID
    user_id: UUID
    product_id: UUID
    recommendation: Recommendation
    justification: str
    ingredients_text: str
    pet: PetProfile
    concerns: list[IngredientConcern]
    created_at: datetime


@dataclass(frozen=True)
class AnalysisCreated:
    """Response returned after a successful analysis run."""

    analysis_id: UUID
    product_id: UUID
    recommendation: Recommendation
    justification: str
    concerns: list[IngredientConcern]
    created_at: datetime


@dataclass(frozen=True)
class AnalysisDetail:
    """Full analysis with its product, as shown to the owning user."""

    analysis_id: UUID
    product_id: UUID
    product_name: str
    product_url: str | None
    is_manual_entry: bool
    recommendation: Recommendation
    justification: str
    concerns: list[IngredientConcern]
    ingredients_text: str
    pet: PetProfile
    created_at: datetime
