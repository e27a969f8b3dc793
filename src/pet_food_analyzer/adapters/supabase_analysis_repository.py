"""Supabase-backed analysis repository."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from postgrest.exceptions import APIError
from supabase import Client

from pet_food_analyzer.adapters.supabase_product_repository import parse_product
from pet_food_analyzer.domain.analyses import (
    AnalysisDetail,
    AnalysisRecord,
    ConcernType,
    IngredientConcern,
    PetProfile,
    Recommendation,
    Species,
)
from pet_food_analyzer.domain.products import Product
from pet_food_analyzer.services.analyses import (
    AnalysisRepository,
    DuplicateProductError,
)

_UNIQUE_VIOLATION = "23505"


@dataclass
class SupabaseAnalysisRepository(AnalysisRepository):
    """Supabase implementation for analysis persistence.

    Writes go through the ``create_analysis`` database function so the
    product and analysis inserts share a single transaction.
    """

    client: Client

    def create_analysis(
        self, product: Product | None, analysis: AnalysisRecord
    ) -> None:
        """Insert the analysis, and the product when given, atomically."""
        try:
            self.client.rpc(
                "create_analysis",
                {
                    "product": _product_payload(product) if product else None,
                    "analysis": _analysis_payload(analysis),
                },
            ).execute()
        except APIError as exc:
            if exc.code == _UNIQUE_VIOLATION:
                raise DuplicateProductError(str(exc.message)) from exc
            raise

    def get_analysis(self, user_id: UUID, analysis_id: UUID) -> AnalysisDetail | None:
        """Return a user's analysis joined with its product."""
        response = (
            self.client.table("analyses")
            .select("*, products(*)")
            .eq("id", str(analysis_id))
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_detail(response.data[0])


def _product_payload(product: Product) -> dict[str, object]:
    return {
        "id": str(product.id),
        "name": product.name,
        "url": product.url,
        "is_manual_entry": product.is_manual_entry,
        "created_at": product.created_at.isoformat(),
    }


def _analysis_payload(analysis: AnalysisRecord) -> dict[str, object]:
    return {
        "id": str(analysis.id),
        "user_id": str(analysis.user_id),
        "product_id": str(analysis.product_id),
        "recommendation": analysis.recommendation.value,
        "justification": analysis.justification,
        "ingredients_text": analysis.ingredients_text,
        "species": analysis.pet.species.value,
        "breed": analysis.pet.breed,
        "age": analysis.pet.age,
        "additional_info": analysis.pet.additional_info,
        "concerns": [concern.to_dict() for concern in analysis.concerns],
        "created_at": analysis.created_at.isoformat(),
    }


def _parse_detail(row: dict[str, object]) -> AnalysisDetail:
    """Parse an analyses row with embedded product into a detail model."""
    product_row = row.get("products")
    if not isinstance(product_row, dict):
        raise RuntimeError("Analysis row is missing its product")
    product = parse_product(product_row)
    concerns_raw = row.get("concerns") or []
    return AnalysisDetail(
        analysis_id=UUID(str(row["id"])),
        product_id=product.id,
        product_name=product.name,
        product_url=product.url,
        is_manual_entry=product.is_manual_entry,
        recommendation=Recommendation(row["recommendation"]),
        justification=str(row.get("justification", "")),
        concerns=[
            IngredientConcern(
                type=ConcernType(item["type"]),
                ingredient=str(item["ingredient"]),
                reason=str(item["reason"]),
            )
            for item in concerns_raw
            if isinstance(item, dict)
        ],
        ingredients_text=str(row.get("ingredients_text", "")),
        pet=PetProfile(
            species=Species(row["species"]),
            breed=str(row.get("breed", "")),
            age=int(row.get("age", 0)),
            additional_info=row.get("additional_info"),
        ),
        created_at=datetime.fromisoformat(str(row["created_at"])),
    )
