"""Supabase-backed product repository."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from pet_food_analyzer.domain.products import Product
from pet_food_analyzer.services.products import ProductRepository


@dataclass
class SupabaseProductRepository(ProductRepository):
    """Supabase implementation for product lookups."""

    client: Client

    def find_scraped_product(self, name: str, url: str) -> Product | None:
        """Return the non-manual product with exactly this name and URL."""
        response = (
            self.client.table("products")
            .select("*")
            .eq("name", name)
            .eq("url", url)
            .eq("is_manual_entry", False)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return parse_product(response.data[0])


def parse_product(row: dict[str, object]) -> Product:
    """Parse a products row into a domain model."""
    url = row.get("url")
    return Product(
        id=UUID(str(row["id"])),
        name=str(row.get("name", "")),
        url=url if isinstance(url, str) else None,
        is_manual_entry=bool(row.get("is_manual_entry", False)),
        created_at=datetime.fromisoformat(str(row["created_at"])),
    )
