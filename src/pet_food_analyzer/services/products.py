"""Resolution of submissions to canonical product rows."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol
from uuid import uuid4

from pet_food_analyzer.domain.outcomes import Failure, FailureKind
from pet_food_analyzer.domain.products import Product, ProductResolution

_logger = logging.getLogger(__name__)


class ProductRepository(Protocol):
    """Read access to stored products."""

    def find_scraped_product(self, name: str, url: str) -> Product | None:
        """Return the non-manual product with exactly this name and URL."""


@dataclass
class ProductResolver:
    """Finds or prepares the product an analysis attaches to.

    Manual entries always get a fresh product. URL entries reuse the stored
    non-manual product with the same name and URL, compared verbatim.
    New products are returned unsaved; they are written together with the
    analysis.
    """

    repository: ProductRepository

    def resolve(
        self, *, manual: bool, name: str, url: str | None
    ) -> ProductResolution | Failure:
        """Resolve a submission to a product."""
        if manual or url is None:
            return ProductResolution(
                product=_new_product(name=name, url=None),
                is_new=True,
            )
        try:
            existing = self.repository.find_scraped_product(name, url)
        except Exception:
            _logger.exception("Product lookup failed", extra={"url": url})
            return Failure(
                kind=FailureKind.PERSISTENCE_FAILED,
                message="The product could not be looked up.",
            )
        if existing:
            return ProductResolution(product=existing, is_new=False)
        return ProductResolution(product=_new_product(name=name, url=url), is_new=True)

    def reuse_existing(self, product: Product) -> Product | None:
        """Re-read the stored product after a concurrent insert won the race."""
        if product.is_manual_entry or product.url is None:
            return None
        return self.repository.find_scraped_product(product.name, product.url)


def _new_product(name: str, url: str | None) -> Product:
    return Product(
        id=uuid4(),
        name=name,
        url=url,
        is_manual_entry=url is None,
        created_at=datetime.now(tz=UTC),
    )
