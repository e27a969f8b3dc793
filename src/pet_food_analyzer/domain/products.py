"""Domain models for analyzed products."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class Product:
    """Canonical product an analysis is attached to.

    Manual products never carry a URL; scraped products always do.
    """

    id: UUID
    name: str
    url: str | None
    is_manual_entry: bool
    created_at: datetime


@dataclass(frozen=True)
class ProductResolution:
    """Resolved product plus whether it still has to be written."""

    product: Product
    is_new: bool
