"""Analysis creation pipeline and retrieval."""

import logging
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Protocol
from urllib.parse import urlparse
from uuid import UUID, uuid4

import httpx

from pet_food_analyzer.domain.analyses import (
    AnalysisCreated,
    AnalysisDetail,
    AnalysisRecord,
    AnalysisResult,
    PetProfile,
    Species,
)
from pet_food_analyzer.domain.outcomes import Failure, FailureKind
from pet_food_analyzer.domain.products import Product, ProductResolution
from pet_food_analyzer.domain.requests import CreateAnalysisRequest
from pet_food_analyzer.services.analyzer import AnalyzerService
from pet_food_analyzer.services.ingredients import (
    AcquiredProduct,
    ManualIngredientSource,
    ProductScraper,
)
from pet_food_analyzer.services.products import ProductResolver

_logger = logging.getLogger(__name__)


class DuplicateProductError(RuntimeError):
    """Raised when a scraped product with the same name and URL already exists."""


class AnalysisRepository(Protocol):
    """Persistence interface for analyses."""

    def create_analysis(
        self, product: Product | None, analysis: AnalysisRecord
    ) -> None:
        """Atomically insert the product (when given) and the analysis."""

    def get_analysis(self, user_id: UUID, analysis_id: UUID) -> AnalysisDetail | None:
        """Return a user's analysis with its product, if present."""


@dataclass(frozen=True)
class ValidatedSubmission:
    """Create-analysis request that passed validation."""

    manual: bool
    product_name: str | None
    product_url: str | None
    ingredients_text: str | None
    pet: PetProfile


def validate_request(request: CreateAnalysisRequest) -> ValidatedSubmission | Failure:
    """Check mode and pet fields, collecting every offending field."""
    errors: dict[str, list[str]] = {}
    if request.is_manual:
        if _is_blank(request.product_name):
            errors["productName"] = [
                "Product name is required when entering manually."
            ]
        if _is_blank(request.ingredients_text):
            errors["ingredientsText"] = [
                "Ingredients are required when entering manually."
            ]
        if not _is_blank(request.product_url):
            errors["productUrl"] = ["Do not provide a URL in manual mode."]
    elif _is_blank(request.product_url):
        errors["productUrl"] = ["Product URL is required when not entering manually."]
    elif not _is_http_url(request.product_url or ""):
        errors["productUrl"] = [
            "Please enter a valid URL starting with http:// or https://."
        ]

    species = Species.parse(request.species)
    if species is None:
        allowed = ", ".join(member.value for member in Species)
        errors["species"] = [f"Species must be one of: {allowed}."]
    if _is_blank(request.breed):
        errors["breed"] = ["Breed is required."]
    if request.age is None:
        errors["age"] = ["Age is required."]
    elif request.age < 0:
        errors["age"] = ["Age must be a non-negative whole number."]

    if errors or species is None or request.age is None:
        return Failure(
            kind=FailureKind.INVALID_REQUEST,
            message="The request is invalid.",
            errors=errors,
        )
    return ValidatedSubmission(
        manual=request.is_manual,
        product_name=request.product_name if request.is_manual else None,
        product_url=None if request.is_manual else request.product_url,
        ingredients_text=request.ingredients_text if request.is_manual else None,
        pet=PetProfile(
            species=species,
            breed=request.breed or "",
            age=request.age,
            additional_info=request.additional_info,
        ),
    )


@dataclass
class AnalysisPersister:
    """Writes a new analysis, and its product when new, in one transaction."""

    repository: AnalysisRepository
    resolver: ProductResolver

    def persist(
        self,
        *,
        user_id: UUID,
        resolution: ProductResolution,
        result: AnalysisResult,
        pet: PetProfile,
        ingredients_text: str,
    ) -> AnalysisCreated | Failure:
        """Persist the analysis and return the creation response."""
        record = AnalysisRecord(
            id=uuid4(),
            user_id=user_id,
            product_id=resolution.product.id,
            recommendation=result.recommendation,
            justification=result.justification,
            ingredients_text=ingredients_text,
            pet=pet,
            concerns=list(result.concerns),
            created_at=datetime.now(tz=UTC),
        )
        try:
            record = self._write(resolution, record)
        except Exception:
            _logger.exception(
                "Failed to persist analysis",
                extra={"analysis_id": str(record.id), "user_id": str(user_id)},
            )
            return Failure(
                kind=FailureKind.PERSISTENCE_FAILED,
                message="The analysis could not be saved.",
            )
        return AnalysisCreated(
            analysis_id=record.id,
            product_id=record.product_id,
            recommendation=record.recommendation,
            justification=record.justification,
            concerns=list(record.concerns),
            created_at=record.created_at,
        )

    def _write(
        self, resolution: ProductResolution, record: AnalysisRecord
    ) -> AnalysisRecord:
        if not resolution.is_new:
            self.repository.create_analysis(None, record)
            return record
        try:
            self.repository.create_analysis(resolution.product, record)
        except DuplicateProductError:
            existing = self.resolver.reuse_existing(resolution.product)
            if existing is None:
                raise
            _logger.info(
                "Product created concurrently, reusing it",
                extra={"product_id": str(existing.id)},
            )
            record = replace(record, product_id=existing.id)
            self.repository.create_analysis(None, record)
        return record


@dataclass
class AnalysisService:
    """Runs the analysis pipeline: validate, acquire, resolve, analyze, persist."""

    manual_source: ManualIngredientSource
    scraper: ProductScraper
    resolver: ProductResolver
    analyzer: AnalyzerService
    persister: AnalysisPersister
    repository: AnalysisRepository

    async def create_analysis(
        self, user_id: UUID, request: CreateAnalysisRequest
    ) -> AnalysisCreated | Failure:
        """Create an analysis for the user, or return why it could not be made."""
        submission = validate_request(request)
        if isinstance(submission, Failure):
            return submission

        acquired = await self._acquire(submission)
        if isinstance(acquired, Failure):
            return acquired

        resolution = self.resolver.resolve(
            manual=submission.manual,
            name=acquired.name,
            url=submission.product_url,
        )
        if isinstance(resolution, Failure):
            return resolution

        result = await self.analyzer.analyze(acquired.ingredients_text, submission.pet)
        if isinstance(result, Failure):
            return result

        created = self.persister.persist(
            user_id=user_id,
            resolution=resolution,
            result=result,
            pet=submission.pet,
            ingredients_text=acquired.ingredients_text,
        )
        if isinstance(created, AnalysisCreated):
            _logger.info(
                "Analysis created",
                extra={
                    "analysis_id": str(created.analysis_id),
                    "product_id": str(created.product_id),
                },
            )
        return created

    def get_analysis(self, user_id: UUID, analysis_id: UUID) -> AnalysisDetail | None:
        """Return one of the user's analyses."""
        return self.repository.get_analysis(user_id, analysis_id)

    async def _acquire(
        self, submission: ValidatedSubmission
    ) -> AcquiredProduct | Failure:
        if submission.manual:
            return self.manual_source.acquire(
                submission.product_name or "", submission.ingredients_text or ""
            )
        url = submission.product_url or ""
        scraped = await self.scraper.scrape(url)
        if isinstance(scraped, Failure):
            return scraped
        if not scraped.has_ingredients:
            _logger.warning(
                "No ingredients found on product page",
                extra={"url": url, "product_name": scraped.name},
            )
            return Failure(
                kind=FailureKind.INGREDIENTS_NOT_FOUND,
                message="Ingredients could not be found on the product page.",
            )
        return scraped


def _is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


def _is_http_url(value: str) -> bool:
    try:
        parsed = urlparse(value)
        url = httpx.URL(value)
    except (ValueError, httpx.InvalidURL):
        return False
    return (
        parsed.scheme in {"http", "https"} and bool(parsed.netloc) and bool(url.host)
    )
