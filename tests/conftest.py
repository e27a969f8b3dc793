"""Shared test fixtures."""

import json
from dataclasses import dataclass, field
from uuid import UUID

import httpx
import pytest

from pet_food_analyzer.config import Settings
from pet_food_analyzer.containers import AppContainer
from pet_food_analyzer.domain.analyses import AnalysisDetail, AnalysisRecord
from pet_food_analyzer.domain.products import Product
from pet_food_analyzer.services.analyses import (
    AnalysisPersister,
    AnalysisRepository,
    AnalysisService,
    DuplicateProductError,
)
from pet_food_analyzer.services.analyzer import (
    AnalyzerService,
    ReasoningClient,
    ReasoningServiceError,
)
from pet_food_analyzer.services.ingredients import (
    ManualIngredientSource,
    PageFetcher,
    ProductScraper,
)
from pet_food_analyzer.services.products import ProductRepository, ProductResolver

TEST_USER_ID = UUID("11111111-1111-4111-8111-111111111111")
OTHER_USER_ID = UUID("22222222-2222-4222-8222-222222222222")
PRODUCT_URL = "https://shop.example.com/royal-canin-adult"

PRODUCT_PAGE = """
<html>
  <head><title>Royal Canin Adult | Shop</title></head>
  <body>
    <h1 data-zta="ProductTitle__Title" class="z-h1 ProductTitle_title__FNHsJ">
      Royal Canin Adult Cat Food
    </h1>
    <div id="ingredients">
      <div class="anchors_anchorsHTML___2lrv">
        Chicken, rice,
        taurine &amp; vitamins
      </div>
    </div>
  </body>
</html>
"""

DEFAULT_REPLY = {
    "isRecommended": True,
    "justification": "Complete diet with named animal protein.",
    "concerns": [
        {
            "type": "questionable",
            "ingredient": "Rice",
            "reason": "Adds carbohydrates.",
        }
    ],
}


@dataclass
class InMemoryProductRepository(ProductRepository):
    """In-memory product table with the scraped-product uniqueness rule."""

    products: dict[UUID, Product] = field(default_factory=dict)
    lookups: list[tuple[str, str]] = field(default_factory=list)

    def find_scraped_product(self, name: str, url: str) -> Product | None:
        self.lookups.append((name, url))
        for product in self.products.values():
            if (
                not product.is_manual_entry
                and product.name == name
                and product.url == url
            ):
                return product
        return None

    def insert(self, product: Product) -> None:
        if not product.is_manual_entry and any(
            not existing.is_manual_entry
            and existing.name == product.name
            and existing.url == product.url
            for existing in self.products.values()
        ):
            raise DuplicateProductError("duplicate key value")
        self.products[product.id] = product


@dataclass
class InMemoryAnalysisRepository(AnalysisRepository):
    """In-memory analysis table writing products and analyses together."""

    product_repository: InMemoryProductRepository
    analyses: dict[UUID, AnalysisRecord] = field(default_factory=dict)
    fail_writes: bool = False

    def create_analysis(
        self, product: Product | None, analysis: AnalysisRecord
    ) -> None:
        if self.fail_writes:
            raise RuntimeError("database unavailable")
        if product is not None:
            self.product_repository.insert(product)
        self.analyses[analysis.id] = analysis

    def get_analysis(self, user_id: UUID, analysis_id: UUID) -> AnalysisDetail | None:
        analysis = self.analyses.get(analysis_id)
        if analysis is None or analysis.user_id != user_id:
            return None
        product = self.product_repository.products[analysis.product_id]
        return AnalysisDetail(
            analysis_id=analysis.id,
            product_id=product.id,
            product_name=product.name,
            product_url=product.url,
            is_manual_entry=product.is_manual_entry,
            recommendation=analysis.recommendation,
            justification=analysis.justification,
            concerns=analysis.concerns,
            ingredients_text=analysis.ingredients_text,
            pet=analysis.pet,
            created_at=analysis.created_at,
        )


@dataclass
class FakePageFetcher(PageFetcher):
    """Serves canned pages; unknown URLs behave like unreachable hosts."""

    pages: dict[str, str] = field(default_factory=lambda: {PRODUCT_URL: PRODUCT_PAGE})
    requested: list[str] = field(default_factory=list)

    async def fetch(self, url: str) -> str:
        self.requested.append(url)
        if url not in self.pages:
            raise httpx.ConnectError(f"Name or service not known: {url}")
        return self.pages[url]


@dataclass
class FakeReasoningClient(ReasoningClient):
    """Fake reasoning client returning a fixed reply."""

    reply: str = field(default_factory=lambda: json.dumps(DEFAULT_REPLY))
    unavailable: bool = False
    prompts: list[str] = field(default_factory=list)

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
        self.prompts.append(prompt)
        if self.unavailable:
            raise ReasoningServiceError("connection timed out")
        return self.reply


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key=(
            "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9."
            "eyJyb2xlIjoic2VydmljZV9yb2xlIn0."
            "c2lnbmF0dXJl"
        ),
        openai_api_key="openai-key",
    )


@pytest.fixture
def product_repository() -> InMemoryProductRepository:
    return InMemoryProductRepository()


@pytest.fixture
def analysis_repository(
    product_repository: InMemoryProductRepository,
) -> InMemoryAnalysisRepository:
    return InMemoryAnalysisRepository(product_repository=product_repository)


@pytest.fixture
def page_fetcher() -> FakePageFetcher:
    return FakePageFetcher()


@pytest.fixture
def reasoning_client() -> FakeReasoningClient:
    return FakeReasoningClient()


@pytest.fixture
def analysis_service(
    settings: Settings,
    product_repository: InMemoryProductRepository,
    analysis_repository: InMemoryAnalysisRepository,
    page_fetcher: FakePageFetcher,
    reasoning_client: FakeReasoningClient,
) -> AnalysisService:
    resolver = ProductResolver(product_repository)
    return AnalysisService(
        manual_source=ManualIngredientSource(),
        scraper=ProductScraper(page_fetcher),
        resolver=resolver,
        analyzer=AnalyzerService(
            client=reasoning_client,
            model=settings.openai_model,
            reasoning_effort=settings.openai_reasoning_effort,
            store=settings.openai_store,
        ),
        persister=AnalysisPersister(repository=analysis_repository, resolver=resolver),
        repository=analysis_repository,
    )


@pytest.fixture
def container(settings: Settings, analysis_service: AnalysisService) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        analysis_service=analysis_service,
        close_resources=close_resources,
    )
