"""Ingredient acquisition from product pages or manual input."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

import httpx
from bs4 import BeautifulSoup
from bs4.element import Tag

from pet_food_analyzer.domain.outcomes import Failure, FailureKind

UNKNOWN_PRODUCT = "Unknown Product"

_logger = logging.getLogger(__name__)


class PageFetcher(Protocol):
    """Interface for downloading product page markup."""

    async def fetch(self, url: str) -> str:
        """Return the page body, raising httpx.HTTPError on failure."""


@dataclass(frozen=True)
class AcquiredProduct:
    """Product name and ingredient text ready for analysis."""

    name: str
    ingredients_text: str

    @property
    def has_ingredients(self) -> bool:
        return bool(self.ingredients_text)


@dataclass
class ManualIngredientSource:
    """Passes user-entered product data through unchanged."""

    def acquire(self, name: str, ingredients_text: str) -> AcquiredProduct:
        return AcquiredProduct(name=name, ingredients_text=ingredients_text)


@dataclass
class ProductScraper:
    """Scrapes a product page for its name and ingredient list."""

    fetcher: PageFetcher

    async def scrape(self, url: str) -> AcquiredProduct | Failure:
        """Fetch and parse a product page.

        Network problems become a FETCH_FAILED failure. Unrecognized markup
        never fails: the name falls back to UNKNOWN_PRODUCT and the
        ingredients to an empty string.
        """
        try:
            markup = await self.fetcher.fetch(url)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            _logger.warning(
                "Product page fetch failed: %s",
                exc,
                extra={"url": url},
            )
            return Failure(
                kind=FailureKind.FETCH_FAILED,
                message="Could not reach the product page.",
            )
        return parse_product_page(markup)


def parse_product_page(markup: str) -> AcquiredProduct:
    """Extract product name and ingredients from page markup."""
    soup = BeautifulSoup(markup, "html.parser")
    return AcquiredProduct(
        name=extract_product_name(soup),
        ingredients_text=extract_ingredients(soup),
    )


def normalize_text(raw: str) -> str:
    """Collapse whitespace runs into single spaces and trim."""
    return " ".join(raw.split())


Extractor = Callable[[BeautifulSoup], str | None]


def _node_text(node: Tag | None) -> str | None:
    if node is None:
        return None
    return normalize_text(node.get_text(" "))


def _meta_content(node: Tag | None) -> str | None:
    if node is None:
        return None
    content = node.get("content")
    if not isinstance(content, str):
        return None
    return normalize_text(content)


def _site_title(soup: BeautifulSoup) -> str | None:
    return _node_text(soup.select_one('h1[data-zta="ProductTitle__Title"]'))


def _site_title_class(soup: BeautifulSoup) -> str | None:
    return _node_text(soup.select_one('h1[class*="ProductTitle_title__"]'))


def _og_title(soup: BeautifulSoup) -> str | None:
    return _meta_content(soup.select_one('meta[property="og:title"]'))


def _first_heading(soup: BeautifulSoup) -> str | None:
    return _node_text(soup.find("h1"))


def _document_title(soup: BeautifulSoup) -> str | None:
    return _node_text(soup.title)


def _site_ingredients_section(soup: BeautifulSoup) -> str | None:
    return _node_text(
        soup.select_one('#ingredients [class*="anchors_anchorsHTML___2lrv"]')
    )


def _site_ingredients_anywhere(soup: BeautifulSoup) -> str | None:
    return _node_text(soup.select_one('[class*="anchors_anchorsHTML___2lrv"]'))


def _ingredients_container(soup: BeautifulSoup) -> str | None:
    return _node_text(soup.select_one("#ingredients"))


# Ordered by priority; the first non-empty value wins.
NAME_EXTRACTORS: tuple[Extractor, ...] = (
    _site_title,
    _site_title_class,
    _og_title,
    _first_heading,
    _document_title,
)

INGREDIENT_EXTRACTORS: tuple[Extractor, ...] = (
    _site_ingredients_section,
    _site_ingredients_anywhere,
    _ingredients_container,
)


def _first_match(soup: BeautifulSoup, extractors: tuple[Extractor, ...]) -> str | None:
    for extractor in extractors:
        value = extractor(soup)
        if value:
            return value
    return None


def extract_product_name(soup: BeautifulSoup) -> str:
    """Return the product name, or UNKNOWN_PRODUCT when nothing matches."""
    return _first_match(soup, NAME_EXTRACTORS) or UNKNOWN_PRODUCT


def extract_ingredients(soup: BeautifulSoup) -> str:
    """Return the ingredient text, or an empty string when nothing matches."""
    return _first_match(soup, INGREDIENT_EXTRACTORS) or ""
