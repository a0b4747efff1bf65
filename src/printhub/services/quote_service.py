"""
Quote Service - Builds job configurations from customer print settings and
prices them against the live catalogs.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional

from ..engine.models import PriceQuote, PrintJobConfig, Tier
from ..engine.pricing_engine import PricingEngine
from .catalog_service import CatalogService

logger = logging.getLogger(__name__)


@dataclass
class PrintItem:
    """One document as configured by the customer."""
    name: str
    pages: int
    page_range: Optional[str] = "all"
    color: str = "monochrome"
    duplex: str = "single-sided"
    pages_per_sheet: int = 1
    copies: int = 1
    binding_id: Optional[str] = None
    file_url: Optional[str] = None

    def settings(self) -> dict:
        return {
            'page_range': self.page_range or 'all',
            'color': self.color,
            'duplex': self.duplex,
            'pages_per_sheet': self.pages_per_sheet,
            'copies': self.copies,
            'binding_id': self.binding_id or 'none',
        }


@dataclass
class QuotedItem:
    item: PrintItem
    quote: PriceQuote


class QuoteService:
    """Prices print items for a customer tier."""

    def __init__(self, engine: PricingEngine, catalog: CatalogService):
        self.engine = engine
        self.catalog = catalog

    def build_config(self, item: PrintItem, tier) -> PrintJobConfig:
        binding = self.catalog.get_binding(item.binding_id)
        if item.binding_id and item.binding_id != 'none' and binding is None:
            logger.warning("Unknown binding id %s for %s, pricing without binding", item.binding_id, item.name)

        return PrintJobConfig(
            total_pages=item.pages,
            page_range=item.page_range,
            color=item.color,
            duplex=item.duplex,
            pages_per_sheet=item.pages_per_sheet,
            copies=item.copies,
            binding=binding,
            tier=Tier.normalize(tier),
        )

    def quote_items(self, items: Iterable[PrintItem], tier) -> tuple[list[QuotedItem], Decimal]:
        """Quote every item against one catalog snapshot. Returns (quoted, total)."""
        items = list(items)
        configs = [self.build_config(item, tier) for item in items]
        quotes, total = self.engine.quote_many(configs)

        quoted = [QuotedItem(item=item, quote=quote) for item, quote in zip(items, quotes)]
        for q in quoted:
            if q.quote.grand_total == 0:
                logger.warning("Zero-priced quote for %s: %s", q.item.name, "; ".join(q.quote.warnings) or "free")
        return quoted, total
