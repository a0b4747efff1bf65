"""
Quotes API - Price print settings for one or more documents.
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field, field_validator

from ..engine.models import PAGES_PER_SHEET_OPTIONS, ColorMode, DuplexMode, Tier
from ..services.quote_service import PrintItem, QuotedItem
from ..utils.formatters import format_currency, get_color_text, get_sides_text, round_money
from .auth import optional_user
from .state import AppState, get_state

router = APIRouter(prefix="/api/quotes", tags=["quotes"])


class PrintItemModel(BaseModel):
    """A document with its print settings."""
    name: str = "document"
    pages: int = Field(..., ge=1)
    page_range: Optional[str] = "all"
    color: str = ColorMode.MONOCHROME.value
    duplex: str = DuplexMode.SINGLE_SIDED.value
    pages_per_sheet: int = 1
    copies: int = Field(1, ge=1)
    binding_id: Optional[str] = None
    file_url: Optional[str] = None

    @field_validator('color')
    @classmethod
    def _color(cls, v):
        return ColorMode.normalize(v).value

    @field_validator('duplex')
    @classmethod
    def _duplex(cls, v):
        return DuplexMode.normalize(v).value

    @field_validator('pages_per_sheet')
    @classmethod
    def _pages_per_sheet(cls, v):
        if v not in PAGES_PER_SHEET_OPTIONS:
            raise ValueError(f"pages_per_sheet must be one of {PAGES_PER_SHEET_OPTIONS}")
        return v

    def to_item(self) -> PrintItem:
        return PrintItem(**self.model_dump())


class QuoteRequest(BaseModel):
    items: list[PrintItemModel] = Field(..., min_length=1)
    # Only honoured for anonymous callers; signed-in users are priced at their own tier
    tier: Optional[str] = None


def check_page_limit(items: list[PrintItemModel], max_pages: int):
    """Reject documents declaring more pages than the shop accepts."""
    too_long = [i.name for i in items if i.pages > max_pages]
    if too_long:
        raise HTTPException(status_code=422,
                            detail=f"Documents may have at most {max_pages} pages: {', '.join(too_long)}")


def quoted_item_payload(quoted: QuotedItem, symbol: str) -> dict:
    quote = quoted.quote
    return {
        'name': quoted.item.name,
        'pages': quoted.item.pages,
        'settings': quoted.item.settings(),
        'quote': quote.to_dict(),
        'trace': quote.get_trace_text(),
        'display': {
            'color': get_color_text(quoted.item.color),
            'sides': get_sides_text(quoted.item.duplex),
            'price_per_sheet': format_currency(quote.price_per_sheet, symbol),
            'print_subtotal': format_currency(quote.print_subtotal, symbol),
            'binding_subtotal': format_currency(quote.binding_subtotal, symbol),
            'per_copy_subtotal': format_currency(quote.per_copy_subtotal, symbol),
            'grand_total': format_currency(quote.grand_total, symbol),
        },
    }


@router.post("")
async def create_quote(req: QuoteRequest, state: AppState = Depends(get_state),
                       user: Optional[dict] = Depends(optional_user)):
    """Quote every document in the request against the live catalog."""
    check_page_limit(req.items, state.settings.max_pages)
    tier = state.users.tier_for(user) if user else Tier.normalize(req.tier)
    quoted, total = state.quotes.quote_items([i.to_item() for i in req.items], tier)
    symbol = state.settings.currency_symbol

    return {
        'tier': tier.value,
        'items': [quoted_item_payload(q, symbol) for q in quoted],
        'total': round_money(total),
        'total_display': format_currency(total, symbol),
    }
