"""
Display formatting used at the API boundary.

The engine keeps exact Decimal amounts; rounding to two places happens only
here, when a value is turned into text for a customer.
"""
from decimal import Decimal, ROUND_HALF_UP

from ..engine.models import ColorMode, DuplexMode, to_decimal

CENTS = Decimal("0.01")

STATUS_TEXT = {
    "pending": "Pending",
    "processing": "Processing",
    "ready": "Ready",
    "delivered": "Delivered",
    "cancelled": "Cancelled",
}


def round_money(amount) -> Decimal:
    return to_decimal(amount).quantize(CENTS, rounding=ROUND_HALF_UP)


def format_currency(amount, symbol: str = "₹") -> str:
    """Format an amount as currency with two decimals; None formats as 0."""
    return f"{symbol}{round_money(amount or 0)}"


def get_status_text(status) -> str:
    if not status:
        return "Unknown"
    return STATUS_TEXT.get(str(status).lower(), str(status))


def get_color_text(color) -> str:
    return "Black & White" if ColorMode.normalize(color) is ColorMode.MONOCHROME else "Full Color"


def get_sides_text(duplex) -> str:
    return "Single Side" if DuplexMode.normalize(duplex) is DuplexMode.SINGLE_SIDED else "Double Side"


def format_file_size(size_bytes: int) -> str:
    if size_bytes < 1024:
        return f"{size_bytes} B"
    if size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    return f"{size_bytes / (1024 * 1024):.1f} MB"
