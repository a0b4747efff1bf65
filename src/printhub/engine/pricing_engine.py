"""
Pricing Engine - Turns a print job configuration into an itemized quote.

Derivation order:
1. Resolve the page range to the active pages
2. Sheets needed = ceil(active pages / pages per sheet)
3. Match the narrowest print rule for color/duplex/active pages
4. Print subtotal = sheets × tier price of the rule
5. Binding subtotal from the binding's narrowest band
6. Per-copy subtotal = print + binding; grand total = per-copy × copies

Nothing here raises for well-typed input. A missing rule, an inactive
binding or an unreadable page range contributes zero and is reported in the
quote's warnings instead.
"""
import logging
import math
from decimal import Decimal
from typing import Callable, Iterable, Optional, Sequence

from .models import PriceQuote, PricingRule, PrintJobConfig, TraceStep
from .page_range import resolve_page_range_with_trace
from .rule_matcher import RuleMatcher, match_binding_band, tier_price

logger = logging.getLogger(__name__)


def sheets_needed(active_page_count: int, pages_per_sheet) -> int:
    """Physical sides needed; an unusable pages-per-sheet value counts as 1."""
    try:
        per_sheet = int(pages_per_sheet)
    except (TypeError, ValueError):
        per_sheet = 1
    if per_sheet < 1:
        per_sheet = 1
    if active_page_count <= 0:
        return 0
    return math.ceil(active_page_count / per_sheet)


def _copies(value) -> int:
    try:
        copies = int(value)
    except (TypeError, ValueError):
        return 1
    return copies if copies > 0 else 1


def calculate_price(config: PrintJobConfig, rules: Iterable[PricingRule]) -> PriceQuote:
    """
    Calculate a quote for one document.

    Args:
        config: The job configuration (pages, range, modes, binding, tier)
        rules: Snapshot of the pricing rule catalog

    Returns:
        PriceQuote with the itemized breakdown, warnings and trace
    """
    trace: list[TraceStep] = []
    warnings: list[str] = []
    tier = config.tier

    # 1. Active pages
    pages, skipped = resolve_page_range_with_trace(config.page_range, config.total_pages)
    active_count = len(pages)
    trace.append(TraceStep("Page Range", f"'{config.page_range or 'all'}' of {config.total_pages} pages", str(active_count)))
    if skipped:
        warnings.append(f"Ignored page range entries: {', '.join(skipped)}")
    if active_count == 0:
        warnings.append("No pages selected")

    # 2. Sheets
    sheets = sheets_needed(active_count, config.pages_per_sheet)
    trace.append(TraceStep("Sheets", f"{active_count} pages at {config.pages_per_sheet} per sheet", str(sheets)))

    # 3. Print rule
    rule = RuleMatcher(rules).match_print_rule(config.color, config.duplex, active_count)
    price_per_sheet = tier_price(rule, tier)
    if rule is not None:
        trace.append(TraceStep(
            "Print Rule",
            f"Pages {rule.from_page}-{rule.to_page} at {tier.value} price",
            f"{price_per_sheet}",
        ))
    else:
        trace.append(TraceStep("Print Rule", "No matching rule, print priced at 0"))
        if active_count > 0:
            warnings.append(
                f"No pricing rule covers {config.color.value} {config.duplex.value} "
                f"printing for {active_count} pages"
            )

    # 4. Print subtotal
    print_subtotal = sheets * price_per_sheet

    # 5. Binding
    binding = config.binding
    band = match_binding_band(binding, active_count)
    binding_subtotal = tier_price(band, tier)
    if binding is not None:
        if not binding.is_active:
            warnings.append(f"Binding '{binding.name}' is not available")
        elif band is None:
            warnings.append(f"Binding '{binding.name}' has no price for {active_count} pages")
        trace.append(TraceStep("Binding", binding.name, f"{binding_subtotal}"))

    # 6-7. Totals
    copies = _copies(config.copies)
    per_copy = print_subtotal + binding_subtotal
    grand_total = per_copy * copies
    trace.append(TraceStep("Extension", f"{copies} copies × {per_copy}", f"{grand_total}"))

    return PriceQuote(
        active_page_count=active_count,
        sheets_needed=sheets,
        price_per_sheet=price_per_sheet,
        print_subtotal=print_subtotal,
        binding_subtotal=binding_subtotal,
        per_copy_subtotal=per_copy,
        grand_total=grand_total,
        copies=copies,
        tier=tier,
        print_rule_matched=rule is not None,
        print_rule_id=rule.rule_id if rule is not None else None,
        binding_name=binding.name if binding is not None and band is not None else None,
        active_pages=tuple(pages),
        warnings=tuple(warnings),
        trace=tuple(trace),
    )


class PricingEngine:
    """
    Quotes print jobs against the current pricing catalog.

    The engine keeps no catalog of its own: every quote asks the provider
    for a fresh snapshot, so admin edits apply to the next quote.
    """

    def __init__(self, rules_provider: Callable[[], Sequence[PricingRule]]):
        self.rules_provider = rules_provider

    def quote(self, config: PrintJobConfig, rules: Optional[Sequence[PricingRule]] = None) -> PriceQuote:
        if rules is None:
            rules = self.rules_provider()
        return calculate_price(config, rules)

    def quote_many(self, configs: Iterable[PrintJobConfig]) -> tuple[list[PriceQuote], Decimal]:
        """Quote several documents against one catalog snapshot."""
        rules = self.rules_provider()
        quotes = [calculate_price(config, rules) for config in configs]
        total = sum((q.grand_total for q in quotes), Decimal(0))
        return quotes, total
