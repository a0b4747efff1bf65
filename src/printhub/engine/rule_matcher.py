"""
Rule Matcher - Selects the pricing rule and binding price for a print job.

Selection is "narrowest band wins": among the entries whose inclusive
[from_page, to_page] band covers the page count, the one with the smallest
span is chosen. Equal spans resolve to the entry met first in catalog
order. That order comes from storage, so a catalog holding two equally
narrow overlapping bands is fragile; the catalog service warns about it
when such a rule is saved.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional, Sequence, TypeVar

from .models import BindingDefinition, ColorMode, DuplexMode, PricingRule, Tier

logger = logging.getLogger(__name__)

Band = TypeVar('Band')


@dataclass(frozen=True)
class MatchedRule:
    """A rule that matched with context."""
    rule: PricingRule
    span: int
    match_reason: str


def narrowest_band(bands: Iterable[Band], page_count: int) -> Optional[Band]:
    """Return the covering band with the smallest span, first one on ties."""
    best = None
    best_span = None
    for band in bands:
        if not band.covers(page_count):
            continue
        if best_span is None or band.span < best_span:
            best = band
            best_span = band.span
    return best


def tier_price(band, tier) -> Decimal:
    """Pick the price column for a tier; unknown tiers pay the regular price."""
    if band is None:
        return Decimal(0)
    tier = Tier.normalize(tier)
    if tier is Tier.STUDENT:
        return band.student_price
    if tier is Tier.INSTITUTE:
        return band.institute_price
    return band.regular_price


class RuleMatcher:
    """
    Matches print jobs against a snapshot of the pricing rule catalog.

    The matcher holds no state beyond the rules it was built with; build a
    new one whenever the catalog changes.
    """

    def __init__(self, rules: Iterable[PricingRule]):
        self.rules: Sequence[PricingRule] = tuple(rules)

    def find_matching_rules(self, color, duplex, page_count: int) -> list[MatchedRule]:
        """
        Find all rules covering the request, narrowest first.

        The sort is stable so rules with equal spans keep catalog order.
        """
        color = ColorMode.normalize(color)
        duplex = DuplexMode.normalize(duplex)

        matched = []
        for rule in self.rules:
            if rule.color is not color or rule.duplex is not duplex:
                continue
            if not rule.covers(page_count):
                continue
            matched.append(MatchedRule(
                rule=rule,
                span=rule.span,
                match_reason=f"{color.value}, {duplex.value}, pages {rule.from_page}-{rule.to_page}",
            ))

        matched.sort(key=lambda m: m.span)
        return matched

    def match_print_rule(self, color, duplex, page_count: int) -> Optional[PricingRule]:
        matched = self.find_matching_rules(color, duplex, page_count)
        if not matched:
            logger.debug("No pricing rule for %s/%s at %d pages", color, duplex, page_count)
            return None
        return matched[0].rule


def match_print_rule(rules: Iterable[PricingRule], color, duplex, active_page_count: int) -> Optional[PricingRule]:
    """Select the narrowest pricing rule for a color/duplex/page-count request."""
    return RuleMatcher(rules).match_print_rule(color, duplex, active_page_count)


def match_binding_band(binding: Optional[BindingDefinition], active_page_count: int):
    """Return the binding price range that applies, or None."""
    if binding is None or not binding.is_active:
        return None
    return narrowest_band(binding.prices, active_page_count)


def match_binding_price(binding: Optional[BindingDefinition], active_page_count: int, tier) -> Decimal:
    """
    Binding cost for one copy.

    An absent or inactive binding, or one with no band covering the page
    count, costs nothing.
    """
    return tier_price(match_binding_band(binding, active_page_count), tier)
