"""Engine subpackage - page ranges, rule matching and price calculation."""
from .models import (
    BindingDefinition,
    BindingPriceRange,
    ColorMode,
    DuplexMode,
    PriceQuote,
    PricingRule,
    PrintJobConfig,
    Tier,
)
from .page_range import resolve_page_range
from .pricing_engine import PricingEngine, calculate_price
from .rule_matcher import RuleMatcher, match_binding_price, match_print_rule

__all__ = [
    'BindingDefinition', 'BindingPriceRange', 'ColorMode', 'DuplexMode',
    'PriceQuote', 'PricingRule', 'PrintJobConfig', 'Tier',
    'resolve_page_range', 'PricingEngine', 'calculate_price',
    'RuleMatcher', 'match_binding_price', 'match_print_rule',
]
