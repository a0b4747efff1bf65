"""
Data models for the pricing engine.

Uses frozen dataclasses so catalog entries and quotes can be shared freely
between requests. Loose strings coming from forms or stored records are
normalized here, at construction time, so the matcher only ever sees enums
and Decimals.
"""
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional


PAGES_PER_SHEET_OPTIONS = (1, 2, 4, 6, 9, 16)
PRICE_FIELDS = ('student_price', 'institute_price', 'regular_price')


class Tier(str, Enum):
    """Customer pricing tier."""
    STUDENT = "student"
    INSTITUTE = "institute"
    REGULAR = "regular"

    @classmethod
    def normalize(cls, value: Any) -> "Tier":
        """Map any tier-like value to a Tier; unrecognized input is REGULAR."""
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        for tier in cls:
            if tier.value == text:
                return tier
        return cls.REGULAR


class ColorMode(str, Enum):
    MONOCHROME = "monochrome"
    COLOR = "color"

    @classmethod
    def normalize(cls, value: Any) -> "ColorMode":
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        if text in ("monochrome", "bw", "mono", "black & white", "black-and-white"):
            return cls.MONOCHROME
        if text in ("color", "colour", "full_color", "full color"):
            return cls.COLOR
        raise ValueError(f"Unknown color mode: {value!r}")


class DuplexMode(str, Enum):
    SINGLE_SIDED = "single-sided"
    DOUBLE_SIDED = "double-sided"

    @classmethod
    def normalize(cls, value: Any) -> "DuplexMode":
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower().replace("_", "-").replace(" ", "-")
        if text in ("single-sided", "single", "simplex", "single-side"):
            return cls.SINGLE_SIDED
        if text in ("double-sided", "double", "duplex", "double-side"):
            return cls.DOUBLE_SIDED
        raise ValueError(f"Unknown duplex mode: {value!r}")


def to_decimal(value: Any) -> Decimal:
    """Coerce a stored price to Decimal. Missing or unreadable prices are 0."""
    if isinstance(value, Decimal):
        return value
    if value is None or value == "":
        return Decimal(0)
    try:
        # str() keeps 0.1 as Decimal('0.1') rather than its binary expansion
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return Decimal(0)


def _pick(record: dict, *keys: str, default: Any = None) -> Any:
    """First present key wins; accepts both snake_case and camelCase records."""
    for key in keys:
        if key in record and record[key] is not None:
            return record[key]
    return default


def _coerce_prices(instance) -> None:
    for name in PRICE_FIELDS:
        object.__setattr__(instance, name, to_decimal(getattr(instance, name)))


@dataclass(frozen=True)
class PricingRule:
    """A print-cost tier for one color/duplex combination and page band."""
    color: ColorMode
    duplex: DuplexMode
    from_page: int
    to_page: int
    student_price: Decimal = Decimal(0)
    institute_price: Decimal = Decimal(0)
    regular_price: Decimal = Decimal(0)
    rule_id: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, 'color', ColorMode.normalize(self.color))
        object.__setattr__(self, 'duplex', DuplexMode.normalize(self.duplex))
        object.__setattr__(self, 'from_page', int(self.from_page))
        object.__setattr__(self, 'to_page', int(self.to_page))
        _coerce_prices(self)

    @property
    def span(self) -> int:
        return self.to_page - self.from_page

    def covers(self, page_count: int) -> bool:
        return self.from_page <= page_count <= self.to_page

    def to_record(self) -> dict:
        return {
            'rule_id': self.rule_id,
            'color': self.color.value,
            'duplex': self.duplex.value,
            'from_page': self.from_page,
            'to_page': self.to_page,
            'student_price': self.student_price,
            'institute_price': self.institute_price,
            'regular_price': self.regular_price,
        }

    @classmethod
    def from_record(cls, record: dict) -> 'PricingRule':
        """Build from a stored record (also accepts colorType/sideType keys)."""
        return cls(
            rule_id=_pick(record, 'rule_id', 'id'),
            color=_pick(record, 'color', 'colorType'),
            duplex=_pick(record, 'duplex', 'sideType'),
            from_page=_pick(record, 'from_page', 'fromPage', default=1),
            to_page=_pick(record, 'to_page', 'toPage', default=1),
            student_price=_pick(record, 'student_price', 'studentPrice'),
            institute_price=_pick(record, 'institute_price', 'institutePrice'),
            regular_price=_pick(record, 'regular_price', 'regularPrice'),
        )


@dataclass(frozen=True)
class BindingPriceRange:
    """One page band of a binding's price table."""
    from_page: int
    to_page: int
    student_price: Decimal = Decimal(0)
    institute_price: Decimal = Decimal(0)
    regular_price: Decimal = Decimal(0)

    def __post_init__(self):
        object.__setattr__(self, 'from_page', int(self.from_page))
        object.__setattr__(self, 'to_page', int(self.to_page))
        _coerce_prices(self)

    @property
    def span(self) -> int:
        return self.to_page - self.from_page

    def covers(self, page_count: int) -> bool:
        return self.from_page <= page_count <= self.to_page

    def to_record(self) -> dict:
        return {
            'from_page': self.from_page,
            'to_page': self.to_page,
            'student_price': self.student_price,
            'institute_price': self.institute_price,
            'regular_price': self.regular_price,
        }

    @classmethod
    def from_record(cls, record: dict) -> 'BindingPriceRange':
        return cls(
            from_page=_pick(record, 'from_page', 'fromPage', default=1),
            to_page=_pick(record, 'to_page', 'toPage', default=1),
            student_price=_pick(record, 'student_price', 'studentPrice'),
            institute_price=_pick(record, 'institute_price', 'institutePrice'),
            regular_price=_pick(record, 'regular_price', 'regularPrice'),
        )


@dataclass(frozen=True)
class BindingDefinition:
    """An optional binding add-on with its own tiered price table."""
    name: str
    is_active: bool = True
    prices: tuple[BindingPriceRange, ...] = ()
    binding_id: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, 'prices', tuple(
            p if isinstance(p, BindingPriceRange) else BindingPriceRange.from_record(p)
            for p in self.prices or ()
        ))

    def to_record(self) -> dict:
        return {
            'name': self.name,
            'is_active': self.is_active,
            'prices': [p.to_record() for p in self.prices],
        }

    @classmethod
    def from_record(cls, record: dict) -> 'BindingDefinition':
        return cls(
            binding_id=_pick(record, 'id', 'binding_id'),
            name=_pick(record, 'name', default=''),
            is_active=bool(_pick(record, 'is_active', 'isActive', default=True)),
            prices=tuple(_pick(record, 'prices', default=())),
        )


@dataclass(frozen=True)
class PrintJobConfig:
    """Per-document input to the calculator. Never persisted."""
    total_pages: int
    page_range: Optional[str] = "all"
    color: ColorMode = ColorMode.MONOCHROME
    duplex: DuplexMode = DuplexMode.SINGLE_SIDED
    pages_per_sheet: int = 1
    copies: int = 1
    binding: Optional[BindingDefinition] = None
    tier: Tier = Tier.REGULAR

    def __post_init__(self):
        object.__setattr__(self, 'color', ColorMode.normalize(self.color))
        object.__setattr__(self, 'duplex', DuplexMode.normalize(self.duplex))
        object.__setattr__(self, 'tier', Tier.normalize(self.tier))


@dataclass(frozen=True)
class TraceStep:
    """A single step in the price derivation trace."""
    step: str
    description: str
    value: Optional[str] = None


@dataclass(frozen=True)
class PriceQuote:
    """Itemized result of a price calculation."""
    active_page_count: int
    sheets_needed: int
    price_per_sheet: Decimal
    print_subtotal: Decimal
    binding_subtotal: Decimal
    per_copy_subtotal: Decimal
    grand_total: Decimal
    copies: int = 1
    tier: Tier = Tier.REGULAR
    print_rule_matched: bool = False
    print_rule_id: Optional[str] = None
    binding_name: Optional[str] = None
    active_pages: tuple[int, ...] = ()
    warnings: tuple[str, ...] = ()
    trace: tuple[TraceStep, ...] = field(default=(), compare=False)

    def get_trace_text(self) -> str:
        """Get human-readable trace as formatted text."""
        lines = []
        for t in self.trace:
            if t.value:
                lines.append(f"→ {t.step}: {t.description} = {t.value}")
            else:
                lines.append(f"→ {t.step}: {t.description}")
        return "\n".join(lines)

    def to_dict(self) -> dict:
        return {
            'active_page_count': self.active_page_count,
            'sheets_needed': self.sheets_needed,
            'price_per_sheet': self.price_per_sheet,
            'print_subtotal': self.print_subtotal,
            'binding_subtotal': self.binding_subtotal,
            'per_copy_subtotal': self.per_copy_subtotal,
            'grand_total': self.grand_total,
            'copies': self.copies,
            'tier': self.tier.value,
            'print_rule_matched': self.print_rule_matched,
            'print_rule_id': self.print_rule_id,
            'binding_name': self.binding_name,
            'warnings': list(self.warnings),
        }
