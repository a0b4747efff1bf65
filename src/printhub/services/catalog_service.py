"""
Catalog Service - CRUD operations for pricing rules and binding types.
Pricing rules live in a CSV file; bindings, which nest price ranges, live
in a JSON record store.
"""
import csv
import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional

from ..engine.models import (
    PRICE_FIELDS,
    BindingDefinition,
    ColorMode,
    DuplexMode,
    PricingRule,
)
from .record_store import JsonRecordStore, RecordNotFound

logger = logging.getLogger(__name__)


# Used when no rule has been stored yet
DEFAULT_PRICING_RULES = (
    PricingRule(rule_id="default-bw-single", color=ColorMode.MONOCHROME, duplex=DuplexMode.SINGLE_SIDED,
                from_page=1, to_page=9999, student_price="1.0", institute_price="0.8", regular_price="1.5"),
    PricingRule(rule_id="default-bw-double", color=ColorMode.MONOCHROME, duplex=DuplexMode.DOUBLE_SIDED,
                from_page=1, to_page=9999, student_price="1.5", institute_price="1.2", regular_price="2.0"),
    PricingRule(rule_id="default-color-single", color=ColorMode.COLOR, duplex=DuplexMode.SINGLE_SIDED,
                from_page=1, to_page=9999, student_price="5.0", institute_price="4.0", regular_price="7.0"),
    PricingRule(rule_id="default-color-double", color=ColorMode.COLOR, duplex=DuplexMode.DOUBLE_SIDED,
                from_page=1, to_page=9999, student_price="8.0", institute_price="6.5", regular_price="10.0"),
)

_COLOR_CODES = {ColorMode.MONOCHROME: "BW", ColorMode.COLOR: "CLR"}
_DUPLEX_CODES = {DuplexMode.SINGLE_SIDED: "SS", DuplexMode.DOUBLE_SIDED: "DS"}


@dataclass
class ValidationResult:
    """Result of catalog entry validation."""
    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add_error(self, message: str):
        self.errors.append(message)
        self.valid = False


def _validate_band(result: ValidationResult, band, label: str):
    if band.from_page < 1:
        result.add_error(f"{label}: from page must be at least 1")
    if band.from_page > band.to_page:
        result.add_error(f"{label}: from page must not exceed to page")
    for name in PRICE_FIELDS:
        if getattr(band, name) < 0:
            result.add_error(f"{label}: {name.replace('_', ' ')} cannot be negative")


def _overlaps(a, b) -> bool:
    return a.from_page <= b.to_page and b.from_page <= a.to_page


def _tie_warning(label: str, other: str, band) -> str:
    return (
        f"{label} overlaps {other} with the same span ({band.span + 1} pages); "
        f"the one stored first will be used"
    )


def rule_to_csv_row(rule: PricingRule) -> dict:
    """Convert to CSV row format."""
    row = rule.to_record()
    return {k: '' if v is None else str(v) for k, v in row.items()}


def rule_from_csv_row(row: dict) -> PricingRule:
    """Create PricingRule from CSV row."""
    return PricingRule.from_record({k: (v if v != '' else None) for k, v in row.items()})


class CatalogService:
    """Service for managing the pricing rule and binding catalogs."""

    CSV_COLUMNS = [
        'rule_id', 'color', 'duplex', 'from_page', 'to_page',
        'student_price', 'institute_price', 'regular_price',
    ]

    def __init__(self, pricing_rules_csv: Path, bindings_store: JsonRecordStore):
        self.pricing_rules_csv = Path(pricing_rules_csv)
        self.bindings_store = bindings_store

    # ------------------------------------------------------------------
    # Pricing rules
    # ------------------------------------------------------------------

    def list_pricing_rules(self) -> list[PricingRule]:
        """List stored rules in file order."""
        rules = []
        if not self.pricing_rules_csv.exists():
            return rules

        with open(self.pricing_rules_csv, 'r', encoding='utf-8', newline='') as f:
            reader = csv.DictReader(f)
            for line_no, row in enumerate(reader, start=2):
                if not row.get('rule_id'):
                    continue
                try:
                    rules.append(rule_from_csv_row(row))
                except ValueError as e:
                    logger.warning("Skipping unreadable pricing rule on line %d: %s", line_no, e)

        return rules

    def pricing_rules(self) -> list[PricingRule]:
        """Rules to price with: the stored catalog, or the defaults when it is empty."""
        rules = self.list_pricing_rules()
        if not rules:
            logger.warning("Pricing catalog is empty, using default pricing rules")
            return list(DEFAULT_PRICING_RULES)
        return rules

    def get_pricing_rule(self, rule_id: str) -> Optional[PricingRule]:
        for rule in self.list_pricing_rules():
            if rule.rule_id == rule_id:
                return rule
        return None

    def create_pricing_rule(self, rule: PricingRule) -> PricingRule:
        """Validate and append a new rule."""
        if not rule.rule_id:
            rule = replace(rule, rule_id=self._generate_rule_id(rule))

        if self.get_pricing_rule(rule.rule_id):
            raise ValueError(f"Pricing rule with ID '{rule.rule_id}' already exists")

        validation = self.validate_pricing_rule(rule)
        if not validation.valid:
            raise ValueError("; ".join(validation.errors))

        rules = self.list_pricing_rules()
        rules.append(rule)
        self._write_rules(rules)
        logger.info("Created pricing rule %s", rule.rule_id)
        return rule

    def update_pricing_rule(self, rule_id: str, updates: dict) -> PricingRule:
        """Update an existing rule in place, keeping its catalog position."""
        rules = self.list_pricing_rules()

        for i, rule in enumerate(rules):
            if rule.rule_id == rule_id:
                record = rule.to_record()
                record.update({k: v for k, v in updates.items() if k in record and k != 'rule_id'})
                updated = PricingRule.from_record(record)
                validation = self.validate_pricing_rule(updated)
                if not validation.valid:
                    raise ValueError("; ".join(validation.errors))
                rules[i] = updated
                self._write_rules(rules)
                logger.info("Updated pricing rule %s", rule_id)
                return updated

        raise RecordNotFound(f"Pricing rule with ID '{rule_id}' not found")

    def delete_pricing_rule(self, rule_id: str) -> bool:
        rules = self.list_pricing_rules()
        original_count = len(rules)
        rules = [r for r in rules if r.rule_id != rule_id]

        if len(rules) == original_count:
            raise RecordNotFound(f"Pricing rule with ID '{rule_id}' not found")

        self._write_rules(rules)
        logger.info("Deleted pricing rule %s", rule_id)
        return True

    def validate_pricing_rule(self, rule: PricingRule) -> ValidationResult:
        """Validate a rule before saving."""
        result = ValidationResult(valid=True)
        _validate_band(result, rule, "Pricing rule")
        if result.valid:
            result.warnings.extend(self._check_conflicts(rule))
        return result

    def _check_conflicts(self, rule: PricingRule) -> list[str]:
        """Find stored rules that would tie with this one during matching."""
        warnings = []
        for existing in self.list_pricing_rules():
            if existing.rule_id == rule.rule_id:
                continue
            if existing.color is not rule.color or existing.duplex is not rule.duplex:
                continue
            if not _overlaps(existing, rule):
                continue

            if (existing.from_page, existing.to_page) == (rule.from_page, rule.to_page):
                warnings.append(f"Same page range as rule '{existing.rule_id}'")
            elif existing.span == rule.span:
                warnings.append(_tie_warning("Rule", f"rule '{existing.rule_id}'", rule))
        return warnings

    def _generate_rule_id(self, rule: PricingRule) -> str:
        """Generate a unique rule ID such as BW-SS-1-50."""
        base = f"{_COLOR_CODES[rule.color]}-{_DUPLEX_CODES[rule.duplex]}-{rule.from_page}-{rule.to_page}"

        existing_ids = {r.rule_id for r in self.list_pricing_rules()}
        candidate = base
        counter = 1
        while candidate in existing_ids:
            candidate = f"{base}-{counter}"
            counter += 1

        return candidate

    def _write_rules(self, rules: list[PricingRule]):
        """Write rules back to CSV."""
        self.pricing_rules_csv.parent.mkdir(parents=True, exist_ok=True)
        with open(self.pricing_rules_csv, 'w', encoding='utf-8', newline='') as f:
            writer = csv.DictWriter(f, fieldnames=self.CSV_COLUMNS)
            writer.writeheader()
            for rule in rules:
                writer.writerow(rule_to_csv_row(rule))

    # ------------------------------------------------------------------
    # Bindings
    # ------------------------------------------------------------------

    def list_bindings(self, include_inactive: bool = True) -> list[BindingDefinition]:
        bindings = [BindingDefinition.from_record(r) for r in self.bindings_store.list()]
        if not include_inactive:
            bindings = [b for b in bindings if b.is_active]
        return bindings

    def get_binding(self, binding_id: Optional[str]) -> Optional[BindingDefinition]:
        """Look up a binding; None and 'none' mean no binding."""
        if not binding_id or binding_id == 'none':
            return None
        record = self.bindings_store.get(binding_id)
        return BindingDefinition.from_record(record) if record else None

    def create_binding(self, binding: BindingDefinition) -> BindingDefinition:
        validation = self.validate_binding(binding)
        if not validation.valid:
            raise ValueError("; ".join(validation.errors))
        record = self.bindings_store.add(binding.to_record())
        logger.info("Created binding %s (%s)", record['id'], binding.name)
        return BindingDefinition.from_record(record)

    def update_binding(self, binding_id: str, updates: dict) -> BindingDefinition:
        current = self.bindings_store.get(binding_id)
        if current is None:
            raise RecordNotFound(f"Binding with ID '{binding_id}' not found")

        record = BindingDefinition.from_record(current).to_record()
        record.update({k: v for k, v in updates.items() if k in record})
        updated = BindingDefinition.from_record(record)

        validation = self.validate_binding(updated)
        if not validation.valid:
            raise ValueError("; ".join(validation.errors))

        stored = self.bindings_store.replace(binding_id, updated.to_record())
        logger.info("Updated binding %s", binding_id)
        return BindingDefinition.from_record(stored)

    def toggle_binding(self, binding_id: str) -> BindingDefinition:
        binding = self.get_binding(binding_id)
        if binding is None:
            raise RecordNotFound(f"Binding with ID '{binding_id}' not found")
        return self.update_binding(binding_id, {'is_active': not binding.is_active})

    def delete_binding(self, binding_id: str) -> bool:
        self.bindings_store.delete(binding_id)
        logger.info("Deleted binding %s", binding_id)
        return True

    def validate_binding(self, binding: BindingDefinition) -> ValidationResult:
        result = ValidationResult(valid=True)

        if not binding.name or not binding.name.strip():
            result.add_error("Name is required")

        if not binding.prices:
            result.warnings.append("Binding has no price ranges and will not add any cost")

        for i, band in enumerate(binding.prices, start=1):
            _validate_band(result, band, f"Range {i}")

        if result.valid:
            for i, band in enumerate(binding.prices, start=1):
                for j, other in enumerate(binding.prices[i:], start=i + 1):
                    if _overlaps(band, other) and band.span == other.span:
                        result.warnings.append(_tie_warning(f"Range {j}", f"range {i}", other))

        return result

    # ------------------------------------------------------------------

    def get_stats(self) -> dict:
        """Get statistics about the catalogs."""
        rules = self.list_pricing_rules()
        bindings = self.list_bindings()

        by_mode = {}
        for r in rules:
            key = f"{r.color.value}/{r.duplex.value}"
            by_mode[key] = by_mode.get(key, 0) + 1

        return {
            'pricing_rules': len(rules),
            'using_defaults': not rules,
            'rules_by_mode': by_mode,
            'bindings': len(bindings),
            'active_bindings': sum(1 for b in bindings if b.is_active),
        }
