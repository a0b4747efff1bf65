from decimal import Decimal

import pytest

from printhub.engine.models import BindingDefinition, BindingPriceRange, PricingRule
from printhub.services.catalog_service import DEFAULT_PRICING_RULES
from printhub.services.record_store import RecordNotFound


def _rule(**overrides):
    fields = dict(color="monochrome", duplex="single-sided", from_page=1, to_page=50,
                  student_price="0.9", institute_price="0.7", regular_price="1.2")
    fields.update(overrides)
    return PricingRule(**fields)


def test_empty_catalog_uses_defaults(catalog):
    assert catalog.list_pricing_rules() == []
    assert catalog.pricing_rules() == list(DEFAULT_PRICING_RULES)


def test_create_generates_readable_ids(catalog):
    first = catalog.create_pricing_rule(_rule())
    second = catalog.create_pricing_rule(_rule(regular_price="1.3"))
    assert first.rule_id == "BW-SS-1-50"
    assert second.rule_id == "BW-SS-1-50-1"


def test_stored_rules_replace_defaults(catalog):
    catalog.create_pricing_rule(_rule(rule_id="only"))
    rules = catalog.pricing_rules()
    assert [r.rule_id for r in rules] == ["only"]
    assert rules[0].regular_price == Decimal("1.2")


def test_duplicate_id_rejected(catalog):
    catalog.create_pricing_rule(_rule(rule_id="r1"))
    with pytest.raises(ValueError, match="already exists"):
        catalog.create_pricing_rule(_rule(rule_id="r1"))


@pytest.mark.parametrize("overrides, message", [
    ({"from_page": 0}, "from page must be at least 1"),
    ({"from_page": 60}, "from page must not exceed to page"),
    ({"student_price": "-1"}, "student price cannot be negative"),
])
def test_invalid_rules_rejected(catalog, overrides, message):
    result = catalog.validate_pricing_rule(_rule(**overrides))
    assert not result.valid
    assert any(message in e for e in result.errors)
    with pytest.raises(ValueError):
        catalog.create_pricing_rule(_rule(**overrides))


def test_equal_span_overlap_warns(catalog):
    catalog.create_pricing_rule(_rule(rule_id="a", from_page=1, to_page=10))
    result = catalog.validate_pricing_rule(_rule(rule_id="b", from_page=5, to_page=14))
    assert result.valid
    assert any("the one stored first will be used" in w for w in result.warnings)


def test_same_range_warns(catalog):
    catalog.create_pricing_rule(_rule(rule_id="a"))
    result = catalog.validate_pricing_rule(_rule(rule_id="b"))
    assert result.warnings == ["Same page range as rule 'a'"]


def test_narrower_overlap_does_not_warn(catalog):
    catalog.create_pricing_rule(_rule(rule_id="wide", to_page=9999))
    assert catalog.validate_pricing_rule(_rule(rule_id="narrow")).warnings == []


def test_update_keeps_catalog_position(catalog):
    for rule_id in ("a", "b", "c"):
        catalog.create_pricing_rule(_rule(rule_id=rule_id, from_page=1, to_page=10 * (ord(rule_id) - 96)))
    updated = catalog.update_pricing_rule("b", {"regular_price": Decimal("4.5")})

    assert updated.regular_price == Decimal("4.5")
    assert [r.rule_id for r in catalog.list_pricing_rules()] == ["a", "b", "c"]
    assert catalog.get_pricing_rule("b").regular_price == Decimal("4.5")


def test_update_and_delete_missing_rule(catalog):
    with pytest.raises(RecordNotFound):
        catalog.update_pricing_rule("nope", {"regular_price": 1})
    with pytest.raises(RecordNotFound):
        catalog.delete_pricing_rule("nope")


def test_delete_rule(catalog):
    catalog.create_pricing_rule(_rule(rule_id="gone"))
    assert catalog.delete_pricing_rule("gone") is True
    assert catalog.get_pricing_rule("gone") is None


def test_unreadable_csv_rows_skipped(catalog):
    catalog.create_pricing_rule(_rule(rule_id="good"))
    with open(catalog.pricing_rules_csv, "a", encoding="utf-8") as f:
        f.write("bad,sepia,single-sided,1,5,1,1,1\n")
    assert [r.rule_id for r in catalog.list_pricing_rules()] == ["good"]


def test_binding_lifecycle(catalog):
    created = catalog.create_binding(BindingDefinition(name="Spiral", prices=(
        BindingPriceRange(from_page=1, to_page=100, regular_price="15"),
    )))
    assert created.binding_id
    assert created.prices[0].regular_price == Decimal("15")

    toggled = catalog.toggle_binding(created.binding_id)
    assert toggled.is_active is False
    assert catalog.list_bindings(include_inactive=False) == []

    renamed = catalog.update_binding(created.binding_id, {"name": "Spiral Bound"})
    assert renamed.name == "Spiral Bound"
    assert renamed.is_active is False

    catalog.delete_binding(created.binding_id)
    assert catalog.get_binding(created.binding_id) is None


def test_binding_none_means_no_binding(catalog):
    assert catalog.get_binding("none") is None
    assert catalog.get_binding(None) is None


def test_binding_validation(catalog):
    result = catalog.validate_binding(BindingDefinition(name=" "))
    assert not result.valid
    assert "Name is required" in result.errors

    result = catalog.validate_binding(BindingDefinition(name="Tape"))
    assert result.valid
    assert result.warnings == ["Binding has no price ranges and will not add any cost"]


def test_binding_equal_span_ranges_warn(catalog):
    binding = BindingDefinition(name="Staple", prices=(
        BindingPriceRange(from_page=1, to_page=20, regular_price="2"),
        BindingPriceRange(from_page=10, to_page=29, regular_price="3"),
    ))
    result = catalog.validate_binding(binding)
    assert result.valid
    assert len(result.warnings) == 1


def test_stats(catalog):
    assert catalog.get_stats()["using_defaults"] is True
    catalog.create_pricing_rule(_rule(rule_id="a"))
    catalog.create_pricing_rule(_rule(rule_id="b", color="color"))
    stats = catalog.get_stats()
    assert stats["pricing_rules"] == 2
    assert stats["rules_by_mode"] == {"monochrome/single-sided": 1, "color/single-sided": 1}
