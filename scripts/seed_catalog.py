#!/usr/bin/env python
"""
Seed the pricing catalog with the default rules and a sample binding.

Usage:
    python scripts/seed_catalog.py
"""
import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from printhub.config.settings import get_settings
from printhub.engine.models import BindingDefinition, BindingPriceRange
from printhub.services.catalog_service import DEFAULT_PRICING_RULES, CatalogService
from printhub.services.record_store import JsonRecordStore


SAMPLE_BINDINGS = (
    BindingDefinition(name="Spiral Binding", prices=(
        BindingPriceRange(from_page=1, to_page=100, student_price="20", institute_price="18", regular_price="25"),
        BindingPriceRange(from_page=101, to_page=300, student_price="35", institute_price="30", regular_price="40"),
    )),
    BindingDefinition(name="Staple", prices=(
        BindingPriceRange(from_page=1, to_page=50, student_price="2", institute_price="2", regular_price="3"),
    )),
)


def main():
    settings = get_settings()
    service = CatalogService(settings.pricing_rules_csv, JsonRecordStore(settings.bindings_json))

    if service.list_pricing_rules():
        print(f"Pricing rules already present in {settings.pricing_rules_csv}, skipping")
    else:
        for rule in DEFAULT_PRICING_RULES:
            created = service.create_pricing_rule(rule)
            print(f"✅ Created rule: {created.rule_id}")

    if service.list_bindings():
        print(f"Bindings already present in {settings.bindings_json}, skipping")
    else:
        for binding in SAMPLE_BINDINGS:
            created = service.create_binding(binding)
            print(f"✅ Created binding: {created.name} ({created.binding_id})")


if __name__ == "__main__":
    main()
