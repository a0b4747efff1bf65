import os
import sys

import pytest

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from printhub.config.settings import Settings
from printhub.engine.models import BindingDefinition, BindingPriceRange, PricingRule
from printhub.engine.pricing_engine import PricingEngine
from printhub.services.catalog_service import CatalogService
from printhub.services.order_service import OrderService
from printhub.services.quote_service import QuoteService
from printhub.services.record_store import JsonRecordStore
from printhub.services.user_service import UserService


@pytest.fixture
def settings(tmp_path):
    return Settings.load(project_root=tmp_path, data_dir=tmp_path / "data")


@pytest.fixture
def catalog(settings):
    return CatalogService(settings.pricing_rules_csv, JsonRecordStore(settings.bindings_json))


@pytest.fixture
def users(settings):
    return UserService(JsonRecordStore(settings.users_json))


@pytest.fixture
def quotes(catalog):
    return QuoteService(PricingEngine(catalog.pricing_rules), catalog)


@pytest.fixture
def orders(settings, quotes, users):
    return OrderService(JsonRecordStore(settings.orders_json), quotes, users)


@pytest.fixture
def sample_rules():
    """Black & white single-sided catalog with a narrow and a wide band."""
    return [
        PricingRule(rule_id="bw-wide", color="monochrome", duplex="single-sided",
                    from_page=1, to_page=9999, student_price="1.0", institute_price="0.8", regular_price="1.5"),
        PricingRule(rule_id="bw-narrow", color="monochrome", duplex="single-sided",
                    from_page=1, to_page=50, student_price="0.9", institute_price="0.7", regular_price="1.2"),
        PricingRule(rule_id="color-wide", color="color", duplex="single-sided",
                    from_page=1, to_page=9999, student_price="5.0", institute_price="4.0", regular_price="7.0"),
    ]


@pytest.fixture
def spiral_binding():
    return BindingDefinition(
        name="Spiral",
        binding_id="spiral",
        prices=(BindingPriceRange(from_page=1, to_page=100, student_price="12", institute_price="10",
                                  regular_price="15"),),
    )
