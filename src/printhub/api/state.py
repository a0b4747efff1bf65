"""
Wiring of settings, stores and services shared by the API routers.
"""
from dataclasses import dataclass

from fastapi import Request

from ..config.settings import Settings
from ..engine.pricing_engine import PricingEngine
from ..services.catalog_service import CatalogService
from ..services.dashboard_service import DashboardService
from ..services.order_service import OrderService
from ..services.quote_service import QuoteService
from ..services.record_store import JsonRecordStore
from ..services.user_service import UserService


@dataclass
class AppState:
    settings: Settings
    catalog: CatalogService
    engine: PricingEngine
    quotes: QuoteService
    users: UserService
    orders: OrderService
    dashboard: DashboardService


def build_state(settings: Settings) -> AppState:
    bindings_store = JsonRecordStore(settings.bindings_json)
    orders_store = JsonRecordStore(settings.orders_json)
    users_store = JsonRecordStore(settings.users_json)

    catalog = CatalogService(settings.pricing_rules_csv, bindings_store)
    engine = PricingEngine(catalog.pricing_rules)
    quotes = QuoteService(engine, catalog)
    users = UserService(users_store)
    orders = OrderService(orders_store, quotes, users, order_id_prefix=settings.order_id_prefix)

    return AppState(
        settings=settings,
        catalog=catalog,
        engine=engine,
        quotes=quotes,
        users=users,
        orders=orders,
        dashboard=DashboardService(orders_store, users_store),
    )


def get_state(request: Request) -> AppState:
    return request.app.state.printhub
