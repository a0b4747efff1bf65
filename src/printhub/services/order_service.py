"""
Order Service - Order submission and status lifecycle.

Prices are recomputed from the catalog when an order is placed; the client's
own arithmetic is never trusted. Each order stores a snapshot of the quote
per file so later catalog edits do not change what the customer agreed to.
"""
import logging
import secrets
import string
import time
from typing import Optional

from .quote_service import PrintItem, QuoteService
from .record_store import JsonRecordStore, RecordNotFound, utc_now
from .user_service import UserService

logger = logging.getLogger(__name__)

ORDER_STATUSES = ('pending', 'processing', 'ready', 'delivered', 'cancelled')
DELIVERY_TYPES = ('pickup', 'delivery')

_BASE36 = string.digits + string.ascii_uppercase


def _to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def generate_order_id(prefix: str = "PH", now_ms: Optional[int] = None) -> str:
    """Human-facing order number such as PH-LZ3K9Q1A-7XQ2."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    suffix = "".join(secrets.choice(_BASE36) for _ in range(4))
    return f"{prefix}-{_to_base36(now_ms)}-{suffix}"


class OrderService:
    """Service for placing and managing print orders."""

    def __init__(self, store: JsonRecordStore, quotes: QuoteService, users: UserService,
                 order_id_prefix: str = "PH"):
        self.store = store
        self.quotes = quotes
        self.users = users
        self.order_id_prefix = order_id_prefix

    def place_order(self, items: list[PrintItem], customer: dict, user: Optional[dict] = None,
                    delivery_type: str = 'pickup', delivery_details: Optional[dict] = None) -> dict:
        """
        Price and store a new order in 'pending' status.

        Raises:
            ValueError: no items, unknown delivery type, an item selecting no
                pages, or an item priced at zero because no pricing rule
                covers its settings
        """
        if not items:
            raise ValueError("Order has no files")
        if delivery_type not in DELIVERY_TYPES:
            raise ValueError(f"Unknown delivery type '{delivery_type}'")

        tier = self.users.tier_for(user)
        quoted, total = self.quotes.quote_items(items, tier)

        empty = [q.item.name for q in quoted if q.quote.active_page_count == 0]
        if empty:
            raise ValueError(f"Page range selects no pages for: {', '.join(empty)}")

        # Zero from a missing rule is a catalog gap
        unpriced = [q.item.name for q in quoted if q.quote.grand_total == 0 and not q.quote.print_rule_matched]
        if unpriced:
            raise ValueError(
                f"No pricing configured for: {', '.join(unpriced)}. Please contact support."
            )

        order = self.store.add({
            'order_id': generate_order_id(self.order_id_prefix),
            'user_id': user['id'] if user else 'guest',
            'user_name': customer.get('name'),
            'user_phone': customer.get('phone'),
            'user_email': customer.get('email'),
            'tier': tier.value,
            'type': 'Normal Print',
            'status': 'pending',
            'date': utc_now(),
            'total': total,
            'files': [
                {
                    'name': q.item.name,
                    'pages': q.item.pages,
                    'settings': q.item.settings(),
                    'file_url': q.item.file_url or '',
                    'price': q.quote.grand_total,
                    'quote': q.quote.to_dict(),
                }
                for q in quoted
            ],
            'delivery_type': delivery_type,
            'delivery_details': delivery_details or {},
        })

        if user:
            self.users.record_order(user['id'], total)

        logger.info("Order %s placed by %s, total %s", order['order_id'], order['user_id'], total)
        return order

    def get_order(self, record_id: str) -> Optional[dict]:
        return self.store.get(record_id)

    def list_orders(self, user: Optional[dict] = None, status: Optional[str] = None) -> list[dict]:
        """Orders newest first; a non-admin user only sees their own."""
        orders = self.store.list()
        if user is not None and not self.users.is_admin(user):
            orders = [o for o in orders if o.get('user_id') == user['id']]
        if status and status != 'all':
            orders = [o for o in orders if o.get('status') == status]
        return sorted(orders, key=lambda o: o.get('date') or '', reverse=True)

    def update_status(self, record_id: str, status: str) -> dict:
        if status not in ORDER_STATUSES:
            raise ValueError(f"Unknown order status '{status}'")
        if self.store.get(record_id) is None:
            raise RecordNotFound(f"Order '{record_id}' not found")
        order = self.store.update(record_id, {'status': status, 'updated_at': utc_now()})
        logger.info("Order %s moved to %s", order.get('order_id'), status)
        return order
