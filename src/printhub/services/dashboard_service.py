"""
Dashboard Service - Admin summary figures over orders and users.
"""
import pandas as pd

from .record_store import JsonRecordStore

RECENT_LIMIT = 5


def _recent(df: pd.DataFrame, column: str, columns: list[str]) -> list[dict]:
    if df.empty or column not in df.columns:
        return []
    present = [c for c in columns if c in df.columns]
    recent = df.sort_values(column, ascending=False).head(RECENT_LIMIT)[present]
    recent = recent.astype(object).where(pd.notna(recent), None)
    return recent.to_dict(orient='records')


class DashboardService:
    """Aggregates the order and user stores for the admin dashboard."""

    def __init__(self, orders_store: JsonRecordStore, users_store: JsonRecordStore):
        self.orders_store = orders_store
        self.users_store = users_store

    def summary(self) -> dict:
        orders = pd.DataFrame(self.orders_store.list())
        users = pd.DataFrame(self.users_store.list())

        if orders.empty:
            revenue = 0.0
            by_status = {}
        else:
            totals = pd.to_numeric(orders['total'], errors='coerce').fillna(0)
            # Cancelled orders are not revenue
            revenue = float(totals[orders['status'] != 'cancelled'].sum())
            by_status = {str(k): int(v) for k, v in orders['status'].value_counts().items()}

        return {
            'users': int(len(users)),
            'orders': int(len(orders)),
            'revenue': revenue,
            'pending': by_status.get('pending', 0),
            'processing': by_status.get('processing', 0),
            'orders_by_status': by_status,
            'users_by_tier': (
                {str(k): int(v) for k, v in users['tier'].value_counts().items()}
                if not users.empty and 'tier' in users.columns else {}
            ),
            'recent_orders': _recent(orders, 'date', ['id', 'order_id', 'user_name', 'status', 'total', 'date']),
            'recent_users': _recent(users, 'created_at', ['id', 'name', 'phone', 'tier', 'created_at']),
        }
