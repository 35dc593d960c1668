"""
app/services/analytics_service.py

Purpose: Dashboard and report figures

- Headline counts for the dashboard landing page
- Product breakdown by category and stock
- Monthly record creation series
"""

from collections import Counter, OrderedDict
from typing import Any, Dict, List

from app.models.record import ProductRecord, UserRecord
from app.services.record_service import RecordStore
from utils.time_utils import month_key


def _monthly_counts(records: List[Any]) -> List[Dict[str, Any]]:
    counts = Counter(month_key(r.created_at) for r in records if r.created_at)
    return [{"month": month, "count": counts[month]} for month in sorted(counts)]


def dashboard_summary(store: RecordStore) -> Dict[str, Any]:
    """
    Figures shown on the dashboard landing page.
    """
    users: List[UserRecord] = store.all("users")
    products: List[ProductRecord] = store.all("products")

    in_stock = [p for p in products if p.in_stock]
    return {
        "total_users": len(users),
        "total_products": len(products),
        "products_in_stock": len(in_stock),
        "inventory_value": round(sum(p.price for p in in_stock), 2),
        "users_by_role": dict(Counter(u.role.value for u in users)),
        "new_users_by_month": _monthly_counts(users),
        "new_products_by_month": _monthly_counts(products),
    }


def product_report(store: RecordStore) -> Dict[str, Any]:
    """
    Category and stock breakdown for the reports page.
    """
    products: List[ProductRecord] = store.all("products")

    by_category: "OrderedDict[str, Dict[str, Any]]" = OrderedDict()
    for product in sorted(products, key=lambda p: p.category or ""):
        name = product.category or "Uncategorized"
        bucket = by_category.setdefault(name, {"name": name, "count": 0, "in_stock": 0, "total_price": 0.0})
        bucket["count"] += 1
        bucket["in_stock"] += int(product.in_stock)
        bucket["total_price"] += product.price

    categories = []
    for bucket in by_category.values():
        categories.append({
            "name": bucket["name"],
            "count": bucket["count"],
            "in_stock": bucket["in_stock"],
            "average_price": round(bucket["total_price"] / bucket["count"], 2),
        })

    total = len(products)
    in_stock = sum(1 for p in products if p.in_stock)
    return {
        "total_products": total,
        "in_stock_rate": round(in_stock / total * 100, 1) if total else 0.0,
        "average_price": round(sum(p.price for p in products) / total, 2) if total else 0.0,
        "categories": categories,
        "new_products_by_month": _monthly_counts(products),
    }
