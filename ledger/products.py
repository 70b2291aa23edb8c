import logging
from typing import List, Optional

from models import Product, Investment, InvestmentStatus
from ledger.session import UserSession
from ledger.store import DocumentStore


logger = logging.getLogger(__name__)

DEFAULT_PRODUCTS = [
    # product_id, name, price, cycle_days, daily_income
    ("starter", "Starter Plan", 10000, 30, 500),
    ("silver", "Silver Plan", 50000, 45, 2000),
    ("gold", "Gold Plan", 100000, 60, 3500),
    ("platinum", "Platinum Plan", 500000, 90, 15000),
]

STATUS_DISPLAY = {
    InvestmentStatus.ACTIVE.value: "In Progress",
    InvestmentStatus.COMPLETED.value: "Completed",
}


def display_status(status: str) -> str:
    return STATUS_DISPLAY.get(status, "Pending Activation")


class ProductCatalog:
    def __init__(self, store: Optional[DocumentStore] = None):
        self.store = store or DocumentStore()

    def list_products(self) -> List[Product]:
        return self.store.query(Product, order_by=Product.price, is_active=True)

    def list_my_investments(self, session: UserSession) -> List[dict]:
        """The My Products page: every investment the user holds, with its display status"""
        user_id = session.require_user("Please sign in to view your products.")
        investments = self.store.query(Investment, order_by=Investment.start_date.desc(), user_id=user_id)
        items = []
        for investment in investments:
            item = investment.to_dict()
            item["statusText"] = display_status(investment.status)
            items.append(item)
        return items

    def seed_default_products(self) -> int:
        """Insert the default catalog entries that are missing. Returns how many were added."""
        added = 0
        for product_id, name, price, cycle_days, daily_income in DEFAULT_PRODUCTS:
            if self.store.get(Product, product_id) is not None:
                continue
            self.store.create(Product(
                product_id=product_id,
                name=name,
                price=price,
                cycle_days=cycle_days,
                daily_income=daily_income,
                is_active=True,
            ))
            added += 1
        logger.info(f"Seeded {added} products")
        return added
