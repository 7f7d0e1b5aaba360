# storefront/data/seed.py
from decimal import Decimal

from storefront.data.database import SessionLocal, init_db
from storefront.data.models.product import ProductModel
from storefront.data.models.user import UserModel
from storefront.services.inventory_service import InventoryService
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

# (id, nazwa, cena, stan poczatkowy)
PRODUCTS = [
    (1, "Whole Wheat Bread", "3.49", 150),
    (2, "French Baguette", "2.99", 120),
    (3, "Chocolate Chip Cookies (Pack of 12)", "4.99", 100),
    (4, "Blueberry Muffins (Pack of 6)", "5.99", 80),
    (5, "Croissants (Pack of 4)", "6.49", 90),
    (6, "Whole Milk (1L)", "2.49", 200),
    (7, "Cheddar Cheese (250g)", "4.99", 150),
    (8, "Greek Yogurt (500g)", "3.99", 120),
    (9, "Butter (250g)", "3.49", 180),
    (10, "Sour Cream (300g)", "2.79", 100),
]


def seed():
    init_db()
    db = SessionLocal()
    try:
        # not forcing: only seed if empty
        if db.query(ProductModel).first():
            return

        db.add(UserModel(id=1, name="Demo Customer", email="demo@example.com"))
        for pid, name, price, _ in PRODUCTS:
            #stan startuje od 0, poczatkowy towar idzie przez ledger jako restock
            db.add(ProductModel(id=pid, name=name, price=Decimal(price), stock_quantity=0))
        db.commit()

        inventory = InventoryService(db)
        for pid, _, _, stock in PRODUCTS:
            inventory.restock(pid, stock, description="Initial stock")

        logger.info(f"Seeded {len(PRODUCTS)} products")
    finally:
        db.close()


if __name__ == "__main__":
    seed()
