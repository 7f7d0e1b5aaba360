from sqlalchemy import Boolean, Column, Integer, Numeric, String

from storefront.data.database import Base
from storefront.utils.settings import LOW_STOCK_THRESHOLD


class ProductModel(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)

    # zmieniane wylacznie przez InventoryLedger
    stock_quantity = Column(Integer, nullable=False, default=0)
    low_stock_threshold = Column(Integer, nullable=False, default=LOW_STOCK_THRESHOLD)
    is_active = Column(Boolean, nullable=False, default=True)
