from app.database.database import Base
from sqlalchemy import Column, Integer, String, Numeric, CheckConstraint
from app.common.mixins import TimestampMixin


class Product(Base, TimestampMixin):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), unique=True, nullable=False, index=True)
    default_price = Column(Numeric(12, 2), nullable=False, default=0)
    default_tax_rate = Column(Numeric(5, 2), nullable=False, default=18)  # Porcentaje
    stock_quantity = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        CheckConstraint("stock_quantity >= 0", name="ck_product_stock_non_negative"),
    )
