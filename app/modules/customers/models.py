from sqlalchemy import Column, Integer, String, Text
from app.database.database import Base
from app.common.mixins import TimestampMixin


class Customer(Base, TimestampMixin):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), unique=True, nullable=False, index=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True, index=True)
    address = Column(Text, nullable=True)
    gstin = Column(String(15), nullable=True)  # Identificador tributario
