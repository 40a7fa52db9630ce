from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.sql import func
from app.database.database import Base


NEXT_INVOICE_NUMBER_KEY = "next_invoice_number"


class Setting(Base):
    __tablename__ = "settings"

    key = Column(String(100), primary_key=True)
    value = Column(Text, nullable=False, default="")
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
