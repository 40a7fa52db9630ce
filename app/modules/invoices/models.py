from app.database.database import Base
from sqlalchemy import Column, Integer, String, Boolean, Date, ForeignKey, Numeric, CheckConstraint
from sqlalchemy.orm import relationship
from datetime import date
from app.common.mixins import TimestampMixin


class Invoice(Base, TimestampMixin):
    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # References
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    invoice_date = Column(Date, nullable=False, default=date.today)
    payment_terms = Column(String(100), nullable=False, default="On Receipt")

    # Totals (calculated)
    subtotal = Column(Numeric(12, 2), nullable=False, default=0)
    tax_amount = Column(Numeric(12, 2), nullable=False, default=0)
    total_amount = Column(Numeric(12, 2), nullable=False, default=0)

    # Payment
    payment_received = Column(Boolean, nullable=False, default=False)
    payment_date = Column(Date, nullable=True)
    payment_amount = Column(Numeric(12, 2), nullable=True)

    # Relationships
    customer = relationship("Customer")
    items = relationship(
        "InvoiceItem",
        back_populates="invoice",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="InvoiceItem.id"
    )

    @property
    def customer_name(self):
        return self.customer.name if self.customer else None

    @property
    def customer_email(self):
        return self.customer.email if self.customer else None

    @property
    def customer_phone(self):
        return self.customer.phone if self.customer else None

    @property
    def customer_address(self):
        return self.customer.address if self.customer else None

    @property
    def customer_gstin(self):
        return self.customer.gstin if self.customer else None


class InvoiceItem(Base, TimestampMixin):
    __tablename__ = "invoice_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True)
    # Se conserva la línea aunque el producto se elimine
    product_id = Column(Integer, ForeignKey("products.id", ondelete="SET NULL"), nullable=True)

    # Snapshot data
    product_name = Column(String(200), nullable=False)
    serial_number = Column(String(100), nullable=True)
    warranty = Column(String(100), nullable=True)

    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    cgst = Column(Numeric(12, 2), nullable=False, default=0)
    sgst = Column(Numeric(12, 2), nullable=False, default=0)
    igst = Column(Numeric(12, 2), nullable=False, default=0)
    total = Column(Numeric(12, 2), nullable=False)  # quantity * price + impuestos

    invoice = relationship("Invoice", back_populates="items")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_invoice_item_quantity_positive"),
    )
