from pydantic import BaseModel
from typing import Optional


class StockShortage(BaseModel):
    """Detail of a failed stock reservation for one product."""
    product_id: int
    requested_quantity: int
    available_quantity: Optional[int] = None  # None when the product does not exist
