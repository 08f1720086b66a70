"""
Stock status classification.

This is the only place the stock thresholds are defined; per-record display
(schemas.Bobina.stock_status) and the aggregate statistics both call
classify_stock.
"""
from enum import Enum

LOW_STOCK_THRESHOLD = 5


class StockStatus(str, Enum):
    OUT_OF_STOCK = "OUT_OF_STOCK"
    LOW_STOCK = "LOW_STOCK"
    IN_STOCK = "IN_STOCK"


STATUS_LABELS = {
    StockStatus.OUT_OF_STOCK: "Sem estoque",
    StockStatus.LOW_STOCK: "Estoque baixo",
    StockStatus.IN_STOCK: "Em estoque",
}


def classify_stock(quantity: int) -> StockStatus:
    """
    Map a stock quantity to its status.

    Args:
        quantity: Units in stock (non-negative)

    Returns:
        OUT_OF_STOCK for 0, LOW_STOCK for 1 to 5, IN_STOCK above 5

    Raises:
        ValueError: If quantity is negative
    """
    if quantity < 0:
        raise ValueError(f"Stock quantity cannot be negative: {quantity}")
    if quantity == 0:
        return StockStatus.OUT_OF_STOCK
    if quantity <= LOW_STOCK_THRESHOLD:
        return StockStatus.LOW_STOCK
    return StockStatus.IN_STOCK
