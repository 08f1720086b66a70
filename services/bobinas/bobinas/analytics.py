"""
Aggregate statistics over the bobina collection.

Counts are always recomputed from stock_quantity; nothing here is stored.
"""
from typing import Iterable

from . import schemas
from .stock import StockStatus, classify_stock


def summarize(bobinas: Iterable[schemas.BobinaData]) -> schemas.InventorySummary:
    """
    Compute inventory statistics in a single pass.

    Args:
        bobinas: The full collection

    Returns:
        InventorySummary with total records, total stock, low stock and
        out of stock counts (all zero for an empty collection)
    """
    total_records = 0
    total_stock = 0
    low_stock = 0
    out_of_stock = 0

    for bobina in bobinas:
        total_records += 1
        total_stock += bobina.stock_quantity
        status = classify_stock(bobina.stock_quantity)
        if status is StockStatus.LOW_STOCK:
            low_stock += 1
        elif status is StockStatus.OUT_OF_STOCK:
            out_of_stock += 1

    return schemas.InventorySummary(
        total_records=total_records,
        total_stock=total_stock,
        low_stock_count=low_stock,
        out_of_stock_count=out_of_stock,
    )
