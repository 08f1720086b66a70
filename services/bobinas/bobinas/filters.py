"""
Search and category filtering of the bobina collection.
"""
from typing import Iterable, List, Optional

from . import schemas

# Category filter value meaning "no constraint"
ALL = "all"


def is_active(value: Optional[str]) -> bool:
    """Return True if a category filter value constrains the result."""
    return bool(value) and value != ALL


def matches_search(bobina: schemas.BobinaData, search_term: str) -> bool:
    """
    Case-insensitive substring match against code, plastic type, color and supplier.

    A missing supplier never matches.
    """
    needle = search_term.lower()
    fields = (bobina.code, bobina.plastic_type, bobina.color, bobina.supplier)
    return any(value is not None and needle in value.lower() for value in fields)


def filter_bobinas(
    bobinas: Iterable[schemas.BobinaData],
    criteria: schemas.FilterCriteria,
) -> List[schemas.BobinaData]:
    """
    Derive the display subset of a collection.

    All active criteria combine with AND; an empty search term and the
    "all" sentinel impose no constraint. Input order is preserved.

    Args:
        bobinas: The full collection
        criteria: Search term and category filters

    Returns:
        List of matching bobinas in input order
    """
    filtered = list(bobinas)

    if criteria.search_term:
        filtered = [b for b in filtered if matches_search(b, criteria.search_term)]

    if is_active(criteria.plastic_type):
        filtered = [b for b in filtered if b.plastic_type == criteria.plastic_type]

    if is_active(criteria.color):
        filtered = [b for b in filtered if b.color == criteria.color]

    return filtered


def filter_options(bobinas: Iterable[schemas.BobinaData]) -> schemas.FilterOptions:
    """
    Collect the distinct plastic types and colors present in a collection.

    Returns:
        FilterOptions with sorted, de-duplicated values
    """
    plastic_types = set()
    colors = set()
    for bobina in bobinas:
        plastic_types.add(bobina.plastic_type)
        colors.add(bobina.color)
    return schemas.FilterOptions(plastic_types=sorted(plastic_types), colors=sorted(colors))
