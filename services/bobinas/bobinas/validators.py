"""
Validation of candidate bobina records.

Candidates arrive as loosely typed mappings (form fields, JSON bodies, CSV
rows), so numeric and date fields are coerced here. Whether "0" or "" is
accepted is decided by these coercion rules.
"""
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Mapping, Optional, Tuple

from . import errors, schemas

# Portuguese column names of the bobinas table, accepted as aliases.
FIELD_ALIASES = {
    "codigo": "code",
    "tipo_plastico": "plastic_type",
    "cor": "color",
    "espessura": "thickness",
    "largura": "width",
    "peso": "weight",
    "quantidade_estoque": "stock_quantity",
    "localizacao": "location",
    "data_entrada": "entry_date",
    "data_validade": "expiry_date",
    "fornecedor": "supplier",
    "observacoes": "notes",
    "foto_url": "photo_url",
}

REQUIRED_TEXT_FIELDS = ("code", "plastic_type", "color")
MEASUREMENT_FIELDS = ("thickness", "width", "weight")
OPTIONAL_TEXT_FIELDS = ("location", "supplier", "notes", "photo_url")

# (precision, scale) of the Numeric column behind each measurement
MEASUREMENT_COLUMNS = {
    "thickness": (10, 3),
    "width": (10, 2),
    "weight": (10, 3),
}
# Largest value a 32-bit INTEGER column holds
MAX_STOCK_QUANTITY = 2_147_483_647


def normalize_keys(candidate: Mapping[str, Any]) -> Dict[str, Any]:
    """Map aliased keys onto field names. Field names win over aliases."""
    normalized: Dict[str, Any] = {}
    for key, value in candidate.items():
        name = FIELD_ALIASES.get(key, key)
        if name in normalized and key != name:
            continue
        normalized[name] = value
    return normalized


def parse_required_text(value: Any) -> Tuple[Optional[str], str]:
    if value is None:
        return None, "This field is required"
    if not isinstance(value, str):
        return None, "Must be text"
    text = value.strip()
    if not text:
        return None, "Cannot be empty"
    return text, ""


def parse_optional_text(value: Any) -> Tuple[Optional[str], str]:
    if value is None:
        return None, ""
    if not isinstance(value, str):
        return None, "Must be text"
    return value.strip() or None, ""


def parse_measurement(value: Any) -> Tuple[Optional[Decimal], str]:
    """
    Coerce a measurement to a non-negative finite Decimal.

    Args:
        value: Number or numeric text (e.g. a text-box value)

    Returns:
        Tuple of (parsed_value, error_message); error_message is empty on success
    """
    if value is None or isinstance(value, bool):
        return None, "This field is required"
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None, "This field is required"
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None, f"Not a number: {value!r}"
    if not number.is_finite():
        return None, "Must be a finite number"
    if number < 0:
        return None, "Cannot be negative"
    return number, ""


def parse_stock_quantity(value: Any) -> Tuple[Optional[int], str]:
    """
    Coerce a stock quantity to a non-negative integer.

    Integral numbers and integral numeric text ("3", "3.0") are accepted.

    Returns:
        Tuple of (parsed_value, error_message); error_message is empty on success
    """
    number, error = parse_measurement(value)
    if error:
        return None, error
    if number != number.to_integral_value():
        return None, "Must be a whole number"
    if number > MAX_STOCK_QUANTITY:
        return None, f"Cannot exceed {MAX_STOCK_QUANTITY}"
    return int(number), ""


def check_column_range(field: str, result: Tuple[Optional[Decimal], str]) -> Tuple[Optional[Decimal], str]:
    """
    Reject a parsed measurement that its Numeric column cannot store.

    The value is compared after rounding to the column scale, so
    9999999.9996 is rejected for a (10, 3) column.
    """
    number, error = result
    if error:
        return result
    precision, scale = MEASUREMENT_COLUMNS[field]
    limit = Decimal(10) ** (precision - scale)
    if number >= limit or round(number, scale) >= limit:
        return None, f"Must be less than {limit}"
    return number, ""


def parse_date(value: Any, required: bool) -> Tuple[Optional[date], str]:
    """
    Coerce a calendar date.

    Accepts date, datetime (date part) or ISO text "YYYY-MM-DD", optionally
    followed by a "T..." time part which is discarded.

    Returns:
        Tuple of (parsed_value, error_message); error_message is empty on success
    """
    if isinstance(value, str):
        value = value.strip()
    if value is None or value == "":
        if required:
            return None, "This field is required"
        return None, ""
    if isinstance(value, datetime):
        return value.date(), ""
    if isinstance(value, date):
        return value, ""
    if not isinstance(value, str):
        return None, "Must be a date"
    try:
        return date.fromisoformat(value.split("T", 1)[0]), ""
    except ValueError:
        return None, f"Invalid date: {value!r}"


def validate_bobina(candidate: Mapping[str, Any]) -> schemas.BobinaData:
    """
    Validate and coerce a candidate bobina.

    Store-assigned fields (id, owner_id/user_id, created_at, updated_at) and
    derived fields in the candidate are ignored.

    Args:
        candidate: Raw field values keyed by field name or Portuguese column name

    Returns:
        The validated record data

    Raises:
        errors.ValidationError: With a message for every offending field
    """
    data = normalize_keys(candidate)
    clean: Dict[str, Any] = {}
    field_errors: Dict[str, str] = {}

    def collect(field: str, result: Tuple[Any, str]) -> None:
        value, error = result
        if error:
            field_errors[field] = error
        else:
            clean[field] = value

    for field in REQUIRED_TEXT_FIELDS:
        collect(field, parse_required_text(data.get(field)))
    for field in MEASUREMENT_FIELDS:
        collect(field, check_column_range(field, parse_measurement(data.get(field))))
    collect("stock_quantity", parse_stock_quantity(data.get("stock_quantity")))
    collect("entry_date", parse_date(data.get("entry_date"), required=True))
    # No ordering is enforced between expiry_date and entry_date.
    collect("expiry_date", parse_date(data.get("expiry_date"), required=False))
    for field in OPTIONAL_TEXT_FIELDS:
        collect(field, parse_optional_text(data.get(field)))

    if field_errors:
        raise errors.ValidationError(field_errors)
    return schemas.BobinaData(**clean)
