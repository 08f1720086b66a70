"""
HTTP client for a Supabase (PostgREST) bobinas table.

Implements the RecordStore interface over the REST API of a Supabase project.
Rows on the wire use the Portuguese column names of the bobinas table.
"""
import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional
import httpx

from .. import errors, schemas
from ..config import HTTP_TIMEOUT

logger = logging.getLogger(__name__)

# Record field name -> bobinas table column
COLUMNS = {
    "id": "id",
    "code": "codigo",
    "plastic_type": "tipo_plastico",
    "color": "cor",
    "thickness": "espessura",
    "width": "largura",
    "weight": "peso",
    "stock_quantity": "quantidade_estoque",
    "location": "localizacao",
    "entry_date": "data_entrada",
    "expiry_date": "data_validade",
    "supplier": "fornecedor",
    "notes": "observacoes",
    "photo_url": "foto_url",
    "owner_id": "user_id",
    "created_at": "created_at",
    "updated_at": "updated_at",
}
FIELDS = {column: field for field, column in COLUMNS.items()}


def to_row(data: Dict[str, Any]) -> Dict[str, Any]:
    """Convert record fields to a JSON-ready table row."""
    row = {}
    for field, value in data.items():
        if field not in COLUMNS:
            continue
        if isinstance(value, Decimal):
            value = str(value)
        elif isinstance(value, date):
            value = value.isoformat()
        row[COLUMNS[field]] = value
    return row


def from_row(row: Dict[str, Any]) -> schemas.Bobina:
    """Convert a table row to a Bobina record."""
    data = {FIELDS[column]: value for column, value in row.items() if column in FIELDS}
    return schemas.Bobina(**data)


class SupabaseRecordStore:
    """
    RecordStore backed by PostgREST.

    Args:
        base_url: Supabase project URL
        api_key: Project API key (sent as apikey header)
        table: Table name
        timeout: Request timeout in seconds
        transport: Optional httpx transport (used by tests)
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        table: str = "bobinas",
        timeout: float = HTTP_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.endpoint = f"{base_url.rstrip('/')}/rest/v1/{table}"
        self.api_key = api_key
        self.timeout = timeout
        self.transport = transport

    def _headers(self, representation: bool = False) -> Dict[str, str]:
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
        }
        if representation:
            headers["Prefer"] = "return=representation"
        return headers

    def _request(self, method: str, params: Dict[str, str], json: Any = None, representation: bool = False) -> List[dict]:
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.request(
                    method,
                    self.endpoint,
                    params=params,
                    json=json,
                    headers=self._headers(representation),
                )
        except httpx.HTTPError as e:
            logger.error(f"Record store unreachable ({method} {self.endpoint}): {e}")
            raise errors.TransportError(f"Record store unreachable: {e}") from e

        if response.status_code >= 400:
            self._raise_for_error(response)
        if not response.content:
            return []
        return response.json()

    def _raise_for_error(self, response: httpx.Response) -> None:
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        code = body.get("code")
        message = body.get("message") or response.text
        if response.status_code == 409 or code == errors.UNIQUE_VIOLATION:
            raise errors.UniqueViolation(body.get("details") or code, message)
        logger.error(f"Record store error: HTTP {response.status_code} {message}")
        raise errors.TransportError(f"Record store error (HTTP {response.status_code}): {message}")

    def list_records(self) -> List[schemas.Bobina]:
        rows = self._request("GET", {"select": "*", "order": "created_at.desc"})
        return [from_row(row) for row in rows]

    def get(self, bobina_id: str) -> Optional[schemas.Bobina]:
        rows = self._request("GET", {"select": "*", "id": f"eq.{bobina_id}"})
        return from_row(rows[0]) if rows else None

    def insert(self, data: Dict[str, Any]) -> schemas.Bobina:
        rows = self._request("POST", {}, json=[to_row(data)], representation=True)
        if not rows:
            raise errors.TransportError("Record store returned no row for insert")
        return from_row(rows[0])

    def update(self, bobina_id: str, data: Dict[str, Any]) -> Optional[schemas.Bobina]:
        payload = {k: v for k, v in data.items() if k not in ("id", "owner_id", "created_at")}
        rows = self._request("PATCH", {"id": f"eq.{bobina_id}"}, json=to_row(payload), representation=True)
        return from_row(rows[0]) if rows else None

    def set_photo(self, bobina_id: str, photo_url: Optional[str]) -> Optional[schemas.Bobina]:
        rows = self._request("PATCH", {"id": f"eq.{bobina_id}"}, json={COLUMNS["photo_url"]: photo_url}, representation=True)
        return from_row(rows[0]) if rows else None

    def delete(self, bobina_id: str) -> bool:
        rows = self._request("DELETE", {"id": f"eq.{bobina_id}"}, representation=True)
        return bool(rows)
