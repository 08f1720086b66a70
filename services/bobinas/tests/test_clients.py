import json
from datetime import date
from decimal import Decimal

import httpx
import pytest

from bobinas import errors
from bobinas.clients.record_store_client import SupabaseRecordStore, to_row
from bobinas.clients.storage_client import SupabaseStorage, check_image

BASE_URL = "https://project.supabase.co"

ROW = {
    "id": "6c1f3a9e-0000-4000-8000-000000000001",
    "codigo": "BOB001",
    "tipo_plastico": "PE",
    "cor": "Azul",
    "espessura": 0.05,
    "largura": 1200,
    "peso": 25.5,
    "quantidade_estoque": 4,
    "localizacao": None,
    "data_entrada": "2024-03-01",
    "data_validade": None,
    "fornecedor": "Plastiflex",
    "observacoes": None,
    "foto_url": None,
    "user_id": "user-1",
    "created_at": "2024-03-01T10:00:00+00:00",
}


def record_store(handler):
    return SupabaseRecordStore(BASE_URL, "anon-key", transport=httpx.MockTransport(handler))


def test_list_records_orders_newest_first_and_maps_columns():
    seen = {}

    def handler(request):
        seen["request"] = request
        return httpx.Response(200, json=[ROW])

    bobinas = record_store(handler).list_records()

    request = seen["request"]
    assert request.method == "GET"
    assert request.url.path == "/rest/v1/bobinas"
    assert request.url.params["order"] == "created_at.desc"
    assert request.headers["apikey"] == "anon-key"
    assert bobinas[0].code == "BOB001"
    assert bobinas[0].owner_id == "user-1"
    assert bobinas[0].stock_quantity == 4


def test_insert_sends_portuguese_column_names():
    seen = {}

    def handler(request):
        seen["body"] = json.loads(request.content)
        seen["prefer"] = request.headers.get("prefer")
        return httpx.Response(201, json=[ROW])

    bobina = record_store(handler).insert({
        "code": "BOB001",
        "plastic_type": "PE",
        "thickness": Decimal("0.05"),
        "entry_date": date(2024, 3, 1),
        "owner_id": "user-1",
    })

    assert seen["body"] == [{
        "codigo": "BOB001",
        "tipo_plastico": "PE",
        "espessura": "0.05",
        "data_entrada": "2024-03-01",
        "user_id": "user-1",
    }]
    assert seen["prefer"] == "return=representation"
    assert bobina.id == ROW["id"]


@pytest.mark.parametrize("status_code, body", [
    (409, {"code": "23505", "message": "duplicate key value violates unique constraint \"bobinas_codigo_key\""}),
    (400, {"code": "23505", "message": "duplicate key"}),
])
def test_duplicate_code_is_signalled(status_code, body):
    store = record_store(lambda request: httpx.Response(status_code, json=body))

    with pytest.raises(errors.UniqueViolation):
        store.insert({"code": "BOB001"})


def test_other_errors_are_transport_errors():
    store = record_store(lambda request: httpx.Response(500, json={"message": "boom"}))

    with pytest.raises(errors.TransportError):
        store.list_records()


def test_network_failure_is_transport_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(errors.TransportError):
        record_store(handler).list_records()


def test_update_and_delete_detect_missing_rows():
    store = record_store(lambda request: httpx.Response(200, json=[]))

    assert store.update("missing", {"code": "X"}) is None
    assert store.delete("missing") is False
    assert store.get("missing") is None


def test_update_never_sends_id_or_owner():
    seen = {}

    def handler(request):
        seen["params"] = request.url.params
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=[ROW])

    record_store(handler).update(ROW["id"], {"id": "x", "owner_id": "y", "code": "BOB001"})

    assert seen["params"]["id"] == f"eq.{ROW['id']}"
    assert seen["body"] == {"codigo": "BOB001"}


def test_to_row_ignores_unknown_fields():
    assert to_row({"stock_status": "LOW_STOCK", "code": "A"}) == {"codigo": "A"}


def test_storage_upload_returns_public_url():
    seen = {}

    def handler(request):
        seen["request"] = request
        return httpx.Response(200, json={"Key": "bobina-photos/x.jpg"})

    storage = SupabaseStorage(BASE_URL, "anon-key", transport=httpx.MockTransport(handler))
    url = storage.upload(b"\xff" * 500, "Foto.JPG", "image/jpeg")

    request = seen["request"]
    assert request.method == "POST"
    assert request.url.path.startswith("/storage/v1/object/bobina-photos/")
    assert request.url.path.endswith(".jpg")
    assert request.headers["content-type"] == "image/jpeg"
    object_path = request.url.path.split("/bobina-photos/", 1)[1]
    assert url == f"{BASE_URL}/storage/v1/object/public/bobina-photos/{object_path}"


@pytest.mark.parametrize("response", [
    httpx.Response(400, json={"error": "Invalid key"}),
    httpx.Response(503),
])
def test_storage_failure_is_upload_error(response):
    storage = SupabaseStorage(BASE_URL, "anon-key", transport=httpx.MockTransport(lambda request: response))

    with pytest.raises(errors.UploadError) as excinfo:
        storage.upload(b"\xff" * 500, "foto.png", "image/png")
    assert not excinfo.value.rejected


def test_check_image():
    assert check_image(b"\x00" * 200, "foto.webp", None) == "image/webp"
    assert check_image(b"\x00" * 200, "foto.bin", "image/png") == "image/png"

    for data, filename, content_type in [
        (b"\x00" * 200, "notes.pdf", "application/pdf"),
        (b"\x00" * 200, "notes.txt", "application/octet-stream"),
        (b"\x00" * 10, "foto.jpg", "image/jpeg"),
    ]:
        with pytest.raises(errors.UploadError) as excinfo:
            check_image(data, filename, content_type)
        assert excinfo.value.rejected


def test_set_photo_patches_only_the_photo_column():
    seen = {}

    def handler(request):
        seen["request"] = request
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=[dict(ROW, foto_url="https://cdn.example.com/p.jpg")])

    bobina = record_store(handler).set_photo(ROW["id"], "https://cdn.example.com/p.jpg")

    request = seen["request"]
    assert request.method == "PATCH"
    assert request.url.params["id"] == f"eq.{ROW['id']}"
    assert request.headers["authorization"] == "Bearer anon-key"
    assert seen["body"] == {"foto_url": "https://cdn.example.com/p.jpg"}
    assert bobina.photo_url == "https://cdn.example.com/p.jpg"
    assert bobina.stock_quantity == ROW["quantidade_estoque"]


def test_clearing_photo_sends_null_and_detects_missing_rows():
    bodies = []

    def handler(request):
        bodies.append(json.loads(request.content))
        return httpx.Response(200, json=[])

    assert record_store(handler).set_photo("missing", None) is None
    assert bodies == [{"foto_url": None}]
