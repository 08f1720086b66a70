import csv
import io

from bobinas import errors


def create(client, candidate_factory, **overrides):
    response = client.post("/", json=candidate_factory(**overrides))
    assert response.status_code == 201, response.text
    return response.json()


def test_healthz(client):
    assert client.get("/healthz").json() == {"status": "healthy"}


def test_endpoints_require_a_token(client):
    client.headers.pop("Authorization")
    assert client.get("/").status_code in (401, 403)


def test_create_and_read_back(client, candidate_factory, user):
    body = create(client, candidate_factory, stock_quantity="4")

    assert body["owner_id"] == user.id
    assert body["stock_status"] == "LOW_STOCK"
    assert body["stock_label"] == "Estoque baixo"

    fetched = client.get(f"/{body['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["code"] == "BOB001"


def test_create_invalid_returns_field_errors(client, candidate_factory):
    response = client.post("/", json=candidate_factory(code="", stock_quantity=-1))

    assert response.status_code == 422
    assert set(response.json()["detail"]["errors"]) == {"code", "stock_quantity"}


def test_duplicate_code_is_a_conflict(client, candidate_factory):
    create(client, candidate_factory, code="A")

    response = client.post("/", json=candidate_factory(code="A"))

    assert response.status_code == 409
    assert response.json()["detail"]["field"] == "code"
    assert len(client.get("/").json()) == 1


def test_update_and_delete(client, candidate_factory):
    body = create(client, candidate_factory)

    response = client.put(f"/{body['id']}", json=candidate_factory(stock_quantity="0"))
    assert response.status_code == 200
    assert response.json()["stock_status"] == "OUT_OF_STOCK"
    assert response.json()["id"] == body["id"]

    assert client.delete(f"/{body['id']}").status_code == 204
    assert client.get(f"/{body['id']}").status_code == 404
    assert client.delete(f"/{body['id']}").status_code == 404


def test_update_unknown_id_is_not_found(client, candidate_factory):
    response = client.put("/does-not-exist", json=candidate_factory())
    assert response.status_code == 404


def test_list_filters_and_dashboard(client, candidate_factory):
    create(client, candidate_factory, code="A", stock_quantity="0", plastic_type="PE", color="Azul")
    create(client, candidate_factory, code="B", stock_quantity="3", plastic_type="PP", color="Branco", supplier="")
    create(client, candidate_factory, code="C", stock_quantity="10", plastic_type="PE", color="Preto")

    assert [b["code"] for b in client.get("/").json()] == ["C", "B", "A"]
    assert [b["code"] for b in client.get("/", params={"plastic_type": "PE"}).json()] == ["C", "A"]
    assert [b["code"] for b in client.get("/", params={"search": "b", "color": "all"}).json()] == ["B"]

    dashboard = client.get("/dashboard", params={"color": "Azul"}).json()
    assert dashboard["summary"] == {
        "total_records": 3,
        "total_stock": 13,
        "low_stock_count": 1,
        "out_of_stock_count": 1,
    }
    assert [b["code"] for b in dashboard["bobinas"]] == ["A"]
    assert dashboard["options"] == {"plastic_types": ["PE", "PP"], "colors": ["Azul", "Branco", "Preto"]}

    assert client.get("/analytics").json()["total_stock"] == 13
    assert client.get("/filters").json()["colors"] == ["Azul", "Branco", "Preto"]


def test_export_csv(client, candidate_factory):
    create(client, candidate_factory, code="A", stock_quantity="2")
    create(client, candidate_factory, code="B", stock_quantity="8", plastic_type="PVC")

    response = client.get("/export/csv", params={"plastic_type": "PVC"})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    rows = list(csv.DictReader(io.StringIO(response.text)))
    assert [row["code"] for row in rows] == ["B"]
    assert rows[0]["stock_status"] == "IN_STOCK"
    assert rows[0]["expiry_date"] == ""


def test_photo_upload_and_removal(client, candidate_factory, storage):
    body = create(client, candidate_factory)

    response = client.post(
        f"/{body['id']}/photo",
        files={"file": ("roll.jpg", b"\xff" * 300, "image/jpeg")},
    )
    assert response.status_code == 200
    assert response.json()["photo_url"] == storage.url
    assert response.json()["code"] == body["code"]

    response = client.delete(f"/{body['id']}/photo")
    assert response.status_code == 200
    assert response.json()["photo_url"] is None


def test_failed_photo_upload_keeps_previous_photo(client, candidate_factory, storage):
    body = create(client, candidate_factory, photo_url="https://cdn.example.com/old.jpg")
    storage.error = errors.UploadError("storage unavailable")

    response = client.post(
        f"/{body['id']}/photo",
        files={"file": ("roll.jpg", b"\xff" * 300, "image/jpeg")},
    )

    assert response.status_code == 502
    assert client.get(f"/{body['id']}").json()["photo_url"] == "https://cdn.example.com/old.jpg"


def test_register_login_logout(client):
    client.headers.pop("Authorization")

    response = client.post("/auth/register", json={
        "email": "joao@fabrica.com.br",
        "password": "senha-forte",
        "display_name": "João",
    })
    assert response.status_code == 201

    duplicate = client.post("/auth/register", json={
        "email": "joao@fabrica.com.br",
        "password": "outra-senha",
        "display_name": "João",
    })
    assert duplicate.status_code == 409

    assert client.post("/auth/login", json={"email": "joao@fabrica.com.br", "password": "errada"}).status_code == 401

    login = client.post("/auth/login", json={"email": "joao@fabrica.com.br", "password": "senha-forte"})
    assert login.status_code == 200
    headers = {"Authorization": f"Bearer {login.json()['access_token']}"}

    assert client.get("/", headers=headers).status_code == 200
    assert client.post("/auth/logout", headers=headers).status_code == 204
    assert client.get("/", headers=headers).status_code == 401


def test_oversized_stock_is_rejected_and_session_stays_usable(client, candidate_factory):
    response = client.post("/", json=candidate_factory(stock_quantity=str(10 ** 20)))

    assert response.status_code == 422
    assert set(response.json()["detail"]["errors"]) == {"stock_quantity"}
    assert client.get("/").status_code == 200
    create(client, candidate_factory)
