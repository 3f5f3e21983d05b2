import pytest
from fastapi.testclient import TestClient

from localretail.main import create_app
from localretail.storage.local_storage import LocalStorage
from localretail.storage.sql_storage import SqlStorage


@pytest.fixture(params=["local", "sql"])
def client(request, tmp_path):
    if request.param == "local":
        storage = LocalStorage(tmp_path / "local_store")
    else:
        storage = SqlStorage(f"sqlite+aiosqlite:///{tmp_path / 'api.db'}")
    with TestClient(create_app(storage)) as test_client:
        yield test_client


def seed_route(client, opening_balance=100):
    product = client.post("/api/v1/products", json={"name": "Milk 1L", "defaultPrice": 25}).json()
    customer = client.post("/api/v1/customers", json={
        "name": "Asha",
        "phone": "9876543210",
        "route": "R001",
        "openingBalance": opening_balance,
    }).json()
    sheet = client.post("/api/v1/sheets", json={"routeId": "R001", "routeName": "Market Route"}).json()
    return product, customer, sheet


def test_root(client):
    assert client.get("/").json() == {"message": "Welcome to the LocalRetail APIs!"}


def test_customer_crud(client):
    response = client.post("/api/v1/customers", json={"name": "Asha", "route": "R001", "openingBalance": 50})
    assert response.status_code == 201
    customer = response.json()
    assert customer["id"] == "100001"
    assert customer["outstandingAmount"] == 50

    response = client.put(f"/api/v1/customers/{customer['id']}", json={"address": "4 Lake View"})
    assert response.status_code == 200
    assert response.json()["address"] == "4 Lake View"

    listing = client.get("/api/v1/customers", params={"route": "R001"}).json()
    assert listing["total"] == 1

    ledger = client.get(f"/api/v1/customers/{customer['id']}/transactions").json()
    assert ledger["total"] == 1
    assert ledger["transactions"][0]["invoiceNumber"] == "INITIAL-100001"

    assert client.get("/api/v1/routes/names").json() == ["R001"]

    assert client.delete(f"/api/v1/customers/{customer['id']}").status_code == 204
    response = client.get(f"/api/v1/customers/{customer['id']}")
    assert response.status_code == 404
    assert response.json()["success"] is False


def test_invalid_payload_is_rejected(client):
    response = client.post("/api/v1/products", json={"name": "Milk", "defaultPrice": -1})
    assert response.status_code == 422


def test_route_crud(client):
    response = client.post("/api/v1/routes", json={"id": "R001", "name": "Market Route", "areas": ["MG Road"]})
    assert response.status_code == 201
    assert client.post("/api/v1/routes", json={"id": "R001", "name": "Again"}).status_code == 400

    response = client.put("/api/v1/routes/R001", json={"isActive": False})
    assert response.json()["isActive"] is False
    assert client.get("/api/v1/routes").json()["total"] == 1


def test_sheet_close_flow(client):
    product, customer, sheet = seed_route(client)
    assert sheet["status"] == "active"
    assert sheet["routeOutstanding"] == 100

    response = client.put(f"/api/v1/sheets/{sheet['id']}/entries", json={
        "deliveryData": {customer["id"]: {product["id"]: {"quantity": 2, "amount": 50}}},
        "amountReceived": {customer["id"]: {"cash": 40, "upi": 10}},
    })
    assert response.status_code == 200
    assert response.json()["amountReceived"][customer["id"]]["total"] == 50

    response = client.post(f"/api/v1/sheets/{sheet['id']}/close")
    assert response.status_code == 200
    result = response.json()
    assert len(result["invoiceNumbers"]) == 1
    assert len(result["paymentIds"]) == 1

    invoice = client.get(f"/api/v1/invoices/{result['invoiceNumbers'][0]}").json()
    assert invoice["status"] == "paid"
    assert invoice["balanceChange"] == 0

    invoices = client.get("/api/v1/invoices", params={"sheetId": sheet["id"]}).json()
    assert invoices["total"] == 1
    assert invoices["totalAmount"] == 50

    transactions = client.get("/api/v1/transactions", params={"sheetId": sheet["id"]}).json()
    assert sorted(t["type"] for t in transactions["transactions"]) == ["payment", "sale"]
    assert transactions["totalBalanceChange"] == 0

    assert client.get(f"/api/v1/customers/{customer['id']}").json()["outstandingAmount"] == 100
    closed = client.get("/api/v1/sheets", params={"status": "closed"}).json()
    assert [s["id"] for s in closed["sheets"]] == [sheet["id"]]

    # closed sheets are immutable
    response = client.post(f"/api/v1/sheets/{sheet['id']}/close")
    assert response.status_code == 409
    response = client.put(f"/api/v1/sheets/{sheet['id']}/entries", json={"notes": "late"})
    assert response.status_code == 409


def test_inconsistent_sheet_returns_422(client):
    _, customer, sheet = seed_route(client)
    client.put(f"/api/v1/sheets/{sheet['id']}/entries", json={
        "amountReceived": {customer["id"]: {"cash": 30, "upi": 20, "total": 60}},
    })

    response = client.post(f"/api/v1/sheets/{sheet['id']}/close")

    assert response.status_code == 422
    body = response.json()
    assert body["details"]["customer_id"] == customer["id"]
    assert body["details"]["expected"] == 50
    assert client.get(f"/api/v1/sheets/{sheet['id']}").json()["status"] == "active"


def test_unknown_sheet_returns_404(client):
    assert client.post("/api/v1/sheets/ROUTE-20250101-000000-R404/close").status_code == 404


def test_duplicate_payment_report(client):
    assert client.get("/api/v1/transactions/duplicate-payments").json() == {
        "duplicatesFound": 0,
        "duplicateIds": [],
    }


def test_company_settings(client):
    assert client.get("/api/v1/settings/company").json()["companyName"] == ""

    response = client.put("/api/v1/settings/company", json={"companyName": "Sunrise Dairy", "email": "hi@sunrise.in"})
    assert response.status_code == 200

    settings = client.get("/api/v1/settings/company").json()
    assert settings["companyName"] == "Sunrise Dairy"
    assert settings["email"] == "hi@sunrise.in"


def test_update_with_null_field_keeps_value(client):
    customer = client.post("/api/v1/customers", json={"name": "Asha", "route": "R001"}).json()

    response = client.put(f"/api/v1/customers/{customer['id']}", json={"name": None, "phone": "9000000000"})

    assert response.status_code == 200
    assert response.json()["name"] == "Asha"
    assert response.json()["phone"] == "9000000000"


def test_sheet_exists(client, monkeypatch):
    monkeypatch.setattr(
        "localretail.services.sheet_service.generate_sheet_id",
        lambda route_id, at=None: f"ROUTE-20250101-080000-{route_id}",
    )
    assert client.get("/api/v1/sheets/exists", params={"routeId": "R001"}).json() == {
        "exists": False,
        "sheet": None,
    }

    _, _, sheet = seed_route(client)

    body = client.get("/api/v1/sheets/exists", params={"routeId": "R001"}).json()
    assert body["exists"] is True
    assert body["sheet"]["id"] == sheet["id"] == "ROUTE-20250101-080000-R001"
    assert client.get("/api/v1/sheets/exists").status_code == 422


def test_manual_payment(client):
    customer = client.post("/api/v1/customers", json={"name": "Asha", "openingBalance": 200}).json()

    response = client.post("/api/v1/transactions/payments", json={
        "customerId": customer["id"],
        "cashAmount": 50,
        "upiAmount": 25,
    })

    assert response.status_code == 201
    payment = response.json()
    assert payment["type"] == "payment"
    assert payment["balanceChange"] == -75
    assert payment["invoiceNumber"].startswith(f"PAY-MANUAL-{customer['id']}-")
    assert client.get(f"/api/v1/customers/{customer['id']}").json()["outstandingAmount"] == 125

    assert client.post("/api/v1/transactions/payments", json={"customerId": customer["id"]}).status_code == 422
    response = client.post("/api/v1/transactions/payments", json={"customerId": "999999", "cashAmount": 5})
    assert response.status_code == 404


def test_manual_invoice(client):
    customer = client.post("/api/v1/customers", json={"name": "Asha"}).json()

    response = client.post("/api/v1/invoices", json={
        "customerId": customer["id"],
        "items": [{"productName": "Milk 1L", "quantity": 4, "price": 25}],
        "cashAmount": 60,
    })

    assert response.status_code == 201
    invoice = response.json()
    assert invoice["status"] == "partial"
    assert invoice["routeId"] == "MANUAL"
    assert invoice["routeName"] == "No route"
    assert invoice["balanceChange"] == 40
    assert client.get(f"/api/v1/invoices/{invoice['invoiceNumber']}").status_code == 200
    assert client.get(f"/api/v1/customers/{customer['id']}").json()["outstandingAmount"] == 40

    response = client.post("/api/v1/invoices", json={
        "customerId": customer["id"],
        "items": [{"productName": "Milk 1L", "quantity": 0, "price": 25}],
    })
    assert response.status_code == 422
