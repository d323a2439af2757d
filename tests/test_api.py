import io
import json

import openpyxl
import pytest

from budgetdash.core.enums import Division, RecordType, ValueType
from budgetdash.core.errors import StoreUnavailableError
from budgetdash.crud.facts import fact_values, upsert_facts
from budgetdash.crud.users import create_user
from budgetdash.db.models.facts import SalesFact
from budgetdash.db.session import engine
from budgetdash.schemas.admin import UserCreateIn
from budgetdash.services.reports.service import customer_report


def _seed_facts(db, rows, value_type=ValueType.KGS, record_type=RecordType.ACTUAL):
    upsert_facts(db, [
        fact_values(
            division=Division.FP, year=2025, month=month, sales_rep=rep, customer=customer,
            country="UAE", product_group="Plain", value_type=value_type, record_type=record_type, value=value,
        )
        for rep, customer, month, value in rows
    ])


def _rule(**kw):
    body = {
        "division": "FP",
        "sales_rep": "Narek",
        "merged_customer_name": "ACME Group",
        "original_customers": ["ACME LLC", "Acme LLC", "ACME L.L.C."],
    }
    body.update(kw)
    return body


def test_healthz(client):
    assert client.get("/healthz").json() == {"status": "ok", "env": "test"}


def test_divisions(client):
    codes = [d["code"] for d in client.get("/divisions").json()]
    assert codes == ["FP", "HC", "TF", "SB", "HCM"]


def test_login_and_me(client, db):
    create_user(db, UserCreateIn(login="manager1", password="secret1", role="Manager"))

    bad = client.post("/auth/login", json={"login": "manager1", "password": "wrong"})
    assert bad.status_code == 401

    r = client.post("/auth/login", json={"login": "manager1", "password": "secret1"})
    assert r.status_code == 200
    assert r.json()["token_type"] == "bearer"
    assert r.json()["role"] == "Manager"


def test_admin_creates_users(client):
    assert client.post("/admin/users", json={"login": "rep1", "password": "secret1", "role": "SalesRep"}).status_code == 422
    r = client.post("/admin/users", json={"login": "rep1", "password": "secret1", "role": "SalesRep", "sales_rep_name": " Narek  K "})
    assert r.status_code == 200
    assert r.json()["role"] == "SalesRep"
    assert r.json()["sales_rep_name"] == "Narek K"
    assert client.post("/admin/users", json={"login": "rep1", "password": "secret1"}).status_code == 409
    assert client.post("/admin/users", json={"login": "rep2", "password": "secret1", "role": "Boss"}).status_code == 422
    assert [u["login"] for u in client.get("/admin/users").json()] == ["rep1"]


def test_merge_rule_lifecycle(client):
    r = client.post("/merge-rules", json=_rule())
    assert r.status_code == 201
    rule = r.json()
    assert rule["original_customers"] == ["ACME LLC", "ACME L.L.C."]
    assert rule["created_by"] == "tester"

    # same raw customer in a second active rule of the scope
    clash = client.post("/merge-rules", json=_rule(merged_customer_name="Other", original_customers=["acme llc"]))
    assert clash.status_code == 400
    assert clash.json()["errors"] == [{"customer": "ACME LLC", "rule_id": rule["id"]}]

    dup = client.post("/merge-rules", json=_rule(original_customers=["Zeta"]))
    assert dup.status_code == 400

    assert client.post(f"/merge-rules/{rule['id']}/deactivate").json()["is_active"] is False
    other = client.post("/merge-rules", json=_rule(merged_customer_name="Other", original_customers=["acme llc"]))
    assert other.status_code == 201
    # reactivating now overlaps with the new rule
    assert client.post(f"/merge-rules/{rule['id']}/activate").status_code == 400
    assert client.get(f"/merge-rules/{rule['id']}").json()["is_active"] is False

    r = client.put(f"/merge-rules/{rule['id']}", json={"original_customers": ["ACME FZE"], "is_active": True})
    assert r.status_code == 200
    assert r.json()["original_customers"] == ["ACME FZE"]

    listed = client.get("/merge-rules", params={"division": "FP", "sales_rep": "narek", "active": True}).json()
    assert sorted(x["merged_customer_name"] for x in listed) == ["ACME Group", "Other"]

    assert client.delete(f"/merge-rules/{rule['id']}").json() == {"status": "ok"}
    assert client.get(f"/merge-rules/{rule['id']}").status_code == 404
    assert client.get("/merge-rules", params={"division": "XX"}).status_code == 400


def test_merge_rule_rename_to_taken_name_is_rejected(client):
    alpha = client.post("/merge-rules", json=_rule(merged_customer_name="Alpha", original_customers=["A1"])).json()
    beta = client.post("/merge-rules", json=_rule(merged_customer_name="Beta", original_customers=["B1"])).json()

    r = client.put(f"/merge-rules/{beta['id']}", json={"merged_customer_name": " alpha "})
    assert r.status_code == 400
    assert f"rule {alpha['id']}" in r.json()["detail"]
    assert client.get(f"/merge-rules/{beta['id']}").json()["merged_customer_name"] == "Beta"

    # keeping its own name is not a clash
    r = client.put(f"/merge-rules/{beta['id']}", json={"merged_customer_name": "BETA"})
    assert r.status_code == 200
    assert r.json()["merged_customer_name"] == "BETA"


def test_customer_report_applies_active_rules(client, db):
    _seed_facts(db, [
        ("Narek", "ACME LLC", 1, 500),
        ("Narek", "Acme LLC ", 1, 300),
        ("Narek", "Beta", 2, 1000),
        ("Sofia", "ACME LLC", 1, 50),
    ])
    client.post("/merge-rules", json=_rule(original_customers=["ACME LLC"]))

    params = {"division": "FP", "year": 2025, "value_type": "KGS", "record_type": "ACTUAL"}
    body = client.get("/reports/customers", params=params).json()
    assert body["unit"] == "kg"
    assert [(r["sales_rep"], r["customer"], r["month"], r["value"], r["is_merged"]) for r in body["rows"]] == [
        ("Narek", "ACME Group", 1, 800.0, True),
        ("Narek", "Beta", 2, 1000.0, False),
        ("Sofia", "ACME LLC", 1, 50.0, False),
    ]

    in_mt = client.get("/reports/customers", params={**params, "sales_rep": "narek", "unit": "mt"}).json()
    assert in_mt["unit"] == "mt"
    assert [r["value"] for r in in_mt["rows"]] == [0.8, 1.0]

    monthly = client.get("/reports/monthly", params=params).json()
    assert [p["value"] for p in monthly["series"][:3]] == [850.0, 1000.0, 0.0]


def test_report_rejects_bad_input(client):
    base = {"division": "FP", "year": 2025, "value_type": "AMOUNT", "record_type": "ACTUAL"}
    assert client.get("/reports/customers", params={**base, "division": "XX"}).status_code == 400
    assert client.get("/reports/customers", params={**base, "year": 0}).status_code == 400
    assert client.get("/reports/customers", params={**base, "unit": "mt"}).status_code == 400
    assert client.get("/reports/customers", params={**base, "unit": "litres"}).status_code == 400
    empty = client.get("/reports/customers", params=base).json()
    assert empty["rows"] == []


def test_unreadable_store_is_reported_as_unavailable(client, db):
    SalesFact.__table__.drop(bind=engine)
    with pytest.raises(StoreUnavailableError):
        customer_report(db, "FP", 2025, "KGS", "ACTUAL")
    db.rollback()

    params = {"division": "FP", "year": 2025, "value_type": "KGS", "record_type": "ACTUAL"}
    r = client.get("/reports/customers", params=params)
    assert r.status_code == 503
    assert "unavailable" in r.json()["detail"]


def test_merge_preview(client, db):
    _seed_facts(db, [("Narek", "ACME LLC", 1, 500), ("Narek", "Acme L.L.C.", 2, 300), ("Narek", "Beta", 1, 9)],
                value_type=ValueType.AMOUNT)
    r = client.post("/merge-rules/preview", json={
        "division": "FP",
        "sales_rep": "Narek",
        "year": 2025,
        "merged_customer_name": "Beta",
        "original_customers": ["acme llc", "ACME L.L.C.", "Missing Co"],
        "months": [1],
    })
    assert r.status_code == 200
    assert r.json() == {
        "total_originals_value": 500.0,
        "unique_originals_count": 1,
        "originals_found": ["ACME LLC"],
        "merged_exists_in_data": True,
        "unit": "currency",
    }


def test_pricing_and_budget_save(client):
    r = client.put("/pricing", json={"division": "FP", "year": 2025, "product_group": "Plain", "asp": 10, "morm": 3})
    assert r.status_code == 200
    assert [p["product_group"] for p in client.get("/pricing", params={"division": "FP", "year": 2025}).json()] == ["Plain"]

    r = client.post("/budgets", json={
        "division": "FP",
        "budgetYear": 2026,
        "salesRep": "Narek",
        "records": [
            {"customer": "ACME LLC", "country": "UAE", "productGroup": "Plain", "month": 1, "value": 2000},
            {"customer": "ACME LLC", "country": "UAE", "productGroup": "Plain", "month": 2, "value": "bad"},
        ],
    })
    assert r.status_code == 200
    body = r.json()
    assert body["records_inserted"]["total"] == 3
    assert body["skipped_records"] == 1
    assert body["totals"]["amount"] == 20000.0

    summary = client.get("/reports/budget-summary", params={"division": "FP", "year": 2026}).json()
    assert summary["records"] == 3
    assert summary["totals"] == {"mt": 2.0, "amount": 20000.0, "morm": 6000.0}
    assert summary["customers"] == [{"customer": "ACME LLC", "value": 2.0, "is_merged": False}]


def test_budget_html_upload(client):
    meta = {"division": "FP", "salesRep": "Narek", "budgetYear": 2026, "version": "1.0", "dataFormat": "budget_import"}
    records = [{"customer": "ACME LLC", "country": "UAE", "productGroup": "Plain", "month": m, "value": 100} for m in range(1, 13)]
    html = (
        "<!-- IPD_BUDGET_SYSTEM_v1.0 :: TYPE=SALES_REP_BUDGET :: -->\n"
        f'<script id="savedBudgetData">const budgetMetadata = {json.dumps(meta)};\n'
        f"const savedBudget = {json.dumps(records)};</script>"
    )
    files = {"file": ("BUDGET_FP_Narek_2026.html", html.encode(), "text/html")}

    r = client.post("/budgets/upload-html", params={"division": "FP"}, files=files)
    assert r.status_code == 200
    assert r.json()["records_inserted"]["kgs"] == 12

    wrong = client.post("/budgets/upload-html", params={"division": "HC"}, files=files)
    assert wrong.status_code == 400
    assert "Division mismatch" in wrong.json()["detail"]

    txt = client.post("/budgets/upload-html", files={"file": ("budget.txt", b"x", "text/plain")})
    assert txt.status_code == 400


def test_post_fact_upserts(client, db):
    fact = {"division": "FP", "year": 2025, "month": 4, "sales_rep": "Narek", "customer": "Beta",
            "country": "UAE", "product_group": "Plain", "value_type": "KGS", "value": 10}
    assert client.post("/facts", json=fact).status_code == 200
    assert client.post("/facts", json={**fact, "value": 25}).status_code == 200
    rows = client.get("/reports/customers", params={"division": "FP", "year": 2025, "value_type": "KGS"}).json()["rows"]
    assert [(r["month"], r["value"]) for r in rows] == [(4, 25.0)]
    assert client.post("/facts", json={**fact, "month": 13}).status_code == 422


def test_customer_export(client, db):
    _seed_facts(db, [("Narek", "ACME LLC", 1, 500), ("Narek", "ACME LLC", 3, 250)])
    r = client.get("/reports/customers/export", params={"division": "FP", "year": 2025, "value_type": "KGS"})
    assert r.status_code == 200

    wb = openpyxl.load_workbook(io.BytesIO(r.content))
    rows = list(wb.active.iter_rows(values_only=True))
    assert rows[0][:5] == ("sales_rep", "customer", "country", "product_group", "Jan")
    assert rows[0][-1] == "Total"
    assert rows[1][-1] == 750


def test_me_returns_current_user(client):
    body = client.get("/auth/me").json()
    assert (body["login"], body["role"]) == ("tester", "Admin")


def test_sales_rep_can_only_save_own_budget(client):
    from budgetdash.core.deps import get_current_user
    from budgetdash.db.models.user import User
    from budgetdash.main import app

    app.dependency_overrides[get_current_user] = lambda: User(
        id=2, login="narek", role="SalesRep", sales_rep_name="Narek", is_active=True
    )
    record = {"customer": "ACME LLC", "country": "UAE", "productGroup": "Plain", "month": 1, "value": 5}

    other = client.post("/budgets", json={"division": "FP", "budgetYear": 2026, "salesRep": "Sofia", "records": [record]})
    assert other.status_code == 403
    own = client.post("/budgets", json={"division": "FP", "budgetYear": 2026, "salesRep": "NAREK", "records": [record]})
    assert own.status_code == 200
    # SalesRep is not an admin role
    assert client.put("/pricing", json={"division": "FP", "year": 2025, "product_group": "Plain", "asp": 1}).status_code == 403


def test_delete_import_run_removes_its_facts(client, db):
    from budgetdash.crud.imports import get_or_create_import_run, set_import_status

    run, _ = get_or_create_import_run(db, "FP", "a.xlsx", "deadbeef")
    upsert_facts(db, [fact_values(
        division=Division.FP, year=2025, month=1, sales_rep="Narek", customer="ACME LLC", country="UAE",
        product_group="Plain", value_type=ValueType.KGS, record_type=RecordType.ACTUAL, value=1, import_run_id=run.id,
    )])

    assert client.delete(f"/imports/{run.id}").status_code == 409
    set_import_status(db, run.id, "success", rows_loaded=1)

    r = client.delete(f"/imports/{run.id}")
    assert r.json() == {"status": "ok", "facts_deleted": 1}
    assert client.get("/imports", params={"division": "FP"}).json() == []
    assert client.delete(f"/imports/{run.id}").status_code == 404
