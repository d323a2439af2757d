import re

import pytest

from budgetdash.core.enums import Division, RecordType, ValueType
from budgetdash.core.errors import ValidationError
from budgetdash.crud.facts import query_facts
from budgetdash.crud.pricing import upsert_pricing
from budgetdash.schemas.pricing import PricingIn
from budgetdash.services.budget import _upload_name, sanitize_records, save_sales_rep_budget


def _rec(customer="ACME LLC", month=1, value=1000, group="Plain"):
    return {"customer": customer, "country": "UAE", "productGroup": group, "month": month, "value": value}


def _budget(db, value_type=None, rep=None):
    return query_facts(db, Division.FP, 2026, value_type=value_type, record_type=RecordType.BUDGET, sales_rep=rep).all()


def test_save_derives_amount_and_morm_from_last_year_pricing(db):
    upsert_pricing(db, PricingIn(division="FP", year=2025, product_group="PLAIN", asp=8.5, morm=2.0))

    result = save_sales_rep_budget(db, "FP", 2026, "Narek", [_rec(), _rec(month=2, value=500), _rec(group="Printed")])

    assert result.pricing_year == 2025
    assert result.records_processed == 3
    assert result.records_inserted == {"kgs": 3, "amount": 2, "morm": 2, "total": 7}
    assert result.totals == {"mt": 2.5, "amount": 12750.0, "morm": 3000.0}
    assert len(result.warnings) == 1

    amounts = {(f.month, f.product_group): f.value for f in _budget(db, ValueType.AMOUNT)}
    assert amounts == {(1, "Plain"): 8500.0, (2, "Plain"): 4250.0}
    assert {f.unit for f in _budget(db, ValueType.AMOUNT)} == {"currency"}
    assert {f.unit for f in _budget(db, ValueType.KGS)} == {"kg"}


def test_save_replaces_previous_budget_of_the_rep(db):
    save_sales_rep_budget(db, "FP", 2026, "Narek", [_rec(), _rec(customer="Beta")])
    save_sales_rep_budget(db, "FP", 2026, "Sofia", [_rec()])

    result = save_sales_rep_budget(db, "FP", 2026, " narek ", [_rec(value=10)])

    assert result.records_deleted == 2
    narek = _budget(db, rep="Narek")
    assert [(f.customer, f.value) for f in narek] == [("ACME LLC", 10.0)]
    assert len(_budget(db, rep="Sofia")) == 1


def test_duplicate_records_last_one_wins(db):
    result = save_sales_rep_budget(db, "FP", 2026, "Narek", [_rec(value=1), _rec(customer=" ACME  LLC", value=7)])
    assert result.records_inserted["kgs"] == 1
    assert [f.value for f in _budget(db)] == [7.0]


def test_invalid_records_are_skipped_and_reported(db):
    result = save_sales_rep_budget(db, "FP", 2026, "Narek", [_rec(), _rec(value=-1), _rec(month=13)])
    assert result.skipped_records == 2
    assert [e["row_num"] for e in result.errors] == [2, 3]


def test_all_invalid_is_rejected(db):
    with pytest.raises(ValidationError, match="All records were invalid"):
        save_sales_rep_budget(db, "FP", 2026, "Narek", [_rec(value="x")])
    with pytest.raises(ValidationError):
        save_sales_rep_budget(db, "XX", 2026, "Narek", [_rec()])
    with pytest.raises(ValidationError):
        save_sales_rep_budget(db, "FP", 2026, "  ", [_rec()])
    assert _budget(db) == []


def test_sanitize_records_messages():
    valid, issues = sanitize_records([
        {"customer": "A", "country": "", "productGroup": "P", "month": 1, "value": 1},
        {"customer": "A", "country": "UAE", "productGroup": "P", "month": True, "value": 1},
        {"customer": "A", "country": "UAE", "productGroup": "P", "month": 3, "value": "1,000"},
    ])
    assert valid == [{"customer": "A", "country": "UAE", "productGroup": "P", "month": 3, "value": 1000.0}]
    assert [i.column for i in issues] == ["country", "month"]


def test_zero_values_are_skipped_like_html_uploads(db):
    result = save_sales_rep_budget(db, "FP", 2026, "Narek", [_rec(), _rec(month=2, value=0), _rec(month=3, value="0")])
    assert result.skipped_records == 2
    assert all("Zero value" in e["message"] for e in result.errors)
    assert [f.month for f in _budget(db, value_type=ValueType.KGS)] == [1]


def test_upload_name_is_stamped_in_utc():
    name = _upload_name(Division.FP, "Narek K.", 2026)
    assert re.fullmatch(r"LIVE_BUDGET_FP_Narek_K__2026_\d{4}-\d\d-\d\dT\d\d-\d\d-\d\d\.json", name)
