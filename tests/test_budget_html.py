import json

import pytest

from budgetdash.core.errors import ValidationError
from budgetdash.services.etl.parsers.budget_html import parse_budget_html, validate_record


def _meta(**kw):
    meta = {
        "division": "FP",
        "salesRep": "Narek Koroukian",
        "budgetYear": 2026,
        "version": "1.0",
        "dataFormat": "budget_import",
    }
    meta.update(kw)
    return meta


def _html(records, meta=None, kind="SALES_REP_BUDGET", draft=None):
    draft_js = f"const draftMetadata = {json.dumps(draft)};" if draft is not None else ""
    return f"""<!DOCTYPE html>
<!-- IPD_BUDGET_SYSTEM_v1.0 :: TYPE={kind} :: DIVISION=FP -->
<html><body>
<table><tr><td>ACME LLC</td></tr></table>
<script id="savedBudgetData">
  const budgetMetadata = {json.dumps(meta or _meta())};
  const savedBudget = {json.dumps(records)};
  {draft_js}
</script>
</body></html>"""


def _rec(customer="ACME LLC", month=1, value=500, country="UAE", group="Plain"):
    return {"customer": customer, "country": country, "productGroup": group, "month": month, "value": value}


def test_parse_valid_file():
    parsed = parse_budget_html(_html([_rec(), _rec(month=2, value=250.5)]))
    assert parsed.division == "FP"
    assert parsed.sales_rep == "Narek Koroukian"
    assert parsed.year == 2026
    assert parsed.total_records == 2
    assert parsed.issues == []
    assert parsed.records[1] == {"customer": "ACME LLC", "country": "UAE", "productGroup": "Plain", "month": 2, "value": 250.5}


def test_assignments_outside_tagged_script_are_found():
    html = _html([_rec()]).replace('id="savedBudgetData"', 'id="other"')
    assert len(parse_budget_html(html).records) == 1


def test_missing_data_is_rejected():
    with pytest.raises(ValidationError, match="Missing budget metadata"):
        parse_budget_html("<html><body>nothing here</body></html>")


def test_divisional_file_is_rejected():
    with pytest.raises(ValidationError, match="divisional budget"):
        parse_budget_html(_html([_rec()], kind="DIVISIONAL_BUDGET"))


def test_draft_is_rejected():
    with pytest.raises(ValidationError, match="draft"):
        parse_budget_html(_html([_rec()], draft={"isDraft": True}))
    # a finalized draft marker is fine
    assert parse_budget_html(_html([_rec()], draft={"isDraft": False})).records


@pytest.mark.parametrize("meta", [
    _meta(budgetYear=2019),
    _meta(budgetYear="2026"),
    _meta(version="2.0"),
    _meta(dataFormat="other"),
    _meta(salesRep="  "),
])
def test_bad_metadata_is_rejected(meta):
    with pytest.raises(ValidationError, match="File validation failed"):
        parse_budget_html(_html([_rec()], meta=meta))


def test_expected_division_and_rep_must_match():
    html = _html([_rec()])
    assert parse_budget_html(html, expected_division="fp", expected_sales_rep=" narek koroukian ").records
    with pytest.raises(ValidationError, match="Division mismatch"):
        parse_budget_html(html, expected_division="HC")
    with pytest.raises(ValidationError, match="Sales rep mismatch"):
        parse_budget_html(html, expected_sales_rep="Sofia")


def test_empty_and_too_many_records():
    with pytest.raises(ValidationError, match="empty"):
        parse_budget_html(_html([]))
    with pytest.raises(ValidationError, match="Too many records"):
        parse_budget_html(_html([_rec()] * 10_001))


def test_few_invalid_records_are_skipped():
    records = [_rec(month=m % 12 + 1) for m in range(19)] + [_rec(value=-5)]
    parsed = parse_budget_html(_html(records))
    assert len(parsed.records) == 19
    assert len(parsed.issues) == 1
    assert parsed.issues[0].row_num == 20
    assert "Negative" in parsed.issues[0].message


def test_mostly_invalid_file_is_rejected():
    records = [_rec() for _ in range(8)] + [_rec(value=0), _rec(month=13)]
    with pytest.raises(ValidationError, match="Too many invalid records") as e:
        parse_budget_html(_html(records))
    assert len(e.value.errors) == 2


@pytest.mark.parametrize("record, problem", [
    (_rec(customer=""), "customer"),
    (_rec(country=None), "country"),
    (_rec(group=" "), "product group"),
    (_rec(month=0), "month"),
    (_rec(month=1.5), "month"),
    (_rec(month=float("inf")), "month"),
    (_rec(value=None), "Missing value"),
    (_rec(value="500"), "must be a number"),
    (_rec(value=True), "must be a number"),
    (_rec(value=float("nan")), "must be a number"),
    (_rec(value=0), "Zero"),
    (_rec(value=2e9), "too large"),
    ("not a record", "not an object"),
])
def test_validate_record(record, problem):
    problems = validate_record(record)
    assert any(problem in p for p in problems)


def test_validate_record_accepts_good_record():
    assert validate_record(_rec(value=1e9)) == []


def test_non_finite_month_is_skipped_not_fatal():
    records = [_rec(month=m % 12 + 1) for m in range(19)] + [_rec(month=float("inf"))]
    parsed = parse_budget_html(_html(records))
    assert len(parsed.records) == 19
    assert parsed.issues[0].row_num == 20
    assert "month" in parsed.issues[0].message
