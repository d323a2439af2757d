"""Customer merge + monthly aggregation.

Pure functions over already-loaded facts and merge rules. Callers read both
from the store inside one transaction (see ``services.reports.service``) and
hand the snapshot in; nothing here touches the database or keeps state.

Names are compared in canonical form (trim, collapse whitespace, upper-case).
Displayed names are the trimmed originals; when several spellings fall into
one group the lexicographically smallest wins so output is stable.
"""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

from budgetdash.core.enums import Division, RecordType, Unit, ValueType
from budgetdash.core.errors import ValidationError
from budgetdash.services.etl.utils import canonical_name, clean_name


@dataclass(frozen=True)
class FactRecord:
    division: str
    year: int
    month: int
    sales_rep: str
    customer: str
    country: str
    product_group: str
    value_type: str
    record_type: str
    value: float


@dataclass(frozen=True)
class MergeRuleSnapshot:
    id: int
    division: str
    sales_rep: str
    merged_customer_name: str
    original_customers: tuple[str, ...] = field(default_factory=tuple)
    is_active: bool = True


@dataclass(frozen=True)
class AggregatedRow:
    sales_rep: str
    customer: str
    country: str
    product_group: str
    month: int
    value: float
    unit: Unit
    is_merged: bool = False

    def as_dict(self) -> dict:
        return {
            "sales_rep": self.sales_rep,
            "customer": self.customer,
            "country": self.country,
            "product_group": self.product_group,
            "month": self.month,
            "value": self.value,
            "unit": self.unit.value,
            "is_merged": self.is_merged,
        }


@dataclass(frozen=True)
class MonthlyPoint:
    month: int
    value: float


@dataclass(frozen=True)
class CustomerTotal:
    customer: str
    value: float
    is_merged: bool


MergeIndex = dict[tuple[str, str], MergeRuleSnapshot]


def _code(v) -> str:
    # stored codes may carry labels or odd casing ("FP-UAE", "Amount")
    raw = v.value if isinstance(v, Enum) else str(v)
    return raw.split("-")[0].strip().upper()


def validate_year(year) -> int:
    if isinstance(year, bool) or not isinstance(year, int) or year <= 0:
        raise ValidationError(f"Year must be a positive integer, got {year!r}")
    return year


def build_merge_index(division: Division, rules: Iterable[MergeRuleSnapshot]) -> MergeIndex:
    """(canonical rep, canonical raw customer) -> rule.

    Only active rules of ``division`` are indexed. When two active rules
    claim the same raw name in one scope, the lowest rule id wins.
    """
    index: MergeIndex = {}
    for rule in sorted(rules, key=lambda r: r.id):
        if not rule.is_active:
            continue
        if _code(rule.division) != division.value:
            continue
        rep = canonical_name(rule.sales_rep)
        for raw in rule.original_customers:
            key = (rep, canonical_name(raw))
            if key[1] and key not in index:
                index[key] = rule
    return index


def resolve_customer(index: MergeIndex, sales_rep: str, customer: str) -> tuple[str, bool]:
    rule = index.get((canonical_name(sales_rep), canonical_name(customer)))
    if rule is None:
        return clean_name(customer), False
    return clean_name(rule.merged_customer_name), True


def aggregate(
    division,
    year,
    value_type,
    record_type,
    facts: Iterable[FactRecord],
    rules: Iterable[MergeRuleSnapshot] = (),
) -> list[AggregatedRow]:
    div = Division.parse(division)
    year = validate_year(year)
    vt = ValueType.parse(value_type)
    rt = RecordType.parse(record_type)
    wanted_types = {t.value for t in rt.includes}

    index = build_merge_index(div, rules)

    sums: dict[tuple, float] = defaultdict(float)
    labels: dict[tuple, list[str]] = {}
    merged_keys: set[tuple] = set()

    for f in facts:
        if f.year != year or _code(f.division) != div.value:
            continue
        if _code(f.value_type) != vt.value:
            continue
        if _code(f.record_type).replace("FORECAST", "ESTIMATE") not in wanted_types:
            continue

        customer, is_merged = resolve_customer(index, f.sales_rep, f.customer)
        display = [clean_name(f.sales_rep), customer, clean_name(f.country), clean_name(f.product_group)]
        key = tuple(canonical_name(v) for v in display) + (f.month,)

        sums[key] += f.value
        if is_merged:
            merged_keys.add(key)
        prev = labels.get(key)
        if prev is None:
            labels[key] = display
        else:
            labels[key] = [min(a, b) for a, b in zip(prev, display)]

    rows = [
        AggregatedRow(
            sales_rep=labels[key][0],
            customer=labels[key][1],
            country=labels[key][2],
            product_group=labels[key][3],
            month=key[4],
            value=total,
            unit=vt.base_unit,
            is_merged=key in merged_keys,
        )
        for key, total in sums.items()
    ]
    rows.sort(key=lambda r: (r.sales_rep, r.customer, r.country, r.product_group, r.month))
    return rows


def monthly_totals(rows: Iterable[AggregatedRow]) -> list[MonthlyPoint]:
    totals = [0.0] * 12
    for r in rows:
        totals[r.month - 1] += r.value
    return [MonthlyPoint(month=i + 1, value=v) for i, v in enumerate(totals)]


def customer_totals(rows: Iterable[AggregatedRow]) -> list[CustomerTotal]:
    sums: dict[str, float] = defaultdict(float)
    merged: dict[str, bool] = {}
    for r in rows:
        sums[r.customer] += r.value
        merged[r.customer] = merged.get(r.customer, False) or r.is_merged
    out = [CustomerTotal(customer=c, value=v, is_merged=merged[c]) for c, v in sums.items()]
    out.sort(key=lambda t: (-t.value, t.customer))
    return out
