from dataclasses import dataclass

from sqlalchemy.orm import Session

from budgetdash.core.enums import Division
from budgetdash.db.models.pricing import ProductGroupPricing
from budgetdash.schemas.pricing import PricingIn
from budgetdash.services.etl.utils import canonical_name, clean_name


@dataclass(frozen=True)
class UnitPrice:
    asp: float | None
    morm: float | None


def list_pricing(db: Session, division: Division, year: int):
    return (
        db.query(ProductGroupPricing)
        .filter(ProductGroupPricing.division == division.value, ProductGroupPricing.year == year)
        .order_by(ProductGroupPricing.product_group)
        .all()
    )


def upsert_pricing(db: Session, data: PricingIn) -> ProductGroupPricing:
    group = clean_name(data.product_group)
    row = None
    for p in list_pricing(db, data.division, data.year):
        if canonical_name(p.product_group) == canonical_name(group):
            row = p
            break
    if row is None:
        row = ProductGroupPricing(division=data.division.value, year=data.year, product_group=group)
        db.add(row)
    row.asp = data.asp
    row.morm = data.morm
    db.commit()
    db.refresh(row)
    return row


def pricing_map(db: Session, division: Division, year: int) -> dict[str, UnitPrice]:
    """canonical product group -> per-kg selling price and margin."""
    return {
        canonical_name(p.product_group): UnitPrice(asp=p.asp, morm=p.morm)
        for p in list_pricing(db, division, year)
    }
