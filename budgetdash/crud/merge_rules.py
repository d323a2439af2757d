from sqlalchemy import func
from sqlalchemy.orm import Session

from budgetdash.core.enums import Division
from budgetdash.core.errors import NotFoundError, ValidationError
from budgetdash.core.logging import logger
from budgetdash.db.models.merge_rule import CustomerMergeRule
from budgetdash.schemas.merge_rules import MergeRuleIn, MergeRuleUpdate
from budgetdash.services.aggregation import MergeRuleSnapshot
from budgetdash.services.etl.utils import canonical_name, clean_name


def normalize_originals(names: list[str]) -> list[str]:
    out: list[str] = []
    seen: set[str] = set()
    for n in names or []:
        display = clean_name(n)
        key = canonical_name(display)
        if key and key not in seen:
            seen.add(key)
            out.append(display)
    return out


def _scope(db: Session, division: Division, sales_rep: str):
    return db.query(CustomerMergeRule).filter(
        CustomerMergeRule.division == division.value,
        func.upper(func.trim(CustomerMergeRule.sales_rep)) == canonical_name(sales_rep),
    )


def _check_overlap(db: Session, rule: CustomerMergeRule) -> None:
    if not rule.is_active:
        return
    mine = {canonical_name(n) for n in rule.original_customers}
    others = _scope(db, Division(rule.division), rule.sales_rep).filter(CustomerMergeRule.is_active.is_(True))
    if rule.id is not None:
        others = others.filter(CustomerMergeRule.id != rule.id)
    for other in others.order_by(CustomerMergeRule.id):
        clash = sorted(mine & {canonical_name(n) for n in other.original_customers})
        if clash:
            raise ValidationError(
                f"Customers already merged into '{other.merged_customer_name}' (rule {other.id})",
                errors=[{"customer": c, "rule_id": other.id} for c in clash],
            )


def list_rules(
    db: Session,
    division: Division,
    sales_rep: str | None = None,
    active: bool | None = None,
) -> list[CustomerMergeRule]:
    q = db.query(CustomerMergeRule).filter(CustomerMergeRule.division == division.value)
    if sales_rep:
        q = _scope(db, division, sales_rep)
    if active is not None:
        q = q.filter(CustomerMergeRule.is_active.is_(active))
    return q.order_by(CustomerMergeRule.is_active.desc(), CustomerMergeRule.merged_customer_name, CustomerMergeRule.id).all()


def get_rule(db: Session, rule_id: int) -> CustomerMergeRule:
    rule = db.query(CustomerMergeRule).filter(CustomerMergeRule.id == rule_id).one_or_none()
    if rule is None:
        raise NotFoundError(f"Merge rule {rule_id} not found")
    return rule


def create_rule(db: Session, data: MergeRuleIn, created_by: str | None = None) -> CustomerMergeRule:
    merged = clean_name(data.merged_customer_name)
    originals = normalize_originals(data.original_customers)
    if not merged or not originals:
        raise ValidationError("merged_customer_name and at least one original customer are required")

    existing = _scope(db, data.division, data.sales_rep).filter(
        func.upper(CustomerMergeRule.merged_customer_name) == canonical_name(merged)
    ).one_or_none()
    if existing is not None:
        raise ValidationError(f"Merge rule '{merged}' already exists (rule {existing.id})")

    rule = CustomerMergeRule(
        division=data.division.value,
        sales_rep=clean_name(data.sales_rep),
        merged_customer_name=merged,
        original_customers=originals,
        is_active=data.is_active,
        note=data.note,
        created_by=created_by,
    )
    _check_overlap(db, rule)
    db.add(rule)
    db.commit()
    db.refresh(rule)
    logger.info("merge_rule_created", rule_id=rule.id, division=rule.division, sales_rep=rule.sales_rep,
                merged=rule.merged_customer_name, originals=len(originals))
    return rule


def update_rule(db: Session, rule: CustomerMergeRule, data: MergeRuleUpdate) -> CustomerMergeRule:
    if data.merged_customer_name is not None:
        merged = clean_name(data.merged_customer_name)
        if not merged:
            raise ValidationError("merged_customer_name must not be empty")
        taken = (
            _scope(db, Division(rule.division), rule.sales_rep)
            .filter(
                func.upper(CustomerMergeRule.merged_customer_name) == canonical_name(merged),
                CustomerMergeRule.id != rule.id,
            )
            .first()
        )
        if taken is not None:
            db.rollback()
            raise ValidationError(f"Merge rule '{merged}' already exists (rule {taken.id})")
        rule.merged_customer_name = merged
    if data.original_customers is not None:
        originals = normalize_originals(data.original_customers)
        if not originals:
            raise ValidationError("at least one original customer is required")
        rule.original_customers = originals
    if data.is_active is not None:
        rule.is_active = data.is_active
    if data.note is not None:
        rule.note = data.note

    try:
        _check_overlap(db, rule)
    except ValidationError:
        db.rollback()
        raise
    db.commit()
    db.refresh(rule)
    logger.info("merge_rule_updated", rule_id=rule.id, is_active=rule.is_active)
    return rule


def set_active(db: Session, rule: CustomerMergeRule, active: bool) -> CustomerMergeRule:
    return update_rule(db, rule, MergeRuleUpdate(is_active=active))


def delete_rule(db: Session, rule: CustomerMergeRule) -> None:
    db.delete(rule)
    db.commit()
    logger.info("merge_rule_deleted", rule_id=rule.id)


def snapshot(rule: CustomerMergeRule) -> MergeRuleSnapshot:
    return MergeRuleSnapshot(
        id=rule.id,
        division=rule.division,
        sales_rep=rule.sales_rep,
        merged_customer_name=rule.merged_customer_name,
        original_customers=tuple(rule.original_customers or ()),
        is_active=bool(rule.is_active),
    )
