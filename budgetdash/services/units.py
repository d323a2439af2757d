from dataclasses import dataclass, replace
from typing import Iterable

from budgetdash.core.enums import Unit
from budgetdash.core.errors import ValidationError
from budgetdash.services.aggregation import AggregatedRow

# factor to the family's base unit
_MASS = {Unit.KG: 1.0, Unit.MT: 1000.0}


@dataclass(frozen=True)
class Quantity:
    value: float
    unit: Unit

    def to(self, unit: Unit) -> "Quantity":
        unit = Unit(unit)
        if unit is self.unit:
            return self
        if self.unit in _MASS and unit in _MASS:
            return Quantity(self.value * _MASS[self.unit] / _MASS[unit], unit)
        raise ValidationError(f"Cannot convert {self.unit.value} to {unit.value}")


def convert_rows(rows: Iterable[AggregatedRow], unit: Unit | None) -> list[AggregatedRow]:
    if unit is None:
        return list(rows)
    out = []
    for r in rows:
        q = Quantity(r.value, r.unit).to(unit)
        out.append(replace(r, value=q.value, unit=q.unit))
    return out


def target_unit(base: Unit, unit: Unit | None) -> Unit:
    """Unit a report is shown in; raises when ``base`` cannot be converted to it."""
    if unit is None:
        return base
    return Quantity(0.0, base).to(unit).unit
