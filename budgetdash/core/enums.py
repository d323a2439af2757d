from enum import Enum

from budgetdash.core.errors import ValidationError


class Division(str, Enum):
    FP = "FP"
    HC = "HC"
    TF = "TF"
    SB = "SB"
    HCM = "HCM"

    @property
    def display_name(self) -> str:
        return DIVISION_NAMES[self]

    @classmethod
    def parse(cls, raw) -> "Division":
        # "FP-UAE" / "fp" -> Division.FP
        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, str) or not raw.strip():
            raise ValidationError(f"Unknown division: {raw!r}")
        code = raw.strip().split("-")[0].strip().upper()
        try:
            return cls(code)
        except ValueError:
            raise ValidationError(f"Unknown division: {raw!r}") from None


DIVISION_NAMES = {
    Division.FP: "Flexible Packaging",
    Division.HC: "Harwal Containers",
    Division.TF: "Technical Films",
    Division.SB: "Shopping Bags",
    Division.HCM: "Hygiene & Consumer Materials",
}


class Unit(str, Enum):
    KG = "kg"
    MT = "mt"
    CURRENCY = "currency"


class ValueType(str, Enum):
    KGS = "KGS"
    AMOUNT = "AMOUNT"
    MORM = "MORM"

    @property
    def base_unit(self) -> Unit:
        return Unit.KG if self is ValueType.KGS else Unit.CURRENCY

    @classmethod
    def parse(cls, raw) -> "ValueType":
        if isinstance(raw, cls):
            return raw
        try:
            return cls(str(raw).strip().upper())
        except ValueError:
            raise ValidationError(f"Unknown value type: {raw!r}") from None


class RecordType(str, Enum):
    BUDGET = "BUDGET"
    ACTUAL = "ACTUAL"
    ESTIMATE = "ESTIMATE"

    @property
    def includes(self) -> tuple["RecordType", ...]:
        # full-year estimate = actual months + estimated months
        if self is RecordType.ESTIMATE:
            return (RecordType.ACTUAL, RecordType.ESTIMATE)
        return (self,)

    @classmethod
    def parse(cls, raw) -> "RecordType":
        if isinstance(raw, cls):
            return raw
        s = str(raw).strip().upper()
        if s == "FORECAST":
            s = "ESTIMATE"
        try:
            return cls(s)
        except ValueError:
            raise ValidationError(f"Unknown record type: {raw!r}") from None
