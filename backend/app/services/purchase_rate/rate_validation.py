# 采购费率参数校验 -> RateParameters

from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Callable, Mapping, Optional

from app.services.purchase_rate.errors import (
    InvalidEnumError,
    InvalidNumberError,
    MissingFieldError,
    NegativeValueError,
    RateValidationError,
)
from app.services.purchase_rate.rate_compute import (
    CalculationMethod,
    RateParameters,
    RateType,
)


REQUIRED_FIELDS = ("arrivalId", "baseRate", "rateType", "bCalculationMethod", "lfCalculationMethod")
NUMERIC_FIELDS = ("sute", "baseRate", "b", "lf", "egb", "h")
NON_NEGATIVE_FIELDS = ("sute", "baseRate", "b", "lf", "egb")       # h 可以为负
METHOD_FIELDS = ("suteCalculationMethod", "bCalculationMethod", "lfCalculationMethod")

DEFAULTS: dict[str, Any] = {
    "sute": 0,
    "suteCalculationMethod": CalculationMethod.PER_BAG.value,
    "h": 0,
    "b": 0,
    "lf": 0,
    "egb": 0,
}

_METHOD_LABELS = {
    "suteCalculationMethod": "Sute",
    "bCalculationMethod": "B",
    "lfCalculationMethod": "LF",
}
_RATE_TYPES = tuple(t.value for t in RateType)
_METHODS = tuple(m.value for m in CalculationMethod)

# 输入列为 Numeric(14, 4)：参数先量化到列精度再参与计算，保证落库值与金额、公式一致
PARAM_QUANTUM = Decimal("0.0001")
PARAM_LIMIT = Decimal("1e10")


@dataclass(frozen=True)
class ValidationResult:
    params: Optional[RateParameters] = None
    error: Optional[RateValidationError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> RateParameters:
        if self.error is not None:
            raise self.error
        if self.params is None:
            raise ValueError("ValidationResult carries neither params nor error")
        return self.params


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _parse_number(value: Any) -> Optional[Decimal]:
    """
    int / float / Decimal / 数字字符串 -> Decimal，量化到 4 位小数。
    非数字、NaN/Infinity、绝对值超出列范围 (>= 1e10) 返回 None
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        num = value
    elif isinstance(value, (int, float)):
        num = Decimal(str(value))
    elif isinstance(value, str):
        if "_" in value:        # Decimal 接受 "1_0"，请求里不算数字
            return None
        try:
            num = Decimal(value.strip())
        except InvalidOperation:
            return None
    else:
        return None
    if not num.is_finite() or abs(num) >= PARAM_LIMIT:
        return None
    num = num.quantize(PARAM_QUANTUM, rounding=ROUND_HALF_UP)
    return num if abs(num) < PARAM_LIMIT else None


def _with_defaults(raw: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(raw)
    for key, default in DEFAULTS.items():
        if _is_blank(merged.get(key)):
            merged[key] = default
    return merged



# --------- 按顺序执行的校验步骤，首个失败即返回 ----------
def check_required(values: Mapping[str, Any]) -> Optional[RateValidationError]:
    missing = [f for f in REQUIRED_FIELDS if _is_blank(values.get(f))]
    if missing:
        return MissingFieldError(
            f"Missing required fields: {', '.join(REQUIRED_FIELDS)}",
            field=missing[0],
        )
    return None


def check_numbers(values: Mapping[str, Any]) -> Optional[RateValidationError]:
    for field in NUMERIC_FIELDS:
        if _parse_number(values.get(field)) is None:
            label = "h (hamali)" if field == "h" else field
            return InvalidNumberError(f"Invalid numeric value for {label}", field=field)
    return None


def check_non_negative(values: Mapping[str, Any]) -> Optional[RateValidationError]:
    for field in NON_NEGATIVE_FIELDS:
        if _parse_number(values.get(field)) < 0:
            return NegativeValueError(f"{field} must be a positive number", field=field)
    return None


def check_enums(values: Mapping[str, Any]) -> Optional[RateValidationError]:
    if values.get("rateType") not in _RATE_TYPES:
        return InvalidEnumError(
            "Invalid rate type. Must be CDL, CDWB, MDL, or MDWB", field="rateType"
        )
    for field in METHOD_FIELDS:
        if values.get(field) not in _METHODS:
            return InvalidEnumError(
                f"Invalid {_METHOD_LABELS[field]} calculation method", field=field
            )
    return None


CHECKS: tuple[Callable[[Mapping[str, Any]], Optional[RateValidationError]], ...] = (
    check_required,
    check_numbers,
    check_non_negative,
    check_enums,
)


def validate_rate_params(raw: Mapping[str, Any]) -> ValidationResult:
    """
    Validate a raw request map (camelCase keys) into RateParameters.

    Checks run in order and stop at the first failure. Arrival existence and
    movement type are not checked here.
    """
    values = _with_defaults(raw or {})
    for check in CHECKS:
        error = check(values)
        if error is not None:
            return ValidationResult(error=error)

    params = RateParameters(
        arrival_id=values["arrivalId"],
        base_rate=_parse_number(values["baseRate"]),
        rate_type=RateType(values["rateType"]),
        sute=_parse_number(values["sute"]),
        sute_calculation_method=CalculationMethod(values["suteCalculationMethod"]),
        h=_parse_number(values["h"]),
        b=_parse_number(values["b"]),
        b_calculation_method=CalculationMethod(values["bCalculationMethod"]),
        lf=_parse_number(values["lf"]),
        lf_calculation_method=CalculationMethod(values["lfCalculationMethod"]),
        egb=_parse_number(values["egb"]),
    )
    return ValidationResult(params=params)
