# 采购结算计算 (purchase settlement engine)

from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Any, Optional
import logging

from app.services.purchase_rate.errors import DegenerateMeasurementError


logger = logging.getLogger(__name__)


# --------- 常量与工具 ----------
QUINTAL_KG = Decimal("100")       # per_quintal 计费基数
STANDARD_LOT_KG = Decimal("75")   # base rate / average rate 的标准单位
ZERO = Decimal("0")

_Q_CENTS = Decimal("0.01")


class RateType(str, Enum):
    CDL = "CDL"
    CDWB = "CDWB"
    MDL = "MDL"
    MDWB = "MDWB"


class CalculationMethod(str, Enum):
    PER_BAG = "per_bag"
    PER_QUINTAL = "per_quintal"


def _d(val: Any) -> Decimal:
    if isinstance(val, Decimal):
        return val
    return Decimal(str(val))


def _quantize(val: Decimal, quantum: Decimal = _Q_CENTS) -> Decimal:
    return val.quantize(quantum, rounding=ROUND_HALF_UP)


def format_number(val: Decimal) -> str:
    """Plain notation without trailing zeros: 2000, 2.5, -5."""
    if val == val.to_integral_value():
        return str(int(val))
    return format(val.normalize(), "f")



# --------- 输入 / 输出模型 ----------
@dataclass(frozen=True)
class ArrivalMeasurement:
    bags: int
    net_weight: Decimal


@dataclass(frozen=True)
class RateParameters:
    base_rate: Decimal
    rate_type: RateType
    b_calculation_method: CalculationMethod
    lf_calculation_method: CalculationMethod
    sute: Decimal = ZERO
    sute_calculation_method: CalculationMethod = CalculationMethod.PER_BAG
    h: Decimal = ZERO
    b: Decimal = ZERO
    lf: Decimal = ZERO
    egb: Decimal = ZERO
    # 仅供编排层查找 arrival；计算本身不使用
    arrival_id: Optional[Any] = None


@dataclass(frozen=True)
class SettlementResult:
    sute_amount: Decimal
    sute_net_weight: Decimal
    base_rate_amount: Decimal
    h_amount: Decimal
    b_amount: Decimal
    lf_amount: Decimal
    egb_amount: Decimal
    total_amount: Decimal       # 2 位小数
    average_rate: Decimal       # 2 位小数
    amount_formula: str

    @property
    def component_amounts(self) -> tuple[Decimal, ...]:
        return (
            self.base_rate_amount,
            self.h_amount,
            self.b_amount,
            self.lf_amount,
            self.egb_amount,
            self.sute_amount,
        )



# --------- 逐项计算 ----------
def compute_method_amount(
    bags: int,
    net_weight: Decimal,
    value: Decimal,
    method: CalculationMethod,
) -> Decimal:
    """per_bag: bags × value；per_quintal: (net_weight / 100) × value"""
    if method == CalculationMethod.PER_QUINTAL:
        return (net_weight / QUINTAL_KG) * value
    return Decimal(bags) * value


def compute_sute_amount(measurement: ArrivalMeasurement, params: RateParameters) -> Decimal:
    return compute_method_amount(
        measurement.bags, measurement.net_weight, params.sute, params.sute_calculation_method
    )


def compute_sute_net_weight(measurement: ArrivalMeasurement, sute: Decimal) -> Decimal:
    """
    Net weight after sute. Always removes bags × sute, whichever method priced
    the sute amount.
    """
    return measurement.net_weight - (Decimal(measurement.bags) * sute)


def compute_base_rate_amount(sute_net_weight: Decimal, base_rate: Decimal) -> Decimal:
    return (sute_net_weight / STANDARD_LOT_KG) * base_rate


def compute_h_amount(bags: int, h: Decimal) -> Decimal:
    # hamali 可为负数（扣减）
    return Decimal(bags) * h


def compute_b_amount(measurement: ArrivalMeasurement, params: RateParameters) -> Decimal:
    return compute_method_amount(
        measurement.bags, measurement.net_weight, params.b, params.b_calculation_method
    )


def compute_lf_amount(measurement: ArrivalMeasurement, params: RateParameters) -> Decimal:
    return compute_method_amount(
        measurement.bags, measurement.net_weight, params.lf, params.lf_calculation_method
    )


def compute_egb_amount(bags: int, egb: Decimal) -> Decimal:
    return Decimal(bags) * egb


def compute_total_amount(*amounts: Decimal) -> Decimal:
    return sum(amounts, ZERO)


def compute_average_rate(total_amount: Decimal, net_weight: Decimal) -> Decimal:
    """Realized rate per 75 kg lot, from the unrounded total."""
    if net_weight == 0:
        raise DegenerateMeasurementError("Arrival net weight is zero", field="netWeight")
    return (total_amount / net_weight) * STANDARD_LOT_KG


# --------- 公式字符串 ----------
"""
    第一行: {baseRate}{rateType 小写}
    第二行: sute, h, b, lf, egb 顺序拼接非零项；全部为零时省略
      - sute / h: 正数带 '+'，负数保留 '-'
      - b / lf / egb: 固定 '+'
"""
def build_amount_formula(
    base_rate: Decimal,
    rate_type: RateType,
    sute: Decimal = ZERO,
    sute_calculation_method: CalculationMethod = CalculationMethod.PER_BAG,
    h: Decimal = ZERO,
    b: Decimal = ZERO,
    lf: Decimal = ZERO,
    egb: Decimal = ZERO,
) -> str:
    rate_type_value = rate_type.value if isinstance(rate_type, RateType) else str(rate_type)
    base_rate_line = f"{format_number(_d(base_rate))}{rate_type_value.lower()}"

    parts: list[str] = []
    sute, h, b, lf, egb = (_d(v) for v in (sute, h, b, lf, egb))

    if sute != 0:
        sute_label = "s/bag" if sute_calculation_method == CalculationMethod.PER_BAG else "s/Q"
        parts.append(f"{_signed(sute)}{sute_label}")
    if h != 0:
        parts.append(f"{_signed(h)}h")
    if b != 0:
        parts.append(f"+{format_number(b)}b")
    if lf != 0:
        parts.append(f"+{format_number(lf)}lf")
    if egb != 0:
        parts.append(f"+{format_number(egb)}egb")

    if not parts:
        return base_rate_line
    return f"{base_rate_line}\n{''.join(parts)}"


def _signed(val: Decimal) -> str:
    text = format_number(val)
    return f"+{text}" if val > 0 else text



# --------- 顶层：一次计算一个 arrival 的结算 ----------
def compute_settlement(measurement: ArrivalMeasurement, params: RateParameters) -> SettlementResult:
    net_weight = _d(measurement.net_weight)
    if net_weight == 0:
        raise DegenerateMeasurementError("Arrival net weight is zero", field="netWeight")
    m = ArrivalMeasurement(bags=int(measurement.bags), net_weight=net_weight)

    sute_amount = compute_sute_amount(m, params)
    sute_net_weight = compute_sute_net_weight(m, params.sute)
    base_rate_amount = compute_base_rate_amount(sute_net_weight, params.base_rate)
    h_amount = compute_h_amount(m.bags, params.h)
    b_amount = compute_b_amount(m, params)
    lf_amount = compute_lf_amount(m, params)
    egb_amount = compute_egb_amount(m.bags, params.egb)

    total_amount = compute_total_amount(
        base_rate_amount, h_amount, b_amount, lf_amount, egb_amount, sute_amount
    )
    average_rate = compute_average_rate(total_amount, m.net_weight)

    amount_formula = build_amount_formula(
        params.base_rate,
        params.rate_type,
        sute=params.sute,
        sute_calculation_method=params.sute_calculation_method,
        h=params.h,
        b=params.b,
        lf=params.lf,
        egb=params.egb,
    )

    logger.debug(
        "settlement computed bags=%s net_weight=%s total=%s average=%s",
        m.bags, m.net_weight, total_amount, average_rate,
    )

    return SettlementResult(
        sute_amount=sute_amount,
        sute_net_weight=sute_net_weight,
        base_rate_amount=base_rate_amount,
        h_amount=h_amount,
        b_amount=b_amount,
        lf_amount=lf_amount,
        egb_amount=egb_amount,
        total_amount=_quantize(total_amount),
        average_rate=_quantize(average_rate),
        amount_formula=amount_formula,
    )
