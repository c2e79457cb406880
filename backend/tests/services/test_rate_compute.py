"""Unit tests for the purchase settlement engine (pure arithmetic, no DB)."""

from decimal import Decimal, ROUND_HALF_UP

import pytest

from app.services.purchase_rate.errors import DegenerateMeasurementError
from app.services.purchase_rate.rate_compute import (
    ArrivalMeasurement,
    CalculationMethod,
    RateParameters,
    RateType,
    build_amount_formula,
    compute_settlement,
    compute_sute_net_weight,
    compute_total_amount,
    format_number,
)


PER_BAG = CalculationMethod.PER_BAG
PER_QUINTAL = CalculationMethod.PER_QUINTAL


def _params(**overrides) -> RateParameters:
    values = dict(
        base_rate=Decimal("2000"),
        rate_type=RateType.CDL,
        sute=Decimal("2"),
        sute_calculation_method=PER_BAG,
        h=Decimal("-5"),
        b=Decimal("10"),
        b_calculation_method=PER_BAG,
        lf=Decimal("5"),
        lf_calculation_method=PER_BAG,
        egb=Decimal("1"),
    )
    values.update(overrides)
    return RateParameters(**values)


def _unrounded_total(result) -> Decimal:
    return sum(result.component_amounts, Decimal("0"))


# ---------- 标准场景 ----------
def test_reference_scenario():
    m = ArrivalMeasurement(bags=100, net_weight=Decimal("9000"))
    r = compute_settlement(m, _params())

    assert r.sute_amount == Decimal("200")
    assert r.sute_net_weight == Decimal("8800")
    assert abs(r.base_rate_amount - Decimal("234666.6667")) < Decimal("0.0001")
    assert r.h_amount == Decimal("-500")
    assert r.b_amount == Decimal("1000")
    assert r.lf_amount == Decimal("500")
    assert r.egb_amount == Decimal("100")
    assert r.total_amount == Decimal("235966.67")
    assert r.average_rate == Decimal("1966.39")
    assert r.amount_formula == "2000cdl\n+2s/bag-5h+10b+5lf+1egb"


def test_total_matches_component_sum():
    cases = [
        (ArrivalMeasurement(bags=100, net_weight=Decimal("9000")), _params()),
        (
            ArrivalMeasurement(bags=37, net_weight=Decimal("2811.45")),
            _params(
                sute=Decimal("1.5"),
                sute_calculation_method=PER_QUINTAL,
                b_calculation_method=PER_QUINTAL,
                lf=Decimal("3.25"),
                h=Decimal("7"),
            ),
        ),
    ]
    for m, p in cases:
        r = compute_settlement(m, p)
        # total 已四舍五入到分；与未舍入的分项和相差不超过半分
        assert abs(r.total_amount - _unrounded_total(r)) <= Decimal("0.005")


def test_unrounded_total_identity():
    m = ArrivalMeasurement(bags=37, net_weight=Decimal("2811.45"))
    p = _params(
        sute=Decimal("1.5"),
        sute_calculation_method=PER_QUINTAL,
        h=Decimal("-2.75"),
        b=Decimal("4"),
        b_calculation_method=PER_QUINTAL,
        lf=Decimal("3.25"),
        egb=Decimal("0.5"),
    )
    r = compute_settlement(m, p)

    # 按公式逐项手算（未舍入）
    quintals = m.net_weight / 100
    expected = {
        "base_rate_amount": (m.net_weight - 37 * p.sute) / 75 * p.base_rate,
        "h_amount": 37 * p.h,
        "b_amount": quintals * p.b,
        "lf_amount": 37 * p.lf,
        "egb_amount": 37 * p.egb,
        "sute_amount": quintals * p.sute,
    }
    for name, value in expected.items():
        assert abs(getattr(r, name) - value) < Decimal("1e-9"), name

    hand_total = sum(expected.values(), Decimal("0"))
    assert abs(compute_total_amount(*r.component_amounts) - hand_total) < Decimal("1e-9")
    assert r.total_amount == hand_total.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    assert r.average_rate == (hand_total / m.net_weight * 75).quantize(
        Decimal("0.01"), rounding=ROUND_HALF_UP
    )


def test_average_rate_uses_unrounded_total():
    m = ArrivalMeasurement(bags=3, net_weight=Decimal("7"))
    p = _params(base_rate=Decimal("1"), sute=Decimal("0"), h=Decimal("0"), b=Decimal("0"),
                lf=Decimal("0"), egb=Decimal("0"))
    r = compute_settlement(m, p)
    # 7/75 = 0.09333...；average = total / 7 * 75 = 1
    assert r.total_amount == Decimal("0.09")
    assert r.average_rate == Decimal("1.00")


def test_integer_and_string_measurements_are_accepted():
    m = ArrivalMeasurement(bags=100, net_weight="9000")
    r = compute_settlement(m, _params())
    assert r.total_amount == Decimal("235966.67")


# ---------- 计算方式 ----------
def test_per_quintal_methods_use_net_weight():
    m = ArrivalMeasurement(bags=50, net_weight=Decimal("4000"))
    p = _params(
        sute=Decimal("2"),
        sute_calculation_method=PER_QUINTAL,
        b_calculation_method=PER_QUINTAL,
        lf_calculation_method=PER_QUINTAL,
    )
    r = compute_settlement(m, p)
    assert r.sute_amount == Decimal("80")     # 4000/100 × 2
    assert r.b_amount == Decimal("400")       # 4000/100 × 10
    assert r.lf_amount == Decimal("200")      # 4000/100 × 5
    assert r.egb_amount == Decimal("50")      # egb 永远按袋


def test_sute_net_weight_always_uses_per_bag_quantity():
    m = ArrivalMeasurement(bags=50, net_weight=Decimal("4000"))
    per_bag = compute_settlement(m, _params(sute_calculation_method=PER_BAG))
    per_quintal = compute_settlement(m, _params(sute_calculation_method=PER_QUINTAL))

    assert per_bag.sute_net_weight == Decimal("3900")
    assert per_quintal.sute_net_weight == Decimal("3900")
    assert per_bag.base_rate_amount == per_quintal.base_rate_amount
    assert compute_sute_net_weight(m, Decimal("2")) == Decimal("3900")


@pytest.mark.parametrize("bags", [1, 40, 123])
def test_methods_agree_when_net_weight_is_one_quintal_per_bag(bags):
    m = ArrivalMeasurement(bags=bags, net_weight=Decimal(100 * bags))
    by_bag = compute_settlement(
        m, _params(sute_calculation_method=PER_BAG, b_calculation_method=PER_BAG,
                   lf_calculation_method=PER_BAG)
    )
    by_quintal = compute_settlement(
        m, _params(sute_calculation_method=PER_QUINTAL, b_calculation_method=PER_QUINTAL,
                   lf_calculation_method=PER_QUINTAL)
    )
    assert by_bag.sute_amount == by_quintal.sute_amount
    assert by_bag.b_amount == by_quintal.b_amount
    assert by_bag.lf_amount == by_quintal.lf_amount
    assert by_bag.total_amount == by_quintal.total_amount


# ---------- hamali 符号 ----------
@pytest.mark.parametrize("h, prefix", [(Decimal("-3.5"), "-"), (Decimal("4"), "+")])
def test_hamali_sign_propagates(h, prefix):
    m = ArrivalMeasurement(bags=10, net_weight=Decimal("750"))
    r = compute_settlement(m, _params(sute=Decimal("0"), b=Decimal("0"), lf=Decimal("0"),
                                      egb=Decimal("0"), h=h))
    assert (r.h_amount < 0) == (h < 0)
    assert r.amount_formula.split("\n")[1] == f"{prefix}{format_number(abs(h))}h"


# ---------- 退化输入 ----------
@pytest.mark.parametrize("net_weight", [Decimal("0"), Decimal("0.00"), 0])
def test_zero_net_weight_is_rejected(net_weight):
    with pytest.raises(DegenerateMeasurementError):
        compute_settlement(ArrivalMeasurement(bags=10, net_weight=net_weight), _params())


# ---------- 公式字符串 ----------
def test_formula_without_adjustments_is_single_line():
    formula = build_amount_formula(Decimal("2150"), RateType.MDWB)
    assert formula == "2150mdwb"
    assert "\n" not in formula


def test_formula_quintal_sute_label_and_ordering():
    formula = build_amount_formula(
        Decimal("1800.50"),
        RateType.CDWB,
        sute=Decimal("1.25"),
        sute_calculation_method=PER_QUINTAL,
        h=Decimal("3"),
        egb=Decimal("2"),
    )
    assert formula == "1800.5cdwb\n+1.25s/Q+3h+2egb"


def test_formula_keeps_negative_sute_sign():
    formula = build_amount_formula(Decimal("2000"), RateType.MDL, sute=Decimal("-1"))
    assert formula == "2000mdl\n-1s/bag"


def test_formula_is_deterministic():
    args = (Decimal("2000"), RateType.CDL, Decimal("2"), PER_BAG, Decimal("-5"),
            Decimal("10"), Decimal("5"), Decimal("1"))
    assert build_amount_formula(*args) == build_amount_formula(*args)


@pytest.mark.parametrize(
    "value, expected",
    [
        (Decimal("2000"), "2000"),
        (Decimal("2000.00"), "2000"),
        (Decimal("2.50"), "2.5"),
        (Decimal("-5"), "-5"),
        (Decimal("1E+3"), "1000"),
        (Decimal("0.125"), "0.125"),
    ],
)
def test_format_number(value, expected):
    assert format_number(value) == expected
