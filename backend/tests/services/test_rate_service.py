"""Orchestration tests: repository calls are monkeypatched, no database needed."""

from decimal import Decimal
from types import SimpleNamespace
from typing import Any, Dict

import pytest

from app.services.purchase_rate import rate_service
from app.services.purchase_rate.errors import (
    ArrivalNotFoundError,
    DegenerateMeasurementError,
    InvalidEnumError,
    NotPurchaseRecordError,
)


RAW = {
    "arrivalId": "7",
    "sute": 2,
    "baseRate": 2000,
    "rateType": "CDL",
    "h": -5,
    "b": 10,
    "bCalculationMethod": "per_bag",
    "lf": 5,
    "lfCalculationMethod": "per_bag",
    "egb": 1,
}


class FakeRepo:
    """记录 upsert 调用，模拟 purchase_rates 表（每个 arrival 一行）"""

    def __init__(self, arrivals: Dict[int, Any]):
        self.arrivals = arrivals
        self.rows: Dict[int, Dict[str, Any]] = {}
        self.upserts: list[Dict[str, Any]] = []

    def get_arrival(self, db, arrival_id):
        return self.arrivals.get(arrival_id)

    def upsert_rate(self, db, arrival_id, fields, *, user_id):
        created = arrival_id not in self.rows
        row = self.rows.setdefault(arrival_id, {"id": len(self.rows) + 1, "created_by": user_id})
        row.update(fields)
        if not created:
            row["updated_by"] = user_id
        self.upserts.append({"arrival_id": arrival_id, "fields": fields, "user_id": user_id})
        return row["id"], created

    def get_by_arrival_id(self, db, arrival_id):
        row = self.rows.get(arrival_id)
        return SimpleNamespace(arrival_id=arrival_id, **row) if row else None


@pytest.fixture()
def repo(monkeypatch) -> FakeRepo:
    fake = FakeRepo({
        7: SimpleNamespace(id=7, movement_type="purchase", bags=100, net_weight=Decimal("9000.00")),
        8: SimpleNamespace(id=8, movement_type="sale", bags=10, net_weight=Decimal("900.00")),
        9: SimpleNamespace(id=9, movement_type="purchase", bags=10, net_weight=Decimal("0")),
    })
    # 注意：monkeypatch 目标是“被测模块里绑定的名字”
    monkeypatch.setattr(rate_service, "get_arrival", fake.get_arrival)
    monkeypatch.setattr(rate_service, "upsert_rate", fake.upsert_rate)
    monkeypatch.setattr(rate_service, "get_by_arrival_id", fake.get_by_arrival_id)
    return fake


def test_first_save_creates_with_creator(repo: FakeRepo):
    outcome = rate_service.save_purchase_rate(None, RAW, user_id=3)

    assert outcome.created is True
    assert outcome.message == "Purchase rate created successfully"
    assert outcome.record.created_by == 3
    assert outcome.record.total_amount == Decimal("235966.67")
    assert outcome.record.average_rate == Decimal("1966.39")
    assert outcome.record.amount_formula == "2000cdl\n+2s/bag-5h+10b+5lf+1egb"
    assert repo.upserts[0]["arrival_id"] == 7
    assert repo.upserts[0]["user_id"] == 3


def test_second_save_replaces_and_records_updater(repo: FakeRepo):
    rate_service.save_purchase_rate(None, RAW, user_id=3)
    outcome = rate_service.save_purchase_rate(None, {**RAW, "h": 0, "egb": 0}, user_id=4)

    assert outcome.created is False
    assert outcome.message == "Purchase rate updated successfully"
    assert outcome.record.created_by == 3
    assert outcome.record.updated_by == 4
    assert outcome.record.h_amount == Decimal("0")
    assert outcome.record.amount_formula == "2000cdl\n+2s/bag+10b+5lf"
    assert len(repo.rows) == 1


def test_row_contains_every_settlement_column(repo: FakeRepo):
    rate_service.save_purchase_rate(None, RAW, user_id=1)
    fields = repo.upserts[0]["fields"]

    assert fields["rate_type"] == "CDL"
    assert fields["sute_calculation_method"] == "per_bag"
    assert fields["base_rate_amount"] == Decimal("234666.6667")
    assert fields["sute_net_weight"] == Decimal("8800.0000")
    assert "created_by" not in fields and "updated_by" not in fields


def test_validation_error_stops_before_lookup(repo: FakeRepo, monkeypatch):
    def _boom(*_a, **_k):
        raise AssertionError("arrival must not be loaded for invalid input")

    monkeypatch.setattr(rate_service, "get_arrival", _boom)
    with pytest.raises(InvalidEnumError):
        rate_service.save_purchase_rate(None, {**RAW, "rateType": "XX"}, user_id=1)
    assert repo.upserts == []


@pytest.mark.parametrize("arrival_id", [404, "abc", True])
def test_unknown_arrival(repo: FakeRepo, arrival_id):
    with pytest.raises(ArrivalNotFoundError):
        rate_service.save_purchase_rate(None, {**RAW, "arrivalId": arrival_id}, user_id=1)
    assert repo.upserts == []


def test_non_purchase_arrival(repo: FakeRepo):
    with pytest.raises(NotPurchaseRecordError):
        rate_service.save_purchase_rate(None, {**RAW, "arrivalId": 8}, user_id=1)
    assert repo.upserts == []


def test_zero_weight_arrival_writes_nothing(repo: FakeRepo):
    with pytest.raises(DegenerateMeasurementError):
        rate_service.save_purchase_rate(None, {**RAW, "arrivalId": 9}, user_id=1)
    assert repo.upserts == []


def test_get_purchase_rate_tolerates_bad_ids(repo: FakeRepo):
    assert rate_service.get_purchase_rate(None, "not-a-number") is None
    assert rate_service.get_purchase_rate(None, "7") is None
    rate_service.save_purchase_rate(None, RAW, user_id=1)
    assert rate_service.get_purchase_rate(None, "7").arrival_id == 7


def test_saved_inputs_agree_with_amounts_and_formula(repo: FakeRepo):
    # 输入先量化到列精度 (4 位)，落库值、金额、公式三者一致
    raw = {**RAW, "sute": 0, "h": "-0.125", "b": "0.12345", "lf": 0, "egb": 0}
    rate_service.save_purchase_rate(None, raw, user_id=1)
    fields = repo.upserts[0]["fields"]

    assert fields["h"] == Decimal("-0.1250")
    assert fields["b"] == Decimal("0.1235")
    assert fields["h_amount"] == fields["h"] * 100 == Decimal("-12.5")
    assert fields["b_amount"] == fields["b"] * 100 == Decimal("12.35")
    assert fields["amount_formula"] == "2000cdl\n-0.125h+0.1235b"
    for value in (fields["sute"], fields["base_rate"], fields["h"], fields["b"], fields["lf"], fields["egb"]):
        assert value == value.quantize(Decimal("0.0001"))
