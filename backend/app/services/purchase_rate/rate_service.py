# 采购费率编排：校验 -> 取 arrival -> 计算 -> 审计标记 -> upsert

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Mapping, Optional
import logging

from sqlalchemy.orm import Session

from app.db.model.arrival import MOVEMENT_PURCHASE
from app.db.model.purchase_rate import PurchaseRate
from app.repository.arrival_repo import get_arrival
from app.repository.purchase_rate_repo import build_rate_row, get_by_arrival_id, upsert_rate
from app.services.purchase_rate.errors import ArrivalNotFoundError, NotPurchaseRecordError
from app.services.purchase_rate.rate_compute import (
    ArrivalMeasurement,
    RateParameters,
    SettlementResult,
    compute_settlement,
)
from app.services.purchase_rate.rate_validation import validate_rate_params


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuditedSettlement:
    """计算结果 + 操作人；审计身份由编排层附加，计算引擎不感知"""
    arrival_id: int
    params: RateParameters
    result: SettlementResult
    actor_id: Optional[int]

    def to_row(self) -> dict[str, Any]:
        return build_rate_row(self.params, self.result)


@dataclass(frozen=True)
class SaveOutcome:
    created: bool
    record: PurchaseRate

    @property
    def message(self) -> str:
        if self.created:
            return "Purchase rate created successfully"
        return "Purchase rate updated successfully"


def _coerce_arrival_id(value: Any) -> int:
    if isinstance(value, bool):
        raise ArrivalNotFoundError("Purchase record not found", field="arrivalId")
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        raise ArrivalNotFoundError("Purchase record not found", field="arrivalId") from None


def load_measurement(db: Session, arrival_id: int) -> ArrivalMeasurement:
    """arrival 必须存在且为 purchase 记录"""
    arrival = get_arrival(db, arrival_id)
    if arrival is None:
        raise ArrivalNotFoundError("Purchase record not found", field="arrivalId")
    if arrival.movement_type != MOVEMENT_PURCHASE:
        raise NotPurchaseRecordError("Rates can only be added to purchase records", field="arrivalId")
    return ArrivalMeasurement(bags=int(arrival.bags), net_weight=arrival.net_weight)


def stamp_audit(
    arrival_id: int,
    params: RateParameters,
    result: SettlementResult,
    actor_id: Optional[int],
) -> AuditedSettlement:
    return AuditedSettlement(arrival_id=arrival_id, params=params, result=result, actor_id=actor_id)


def save_purchase_rate(
    db: Session,
    raw: Mapping[str, Any],
    *,
    user_id: Optional[int],
) -> SaveOutcome:
    """
    Create or fully replace the purchase rate of one arrival.

    Raises RateValidationError subclasses, ArrivalNotFoundError,
    NotPurchaseRecordError or DegenerateMeasurementError; nothing is written
    when any of them is raised.
    """
    params = validate_rate_params(raw).unwrap()
    arrival_id = _coerce_arrival_id(params.arrival_id)

    measurement = load_measurement(db, arrival_id)
    result = compute_settlement(measurement, params)
    audited = stamp_audit(arrival_id, params, result, user_id)

    _, created = upsert_rate(db, audited.arrival_id, audited.to_row(), user_id=audited.actor_id)

    record = get_by_arrival_id(db, arrival_id)
    if record is None:
        raise RuntimeError(f"failed to upsert purchase rate for arrival {arrival_id}")

    logger.info(
        "purchase rate %s arrival_id=%s user_id=%s total=%s average=%s",
        "created" if created else "updated",
        arrival_id, user_id, result.total_amount, result.average_rate,
    )
    return SaveOutcome(created=created, record=record)


def get_purchase_rate(db: Session, arrival_id: Any) -> Optional[PurchaseRate]:
    try:
        key = _coerce_arrival_id(arrival_id)
    except ArrivalNotFoundError:
        return None
    return get_by_arrival_id(db, key)
