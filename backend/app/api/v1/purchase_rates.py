# 采购费率接口 -> 前端到货/采购页面调用

from __future__ import annotations
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional
import logging

from fastapi import APIRouter, Body, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from sqlalchemy.orm import Session

from app.core.config import settings
from app.db.session import get_db
from app.db.model.user import User
from app.services.auth_service import get_current_user, require_roles
from app.services.purchase_rate.errors import (
    ArrivalNotFoundError,
    DegenerateMeasurementError,
    NotPurchaseRecordError,
    PurchaseRateError,
    RateValidationError,
)
from app.services.purchase_rate.rate_service import get_purchase_rate, save_purchase_rate


logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/purchase-rates",
    tags=["purchase-rates"],
    dependencies=[Depends(get_current_user)],
)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UserBrief(_CamelModel):
    username: str
    role: str


class PurchaseRateOut(_CamelModel):
    id: int
    arrival_id: int

    sute: float
    sute_calculation_method: str
    base_rate: float
    rate_type: str
    h: float
    b: float
    b_calculation_method: str
    lf: float
    lf_calculation_method: str
    egb: float

    sute_amount: Optional[float] = None
    sute_net_weight: Optional[float] = None
    base_rate_amount: Optional[float] = None
    h_amount: Optional[float] = None
    b_amount: Optional[float] = None
    lf_amount: Optional[float] = None
    egb_amount: Optional[float] = None
    total_amount: float
    average_rate: float
    amount_formula: str

    created_by: Optional[int] = None
    updated_by: Optional[int] = None
    creator: Optional[UserBrief] = None
    updater: Optional[UserBrief] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class PurchaseRateSaved(_CamelModel):
    message: str
    purchase_rate: PurchaseRateOut


class PurchaseRateFetched(_CamelModel):
    purchase_rate: Optional[PurchaseRateOut] = None


# 错误类型 -> HTTP 状态码
_ERROR_STATUS: tuple[tuple[type[PurchaseRateError], int], ...] = (
    (RateValidationError, status.HTTP_400_BAD_REQUEST),
    (ArrivalNotFoundError, status.HTTP_404_NOT_FOUND),
    (NotPurchaseRecordError, status.HTTP_400_BAD_REQUEST),
    (DegenerateMeasurementError, 422),
)


@router.post("", response_model=PurchaseRateSaved)
def upsert_purchase_rate(
    payload: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    current: User = Depends(require_roles(*settings.PURCHASE_RATE_WRITE_ROLES)),
):
    """有则整行重算覆盖，无则新建；仅 manager / admin 可写"""
    try:
        outcome = save_purchase_rate(db, payload, user_id=current.id)
    except PurchaseRateError as exc:
        logger.info("purchase rate rejected: %s (field=%s)", exc.message, exc.field)
        raise HTTPException(status_code=_status_for(exc), detail=exc.message) from exc
    except Exception as exc:
        logger.exception("Create/update purchase rate error")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save purchase rate",
        ) from exc

    return PurchaseRateSaved(message=outcome.message, purchase_rate=_serialize(outcome.record))


@router.get("/{arrival_id}", response_model=PurchaseRateFetched)
def fetch_purchase_rate(arrival_id: str, db: Session = Depends(get_db)):
    try:
        row = get_purchase_rate(db, arrival_id)
    except Exception as exc:
        logger.exception("Fetch purchase rate error")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch purchase rate",
        ) from exc

    return PurchaseRateFetched(purchase_rate=_serialize(row) if row is not None else None)




def _status_for(exc: PurchaseRateError) -> int:
    for exc_type, code in _ERROR_STATUS:
        if isinstance(exc, exc_type):
            return code
    return status.HTTP_400_BAD_REQUEST


def _decimal_to_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, (Decimal, int, float)):
        return float(value)
    return None


def _format_datetime(value: Any) -> Optional[str]:
    if isinstance(value, datetime):
        return value.replace(microsecond=0).isoformat()
    return None


def _user_brief(user: Any) -> Optional[UserBrief]:
    if user is None:
        return None
    return UserBrief(username=user.username, role=user.role)


def _serialize(row: Any) -> PurchaseRateOut:
    return PurchaseRateOut(
        id=row.id,
        arrival_id=row.arrival_id,

        sute=_decimal_to_float(row.sute),
        sute_calculation_method=row.sute_calculation_method,
        base_rate=_decimal_to_float(row.base_rate),
        rate_type=row.rate_type,
        h=_decimal_to_float(row.h),
        b=_decimal_to_float(row.b),
        b_calculation_method=row.b_calculation_method,
        lf=_decimal_to_float(row.lf),
        lf_calculation_method=row.lf_calculation_method,
        egb=_decimal_to_float(row.egb),

        sute_amount=_decimal_to_float(row.sute_amount),
        sute_net_weight=_decimal_to_float(row.sute_net_weight),
        base_rate_amount=_decimal_to_float(row.base_rate_amount),
        h_amount=_decimal_to_float(row.h_amount),
        b_amount=_decimal_to_float(row.b_amount),
        lf_amount=_decimal_to_float(row.lf_amount),
        egb_amount=_decimal_to_float(row.egb_amount),
        total_amount=_decimal_to_float(row.total_amount),
        average_rate=_decimal_to_float(row.average_rate),
        amount_formula=row.amount_formula,

        created_by=row.created_by,
        updated_by=row.updated_by,
        creator=_user_brief(getattr(row, "creator", None)),
        updater=_user_brief(getattr(row, "updater", None)),
        created_at=_format_datetime(getattr(row, "created_at", None)),
        updated_at=_format_datetime(getattr(row, "updated_at", None)),
    )
