# 采购费率结果相关的 DB 操作

from __future__ import annotations
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Optional, Tuple

import sqlalchemy as sa
from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.orm import Session

from app.db.model.purchase_rate import PurchaseRate
from app.services.purchase_rate.rate_compute import RateParameters, SettlementResult


_Q_AMOUNT = Decimal("0.0001")
_Q_CENTS = Decimal("0.01")


# 量化函数：按列精度量化，和 DB Numeric 保持一致
def _quantize(val: Optional[Decimal], quantum: Decimal) -> Optional[Decimal]:
    if val is None:
        return None
    return val.quantize(quantum, rounding=ROUND_HALF_UP)


def build_rate_row(params: RateParameters, result: SettlementResult) -> Dict[str, Any]:
    """RateParameters + SettlementResult -> purchase_rates 列字典（不含 arrival_id / 审计列）"""
    return {
        "sute": params.sute,
        "sute_calculation_method": params.sute_calculation_method.value,
        "base_rate": params.base_rate,
        "rate_type": params.rate_type.value,
        "h": params.h,
        "b": params.b,
        "b_calculation_method": params.b_calculation_method.value,
        "lf": params.lf,
        "lf_calculation_method": params.lf_calculation_method.value,
        "egb": params.egb,
        "sute_amount": _quantize(result.sute_amount, _Q_AMOUNT),
        "sute_net_weight": _quantize(result.sute_net_weight, _Q_AMOUNT),
        "base_rate_amount": _quantize(result.base_rate_amount, _Q_AMOUNT),
        "h_amount": _quantize(result.h_amount, _Q_AMOUNT),
        "b_amount": _quantize(result.b_amount, _Q_AMOUNT),
        "lf_amount": _quantize(result.lf_amount, _Q_AMOUNT),
        "egb_amount": _quantize(result.egb_amount, _Q_AMOUNT),
        "total_amount": _quantize(result.total_amount, _Q_CENTS),
        "average_rate": _quantize(result.average_rate, _Q_CENTS),
        "amount_formula": result.amount_formula,
    }


# ---------- Query ----------
def get_by_arrival_id(db: Session, arrival_id: int) -> Optional[PurchaseRate]:
    """creator / updater 通过 joined relationship 一并加载"""
    stmt = (
        select(PurchaseRate)
        .where(PurchaseRate.arrival_id == arrival_id)
        .execution_options(populate_existing=True)   # expire_on_commit=False，upsert 后需刷新已加载对象
    )
    return db.scalars(stmt).unique().first()


# ---------- Mutations ----------
"""
    单语句 upsert：INSERT ... ON CONFLICT (arrival_id) DO UPDATE
      - 插入时写 created_by；冲突更新时只写 updated_by，created_by 保持原值
      - 所有计算列整行覆盖（每次重算，不做增量）
      - 依赖 arrival_id 唯一约束，由 PostgreSQL 串行化同一 arrival 的并发写
    返回 (row_id, created)
"""
def upsert_rate(
    db: Session,
    arrival_id: int,
    fields: Dict[str, Any],
    *,
    user_id: Optional[int],
) -> Tuple[int, bool]:

    insert_row: Dict[str, Any] = {"arrival_id": arrival_id, **fields}
    insert_row["created_by"] = user_id

    stmt = insert(PurchaseRate).values(insert_row)
    excluded = stmt.excluded

    set_updates: Dict[str, Any] = {c: getattr(excluded, c) for c in fields.keys()}
    set_updates["updated_by"] = user_id
    set_updates["updated_at"] = sa.func.now()

    upsert_stmt = stmt.on_conflict_do_update(
        index_elements=[PurchaseRate.arrival_id],
        set_=set_updates,
    ).returning(
        PurchaseRate.id,
        sa.literal_column("(xmax = 0)").label("inserted"),   # xmax = 0 表示本次是 INSERT
    )

    try:
        row = db.execute(upsert_stmt).one()
        db.commit()
    except Exception:
        db.rollback()
        raise

    return row.id, bool(row.inserted)
