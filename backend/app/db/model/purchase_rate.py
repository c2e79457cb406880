# 采购费率结算结果表（每个 arrival 至多一行）

from __future__ import annotations
from decimal import Decimal
from typing import Optional

from sqlalchemy import ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.db.base import Base, TimestampMixin
from app.db.model.user import User


class PurchaseRate(TimestampMixin, Base):

    __tablename__ = "purchase_rates"

    id:         Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    arrival_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("arrivals.id", ondelete="CASCADE"), unique=True, nullable=False
    )   # 唯一约束保证并发 upsert 不会产生重复行

    # —— 输入参数 ——
    sute:                    Mapped[Decimal] = mapped_column(Numeric(14, 4), nullable=False, default=0)
    sute_calculation_method: Mapped[str]     = mapped_column(String(16), nullable=False, default="per_bag")
    base_rate:               Mapped[Decimal] = mapped_column(Numeric(14, 4), nullable=False)
    rate_type:               Mapped[str]     = mapped_column(String(8), nullable=False)          # CDL | CDWB | MDL | MDWB
    h:                       Mapped[Decimal] = mapped_column(Numeric(14, 4), nullable=False, default=0)   # hamali，可为负
    b:                       Mapped[Decimal] = mapped_column(Numeric(14, 4), nullable=False, default=0)
    b_calculation_method:    Mapped[str]     = mapped_column(String(16), nullable=False)
    lf:                      Mapped[Decimal] = mapped_column(Numeric(14, 4), nullable=False, default=0)
    lf_calculation_method:   Mapped[str]     = mapped_column(String(16), nullable=False)
    egb:                     Mapped[Decimal] = mapped_column(Numeric(14, 4), nullable=False, default=0)

    # —— 计算结果 ——
    sute_amount:      Mapped[Optional[Decimal]] = mapped_column(Numeric(14, 4))
    sute_net_weight:  Mapped[Optional[Decimal]] = mapped_column(Numeric(14, 4))
    base_rate_amount: Mapped[Optional[Decimal]] = mapped_column(Numeric(14, 4))
    h_amount:         Mapped[Optional[Decimal]] = mapped_column(Numeric(14, 4))
    b_amount:         Mapped[Optional[Decimal]] = mapped_column(Numeric(14, 4))
    lf_amount:        Mapped[Optional[Decimal]] = mapped_column(Numeric(14, 4))
    egb_amount:       Mapped[Optional[Decimal]] = mapped_column(Numeric(14, 4))
    total_amount:     Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    average_rate:     Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    amount_formula:   Mapped[str]     = mapped_column(Text, nullable=False)

    # —— 审计 ——
    created_by: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("users.id"), nullable=True)
    updated_by: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("users.id"), nullable=True)


    creator: Mapped[Optional[User]] = relationship(User, foreign_keys=[created_by], lazy="joined")
    updater: Mapped[Optional[User]] = relationship(User, foreign_keys=[updated_by], lazy="joined")
