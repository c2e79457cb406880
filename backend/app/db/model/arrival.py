# 到货记录（只读：由入库流程写入，这里只取 bags / net_weight / movement_type）

from __future__ import annotations
from decimal import Decimal

from sqlalchemy import Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column
from app.db.base import Base, TimestampMixin


MOVEMENT_PURCHASE = "purchase"


class Arrival(TimestampMixin, Base):

    __tablename__ = "arrivals"

    id:            Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    movement_type: Mapped[str] = mapped_column(String(16), nullable=False, index=True)   # purchase | sale | transfer
    bags:          Mapped[int] = mapped_column(Integer, nullable=False)
    net_weight:    Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)       # kg

