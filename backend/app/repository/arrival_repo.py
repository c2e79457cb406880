# arrival 只读查询

from __future__ import annotations
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.db.model.arrival import Arrival


def get_arrival(db: Session, arrival_id: int) -> Optional[Arrival]:
    stmt = select(Arrival).where(Arrival.id == arrival_id)
    return db.scalars(stmt).first()
