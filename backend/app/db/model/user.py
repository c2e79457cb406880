
from __future__ import annotations
from typing import Optional

from sqlalchemy import Boolean, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column
from app.db.base import Base, TimestampMixin


ROLE_STAFF = "staff"
ROLE_MANAGER = "manager"
ROLE_ADMIN = "admin"
ROLES = (ROLE_STAFF, ROLE_MANAGER, ROLE_ADMIN)


class User(TimestampMixin, Base):

    __tablename__ = "users"

    id:       Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True, index=True)
    username: Mapped[str] = mapped_column(String(64), unique=True, index=True, nullable=False)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    full_name:       Mapped[Optional[str]] = mapped_column(String(128), nullable=True)

    role:      Mapped[str] = mapped_column(String(16), nullable=False, server_default=text("'staff'"))   # staff | manager | admin
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("true"))

