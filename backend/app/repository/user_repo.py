from sqlalchemy.orm import Session
from typing import Optional
from app.db.model.user import User, ROLE_STAFF, ROLES


def get_by_username(db: Session, username: str) -> Optional[User]:
    return db.query(User).filter(User.username == username).first()


def create_user(db: Session, username: str, hashed_password: str,
                full_name: str | None = None, role: str = ROLE_STAFF) -> User:
    if role not in ROLES:
        raise ValueError(f"unknown role: {role}")
    user = User(
        username=username,
        hashed_password=hashed_password,
        full_name=full_name,
        role=role,
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user
