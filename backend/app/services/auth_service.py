from typing import Callable, Iterable

from fastapi import Depends, HTTPException, status, Request, Response
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.core.security import verify_password, create_access_token, decode_token
from app.core.config import settings
from app.db.model.user import User
from app.repository.user_repo import get_by_username


COOKIE_NAME = settings.COOKIE_NAME

# Cookie 策略：
# - 线上：Secure=True，SameSite 默认 Strict
# - 本地 http 开发可降级 Secure=False
ENV = getattr(settings, "ENVIRONMENT", "dev")
COOKIE_SECURE_DEFAULT = settings.COOKIE_SECURE or ENV not in ("local", "dev", "test")
COOKIE_DOMAIN = settings.COOKIE_DOMAIN or None
COOKIE_SAMESITE = settings.COOKIE_SAMESITE


def set_auth_cookie(resp: Response, token: str, max_age: int):
    resp.set_cookie(
        key=COOKIE_NAME,
        value=token,
        max_age=max_age,
        httponly=True,
        secure=COOKIE_SECURE_DEFAULT,
        samesite=COOKIE_SAMESITE,
        domain=COOKIE_DOMAIN,
        path="/",
    )


def clear_cookie(response: Response):
    response.delete_cookie(key=COOKIE_NAME, domain=COOKIE_DOMAIN, path="/")


'''
登录：校验用户名密码 -> 签发 JWT -> 写入 HttpOnly Cookie
    - Cookie max_age 与 JWT 过期时间一致（默认 8 小时）
'''
def login_user(response: Response, db: Session, username: str, password: str) -> User:
    user = authenticate_user(db, username, password)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    expires_minutes = int(settings.ACCESS_TOKEN_EXPIRE_MINUTES or 480)
    token = create_access_token(
        {"user_id": user.id, "username": user.username, "role": user.role},
        expires_minutes=expires_minutes,
    )
    set_auth_cookie(response, token, expires_minutes * 60)
    return user


def authenticate_user(db: Session, username: str, password: str) -> User | None:
    user = get_by_username(db, username)
    if not user or not user.is_active:
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user


def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    """从 Cookie 取出 JWT 并校验，回表取用户"""
    raw = request.cookies.get(COOKIE_NAME)
    if not raw:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    payload = decode_token(raw)
    if not payload or "user_id" not in payload:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    user = db.get(User, payload["user_id"])
    if not user or not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User disabled")
    return user


'''
角色校验依赖：
    @router.post("", dependencies=[Depends(require_roles("manager", "admin"))])
'''
def require_roles(*roles: str) -> Callable[..., User]:
    allowed: Iterable[str] = frozenset(roles)

    def _check(current: User = Depends(get_current_user)) -> User:
        if getattr(current, "role", None) not in allowed:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
        return current

    return _check
