# 环境变量和配置
# pydantic‑settings 读取 .env = core/config.py

from typing import Optional, Tuple
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# 本机直接跑 uvicorn 时（不走 Docker），读取 backend/.env

class Settings(BaseSettings):

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_prefix="",
        case_sensitive=False,
    )

    # ========= project config =========
    PROJECT_NAME: str = "Purchase Rate Service"
    ENVIRONMENT: str = "dev"
    API_PREFIX: str = "/api/v1"


    # ========= 登录 / 鉴权 / CORS =========
    SECRET_KEY: str = Field("CHANGE_ME", alias="SECRET_KEY")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(480, alias="ACCESS_TOKEN_EXPIRE_MINUTES")   # 8h
    COOKIE_NAME: str = Field("access_token", alias="COOKIE_NAME")
    COOKIE_DOMAIN: Optional[str] = Field(None, alias="COOKIE_DOMAIN")
    COOKIE_SECURE: bool = Field(False, alias="COOKIE_SECURE")                            # 生产时改 True
    COOKIE_SAMESITE: str = Field("Strict", alias="COOKIE_SAMESITE")
    BACKEND_CORS_ORIGINS: str = "http://localhost:5173"

    # 允许创建/修改采购费率的角色
    PURCHASE_RATE_WRITE_ROLES: Tuple[str, ...] = Field(("manager", "admin"), alias="PURCHASE_RATE_WRITE_ROLES")


    # ========= Database =========
    # - 容器内默认连 docker 网络里的 "db" 服务
    # - 本机工具（psql/脚本）可使用 DATABASE_URL_LOCAL（指向 localhost）
    DATABASE_URL: str = Field(
        default="postgresql+psycopg://stock_user:stock_pass@db:5432/stock_dev",
        alias="DATABASE_URL"
    )
    DATABASE_URL_LOCAL: Optional[str] = Field(
        default=None,
        alias="DATABASE_URL_LOCAL",
        description="Optional local URL for tools (e.g. psql). Typically '...@localhost:5432/stock_dev'"
    )
    DB_POOL_SIZE: int = Field(10, ge=1, alias="DB_POOL_SIZE")
    DB_MAX_OVERFLOW: int = Field(20, ge=0, alias="DB_MAX_OVERFLOW")


settings = Settings()  # 只从环境读取（含 .env）
