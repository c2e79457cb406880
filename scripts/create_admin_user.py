import argparse
import getpass
import logging

from app.core.logging import configure_logging
from app.core.security import get_password_hash
from app.db.model.user import ROLES, ROLE_ADMIN
from app.db.session import session_scope
from app.repository.user_repo import get_by_username, create_user


# 在容器里运行一次：python -m scripts.create_admin_user --username admin --role admin
# （PYTHONPATH 指向 backend/，保证能 import app）

logger = logging.getLogger(__name__)


def main():
    configure_logging()
    parser = argparse.ArgumentParser(description="Create a back-office user")
    parser.add_argument("--username", default="admin")
    parser.add_argument("--full-name", default="Admin")
    parser.add_argument("--role", choices=ROLES, default=ROLE_ADMIN)
    args = parser.parse_args()

    password = getpass.getpass(f"Password for {args.username}: ")
    if not password:
        parser.error("password must not be empty")

    with session_scope() as db:
        if get_by_username(db, args.username):
            logger.info("user %s exists", args.username)
            return
        create_user(db, args.username, get_password_hash(password),
                    full_name=args.full_name, role=args.role)
        logger.info("user %s created (role=%s)", args.username, args.role)


if __name__ == "__main__":
    main()
