
# 聚合导入所有模型，供 Alembic 发现

from .user import User
from .arrival import Arrival
from .purchase_rate import PurchaseRate

__all__ = [
    "User", "Arrival", "PurchaseRate",
]
