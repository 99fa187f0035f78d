from tracker.models.order import Order
from tracker.models.user_session import UserSession
from tracker.models.work_log import WorkLogBatch, WorkLogFile

__all__ = [
    "Order",
    "UserSession",
    "WorkLogBatch",
    "WorkLogFile",
]
