"""
Result object returned by the actions layer.

Every action reports its outcome as an ``ActionResult`` instead of
raising, so the request layer can show ``message`` to the user
directly.  ``error`` is ``None`` on success and otherwise one of
``not_found``, ``unauthorized``, ``invalid_operation`` or
``storage_failure``.  Only the payload field relevant to the action
is filled.
"""

from typing import List, Optional

from pydantic import BaseModel

from .complaint import Complaint
from .notification import UserNotification
from .report import Report, ReportView
from .user import UserProfile


class ActionResult(BaseModel):
    success: bool
    message: str
    error: Optional[str] = None

    user: Optional[UserProfile] = None
    users: Optional[List[UserProfile]] = None
    report: Optional[Report] = None
    reports: Optional[List[Report]] = None
    report_views: Optional[List[ReportView]] = None
    notification: Optional[UserNotification] = None
    notifications: Optional[List[UserNotification]] = None
    count: Optional[int] = None
    complaint: Optional[Complaint] = None
    complaints: Optional[List[Complaint]] = None
    is_admin: Optional[bool] = None
