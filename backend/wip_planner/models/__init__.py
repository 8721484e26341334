"""
Database models package for the WIP planner
"""

from .attendance import Attendance, AttendanceStatus
from .bill import Attachment, Bill, BillItem
from .event import Event
from .user import User
from .wip_window import OrgSetting, WipWindow

__all__ = [
    "Attachment",
    "Attendance",
    "AttendanceStatus",
    "Bill",
    "BillItem",
    "Event",
    "OrgSetting",
    "User",
    "WipWindow",
]
