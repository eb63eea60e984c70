from .members import Member, SessionToken
from .organization import Department, LeadershipTerm, Archive
from .events import Event, EVENT_STATUSES
from .attendance import AttendanceToken, AttendanceRecord, ATTENDANCE_STATUSES, SOURCE_TOKEN, SOURCE_MANUAL
from .cash import CashPeriod, CashTransaction, CashReport, TRANSACTION_KINDS

__all__ = [
    'Member', 'SessionToken',
    'Department', 'LeadershipTerm', 'Archive',
    'Event', 'EVENT_STATUSES',
    'AttendanceToken', 'AttendanceRecord', 'ATTENDANCE_STATUSES', 'SOURCE_TOKEN', 'SOURCE_MANUAL',
    'CashPeriod', 'CashTransaction', 'CashReport', 'TRANSACTION_KINDS',
]
