from models.subject import Subject
from models.timewindow import TimeWindow
from models.session import Exam, Session
from models.assignment import Assignment, CancellationReceipt, Wish
from models.teacher import Teacher
from models.supervision_data import SupervisionData, ConsistencyReport

__all__ = [
    "Subject",
    "TimeWindow",
    "Exam",
    "Session",
    "Assignment",
    "CancellationReceipt",
    "Wish",
    "Teacher",
    "SupervisionData",
    "ConsistencyReport",
]
