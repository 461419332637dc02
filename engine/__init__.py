"""Zuweisungs-Engine: Konfliktprüfung, Eignung und Ledger."""

from .eligibility import Verdict, EligibilityReport, evaluate, explain, eligible_teachers
from .errors import (
    LedgerError,
    IneligibleError,
    DuplicateWishError,
    WishNotFoundError,
    NotAssignedError,
    UnknownTeacherError,
    UnknownSessionError,
    InvalidRequiredCountError,
    InvalidQuotaError,
)
from .ledger import AssignmentLedger, PairState
from .policies import ExamCountNeedsPolicy, SurveillanceQuotaPolicy

__all__ = [
    "Verdict",
    "EligibilityReport",
    "evaluate",
    "explain",
    "eligible_teachers",
    "LedgerError",
    "IneligibleError",
    "DuplicateWishError",
    "WishNotFoundError",
    "NotAssignedError",
    "UnknownTeacherError",
    "UnknownSessionError",
    "InvalidRequiredCountError",
    "InvalidQuotaError",
    "AssignmentLedger",
    "PairState",
    "ExamCountNeedsPolicy",
    "SurveillanceQuotaPolicy",
]
