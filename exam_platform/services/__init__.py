from exam_platform.services.accounts import AccountService
from exam_platform.services.assignments import AssignmentService
from exam_platform.services.attempts import AttemptTracker
from exam_platform.services.catalog import ExamCatalog, student_view

__all__ = ["AccountService", "AssignmentService", "AttemptTracker", "ExamCatalog", "student_view"]
