from exam_platform.storage.repo import (
    AssignmentRepository,
    AttemptRepository,
    ExamRepository,
    RosterRepository,
    Storage,
    UserRepository,
)

__all__ = [
    "AssignmentRepository",
    "AttemptRepository",
    "ExamRepository",
    "RosterRepository",
    "Storage",
    "UserRepository",
]
