from __future__ import annotations

from fastapi import Depends, Request

from exam_platform.services import AccountService, AssignmentService, AttemptTracker, ExamCatalog
from exam_platform.settings import Settings
from exam_platform.storage.inmemory import InMemoryStorage
from exam_platform.storage.mongo import MongoStorage
from exam_platform.storage.repo import Storage


def build_storage(settings: Settings) -> Storage:
    backend = (settings.storage_backend or "inmemory").lower()
    if backend == "mongo":
        return MongoStorage(settings.mongodb_uri, settings.mongodb_db)
    if backend != "inmemory":
        raise ValueError(f"unknown storage backend: {settings.storage_backend}")
    return InMemoryStorage()


def get_storage(request: Request) -> Storage:
    return request.app.state.storage


def get_catalog(storage: Storage = Depends(get_storage)) -> ExamCatalog:
    return ExamCatalog(storage.exams)


def get_tracker(storage: Storage = Depends(get_storage)) -> AttemptTracker:
    return AttemptTracker(ExamCatalog(storage.exams), storage.attempts)


def get_accounts(storage: Storage = Depends(get_storage)) -> AccountService:
    return AccountService(storage.users, storage.rosters)


def get_assignments(storage: Storage = Depends(get_storage)) -> AssignmentService:
    catalog = ExamCatalog(storage.exams)
    return AssignmentService(
        catalog, AttemptTracker(catalog, storage.attempts), storage.assignments, storage.rosters, storage.users
    )
