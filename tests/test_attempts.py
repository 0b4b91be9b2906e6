import asyncio

import pytest

from exam_platform.auth.jwt_handler import TokenPayload
from exam_platform.errors import AlreadyCompleted, Forbidden, NoActiveAttempt, NotFound
from exam_platform.models import Attempt, AttemptStatus, ExamCreate, ExamFlagsUpdate, ScoreResult
from exam_platform.services import AttemptTracker, ExamCatalog
from exam_platform.storage.inmemory import InMemoryAttemptRepository, InMemoryStorage
from tests.factories import SAMPLE_EXAM

TEACHER = TokenPayload(user_id="teacher-1", email="teacher@school.edu", role="teacher")
STUDENT = TokenPayload(user_id="student-1", email="student@school.edu", role="student")
OTHER = TokenPayload(user_id="student-2", email="other@school.edu", role="student")
ADMIN = TokenPayload(user_id="admin-1", email="admin@school.edu", role="admin")


class InterleavingAttemptRepository(InMemoryAttemptRepository):
    """Yields to the event loop after each lookup so concurrent calls overlap."""

    def __init__(self) -> None:
        super().__init__()
        self.in_progress_reads = 0

    async def latest_for(self, exam_id, user_id):
        attempt = await super().latest_for(exam_id, user_id)
        if attempt is not None and attempt.status == AttemptStatus.in_progress:
            self.in_progress_reads += 1
        await asyncio.sleep(0)
        return attempt


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def catalog(storage):
    return ExamCatalog(storage.exams)


@pytest.fixture
def tracker(storage, catalog):
    return AttemptTracker(catalog, storage.attempts)


async def create_exam(catalog, published=True, active=True):
    exam = await catalog.create_exam(TEACHER, ExamCreate.model_validate(SAMPLE_EXAM))
    await catalog.update_flags(exam.exam_id, TEACHER, ExamFlagsUpdate(is_published=published, is_active=active))
    return exam.exam_id


@pytest.mark.asyncio
async def test_start_creates_in_progress_attempt(tracker, catalog):
    exam_id = await create_exam(catalog)

    attempt = await tracker.start_or_resume_attempt(exam_id, STUDENT.user_id)

    assert attempt.status == AttemptStatus.in_progress
    assert attempt.exam_id == exam_id
    assert attempt.user_id == STUDENT.user_id
    assert attempt.score is None
    assert attempt.completed_at is None


@pytest.mark.asyncio
async def test_resume_returns_same_attempt(tracker, catalog, storage):
    exam_id = await create_exam(catalog)

    first = await tracker.start_or_resume_attempt(exam_id, STUDENT.user_id)
    second = await tracker.start_or_resume_attempt(exam_id, STUDENT.user_id)

    assert first.attempt_id == second.attempt_id
    assert len(await storage.attempts.list_for_user(STUDENT.user_id)) == 1


@pytest.mark.asyncio
async def test_attempts_are_per_user(tracker, catalog):
    exam_id = await create_exam(catalog)

    mine = await tracker.start_or_resume_attempt(exam_id, STUDENT.user_id)
    theirs = await tracker.start_or_resume_attempt(exam_id, OTHER.user_id)

    assert mine.attempt_id != theirs.attempt_id


@pytest.mark.asyncio
async def test_submit_scores_and_completes(tracker, catalog, storage):
    exam_id = await create_exam(catalog)
    attempt = await tracker.start_or_resume_attempt(exam_id, STUDENT.user_id)

    result = await tracker.submit_attempt(exam_id, STUDENT.user_id, {"q1": "o1", "q2": ["o3"]})

    assert result == ScoreResult(score=50.0, total_questions=2, correct_answers=1)
    stored = await storage.attempts.get(attempt.attempt_id)
    assert stored.status == AttemptStatus.completed
    assert stored.score == 50.0
    assert stored.completed_at is not None
    assert stored.completed_at >= stored.started_at
    assert {a.question_id for a in stored.answers} == {"q1", "q2"}


@pytest.mark.asyncio
async def test_start_after_completion_is_rejected(tracker, catalog):
    exam_id = await create_exam(catalog)
    await tracker.start_or_resume_attempt(exam_id, STUDENT.user_id)
    await tracker.submit_attempt(exam_id, STUDENT.user_id, {})

    with pytest.raises(AlreadyCompleted):
        await tracker.start_or_resume_attempt(exam_id, STUDENT.user_id)


@pytest.mark.asyncio
async def test_second_submit_is_rejected_and_keeps_first_result(tracker, catalog, storage):
    exam_id = await create_exam(catalog)
    attempt = await tracker.start_or_resume_attempt(exam_id, STUDENT.user_id)
    await tracker.submit_attempt(exam_id, STUDENT.user_id, {"q1": "o1", "q2": ["o3"]})

    with pytest.raises(NoActiveAttempt):
        await tracker.submit_attempt(exam_id, STUDENT.user_id, {"q1": "o1", "q2": ["o3", "o4"]})

    stored = await storage.attempts.get(attempt.attempt_id)
    assert stored.score == 50.0
    assert len(stored.answers) == 2


@pytest.mark.asyncio
async def test_submit_without_attempt_is_rejected(tracker, catalog):
    exam_id = await create_exam(catalog)

    with pytest.raises(NoActiveAttempt):
        await tracker.submit_attempt(exam_id, STUDENT.user_id, {"q1": "o1"})


@pytest.mark.asyncio
async def test_concurrent_submits_score_once(catalog):
    attempts = InterleavingAttemptRepository()
    tracker = AttemptTracker(catalog, attempts)
    exam_id = await create_exam(catalog)
    attempt = await tracker.start_or_resume_attempt(exam_id, STUDENT.user_id)
    attempts.in_progress_reads = 0

    outcomes = await asyncio.gather(
        tracker.submit_attempt(exam_id, STUDENT.user_id, {"q1": "o1"}),
        tracker.submit_attempt(exam_id, STUDENT.user_id, {"q1": "o1"}),
        return_exceptions=True,
    )

    assert sum(isinstance(o, ScoreResult) for o in outcomes) == 1
    # both submissions saw the attempt in progress before either committed
    assert attempts.in_progress_reads == 2
    assert sum(isinstance(o, NoActiveAttempt) for o in outcomes) == 1
    assert len((await attempts.get(attempt.attempt_id)).answers) == 2


@pytest.mark.asyncio
async def test_complete_is_conditional_on_in_progress(storage):
    attempt = await storage.attempts.insert_if_absent(Attempt(exam_id="e1", user_id="u1"))

    first = await storage.attempts.complete(attempt.attempt_id, [], 10.0, attempt.started_at)
    second = await storage.attempts.complete(attempt.attempt_id, [], 90.0, attempt.started_at)

    assert first is not None and first.score == 10.0
    assert second is None
    assert (await storage.attempts.get(attempt.attempt_id)).score == 10.0


@pytest.mark.asyncio
async def test_insert_if_absent_returns_existing_attempt(storage):
    first = await storage.attempts.insert_if_absent(Attempt(exam_id="e1", user_id="u1"))
    second = await storage.attempts.insert_if_absent(Attempt(exam_id="e1", user_id="u1"))

    assert second.attempt_id == first.attempt_id


@pytest.mark.asyncio
@pytest.mark.parametrize("published, active", [(False, True), (True, False)])
async def test_unavailable_exam_cannot_be_started(tracker, catalog, published, active):
    exam_id = await create_exam(catalog, published=published, active=active)

    with pytest.raises(NotFound):
        await tracker.start_or_resume_attempt(exam_id, STUDENT.user_id)


@pytest.mark.asyncio
async def test_unknown_exam(tracker):
    with pytest.raises(NotFound):
        await tracker.start_or_resume_attempt("missing", STUDENT.user_id)
    with pytest.raises(NotFound):
        await tracker.submit_attempt("missing", STUDENT.user_id, {})


@pytest.mark.asyncio
async def test_list_attempts_and_completed_ids(tracker, catalog):
    exam_id = await create_exam(catalog)
    other_exam_id = await create_exam(catalog)
    await tracker.start_or_resume_attempt(exam_id, STUDENT.user_id)
    await tracker.submit_attempt(exam_id, STUDENT.user_id, {"q1": "o1"})
    await tracker.start_or_resume_attempt(other_exam_id, STUDENT.user_id)

    items = await tracker.list_attempts(STUDENT.user_id)

    assert {i.exam_id for i in items} == {exam_id, other_exam_id}
    assert all(i.exam_title == "Algebra basics" for i in items)
    assert all(i.question_count == 2 for i in items)
    assert await tracker.completed_exam_ids(STUDENT.user_id) == {exam_id}


@pytest.mark.asyncio
async def test_attempt_result_visibility(tracker, catalog):
    exam_id = await create_exam(catalog)
    attempt = await tracker.start_or_resume_attempt(exam_id, STUDENT.user_id)
    await tracker.submit_attempt(exam_id, STUDENT.user_id, {"q1": "o1", "q2": "o3,o4"})

    own = await tracker.get_attempt_result(attempt.attempt_id, STUDENT)
    assert own.score == 100.0
    assert [d.question_text for d in own.answers] == ["What is 2 + 2?", "Which numbers are prime?"]

    assert (await tracker.get_attempt_result(attempt.attempt_id, TEACHER)).attempt_id == attempt.attempt_id
    assert (await tracker.get_attempt_result(attempt.attempt_id, ADMIN)).attempt_id == attempt.attempt_id

    with pytest.raises(Forbidden):
        await tracker.get_attempt_result(attempt.attempt_id, OTHER)
    with pytest.raises(NotFound):
        await tracker.get_attempt_result("missing", STUDENT)
