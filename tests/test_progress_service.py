"""
Tests for progress tracking against a real database.

Tests cover:
- Answer recording through the mastery engine
- Manual classification, initialization and reset
- Per-user isolation and summaries
- Retry and failure of progress writes
"""

import pytest
from sqlalchemy.exc import OperationalError

from app.core.exceptions import FlashcardNotFoundError, ProgressWriteError, StudySetNotFoundError
from app.progress.mastery import MasteryStatus
from app.progress.repository import ProgressRepository
from app.progress.service import ProgressService
from app.study_sets.schemas import FlashcardContent, StudySetCreate
from app.study_sets.service import StudySetService


async def create_set(session, user_id, title="Capitals", cards=(("France", "Paris"), ("Italy", "Rome"))):
    detail = await StudySetService(session).create_study_set(
        StudySetCreate(title=title, flashcards=[FlashcardContent(term=t, definition=d) for t, d in cards]),
        user_id=user_id,
    )
    await session.commit()
    return detail


class TestRecordAnswer:
    """Test answer recording."""

    async def test_first_correct_answer_masters(self, session, owner_id):
        study_set = await create_set(session, owner_id)
        card_id = study_set.flashcards[0].id

        response = await ProgressService(session).record_answer(card_id, True, owner_id)

        assert response.new_status == MasteryStatus.MASTERED
        assert response.correct_count == 1
        assert response.incorrect_count == 0
        assert response.last_studied_at is not None

    async def test_second_correct_answer_counts(self, session, owner_id):
        study_set = await create_set(session, owner_id)
        card_id = study_set.flashcards[0].id
        service = ProgressService(session)

        await service.record_answer(card_id, True, owner_id)
        response = await service.record_answer(card_id, True, owner_id)

        assert response.new_status == MasteryStatus.MASTERED
        assert response.correct_count == 2

    async def test_first_incorrect_answer_is_learning(self, session, owner_id):
        study_set = await create_set(session, owner_id)
        card_id = study_set.flashcards[0].id

        response = await ProgressService(session).record_answer(card_id, False, owner_id)

        assert response.new_status == MasteryStatus.LEARNING
        assert response.correct_count == 0
        assert response.incorrect_count == 1

    async def test_progress_is_per_user(self, session, owner_id, other_id):
        study_set = await create_set(session, owner_id)
        card_id = study_set.flashcards[0].id
        service = ProgressService(session)

        await service.record_answer(card_id, False, owner_id)
        response = await service.record_answer(card_id, True, other_id)

        assert response.new_status == MasteryStatus.MASTERED
        assert (await ProgressRepository(session).get(owner_id, card_id)).status == MasteryStatus.LEARNING

    async def test_unknown_flashcard(self, session, owner_id):
        with pytest.raises(FlashcardNotFoundError):
            await ProgressService(session).record_answer("missing", True, owner_id)


class TestMarkStatus:
    """Test manual classification."""

    async def test_keeps_counters(self, session, owner_id):
        study_set = await create_set(session, owner_id)
        card_id = study_set.flashcards[0].id
        service = ProgressService(session)
        await service.record_answer(card_id, False, owner_id)

        progress = await service.mark_status(card_id, MasteryStatus.MASTERED, owner_id)

        assert progress.status == MasteryStatus.MASTERED
        assert progress.incorrect_count == 1

    async def test_creates_record(self, session, owner_id):
        study_set = await create_set(session, owner_id)
        card_id = study_set.flashcards[1].id

        progress = await ProgressService(session).mark_status(card_id, MasteryStatus.LEARNING, owner_id)

        assert progress.status == MasteryStatus.LEARNING
        assert progress.correct_count == 0


class TestInitializeAndReset:
    """Test bulk initialization and reset of a set."""

    async def test_initialize_only_missing_cards(self, session, owner_id):
        study_set = await create_set(session, owner_id, cards=[("a", "1"), ("b", "2"), ("c", "3")])
        service = ProgressService(session)
        await service.record_answer(study_set.flashcards[0].id, True, owner_id)

        first = await service.initialize_set(study_set.id, owner_id)
        second = await service.initialize_set(study_set.id, owner_id)

        assert first.initialized == 2
        assert second.initialized == 0

        progress = await service.get_set_progress(study_set.id, owner_id)
        assert [f.user_progress.status for f in progress.flashcards] == [
            MasteryStatus.MASTERED,
            MasteryStatus.LEARNING,
            MasteryStatus.LEARNING,
        ]

    async def test_reset_removes_every_record(self, session, owner_id):
        study_set = await create_set(session, owner_id)
        service = ProgressService(session)
        for card in study_set.flashcards:
            await service.record_answer(card.id, True, owner_id)

        response = await service.reset_set(study_set.id, owner_id)

        assert response.deleted == 2
        progress = await service.get_set_progress(study_set.id, owner_id)
        assert all(f.user_progress is None for f in progress.flashcards)
        for card in study_set.flashcards:
            assert await ProgressRepository(session).get(owner_id, card.id) is None

    async def test_reset_leaves_other_users_alone(self, session, owner_id, other_id):
        study_set = await create_set(session, owner_id)
        card_id = study_set.flashcards[0].id
        service = ProgressService(session)
        await service.record_answer(card_id, True, owner_id)
        await service.record_answer(card_id, True, other_id)

        await service.reset_set(study_set.id, owner_id)

        assert await ProgressRepository(session).get(other_id, card_id) is not None

    async def test_unknown_set(self, session, owner_id):
        with pytest.raises(StudySetNotFoundError):
            await ProgressService(session).reset_set("missing", owner_id)


class TestOverallProgress:
    """Test status summaries."""

    async def test_counts_per_status_and_set(self, session, owner_id):
        capitals = await create_set(session, owner_id)
        colours = await create_set(session, owner_id, title="Colours", cards=[("rouge", "red")])
        service = ProgressService(session)
        await service.record_answer(capitals.flashcards[0].id, True, owner_id)
        await service.record_answer(capitals.flashcards[1].id, False, owner_id)
        await service.record_answer(colours.flashcards[0].id, True, owner_id)

        overall = await service.get_overall_progress(owner_id)

        assert overall.stats.model_dump() == {"new": 0, "learning": 1, "mastered": 2, "total": 3}
        by_title = {s.title: s for s in overall.set_progress}
        assert by_title["Capitals"].mastered == 1
        assert by_title["Capitals"].learning == 1
        assert by_title["Colours"].total == 1

    async def test_nothing_studied(self, session, owner_id):
        overall = await ProgressService(session).get_overall_progress(owner_id)

        assert overall.stats.total == 0
        assert overall.set_progress == []


class TestWriteRetry:
    """Test retries of failed progress writes."""

    async def test_transient_failure_is_retried(self, session, owner_id, monkeypatch):
        study_set = await create_set(session, owner_id)
        card_id = study_set.flashcards[0].id
        original_upsert = ProgressRepository.upsert
        calls = {"count": 0}

        async def flaky_upsert(self, *args, **kwargs):
            calls["count"] += 1
            if calls["count"] < 3:
                raise OperationalError("UPDATE user_flashcard_progress", {}, Exception("database is locked"))
            return await original_upsert(self, *args, **kwargs)

        monkeypatch.setattr(ProgressRepository, "upsert", flaky_upsert)

        response = await ProgressService(session, retries=3, retry_delay=0).record_answer(card_id, True, owner_id)

        assert calls["count"] == 3
        assert response.new_status == MasteryStatus.MASTERED
        assert response.correct_count == 1

    async def test_gives_up_after_retries(self, session, owner_id, monkeypatch):
        study_set = await create_set(session, owner_id)
        card_id = study_set.flashcards[0].id

        async def failing_upsert(self, *args, **kwargs):
            raise OperationalError("UPDATE user_flashcard_progress", {}, Exception("database is locked"))

        monkeypatch.setattr(ProgressRepository, "upsert", failing_upsert)

        with pytest.raises(ProgressWriteError):
            await ProgressService(session, retries=2, retry_delay=0).record_answer(card_id, True, owner_id)

        assert await ProgressRepository(session).get(owner_id, card_id) is None
