"""
Tests for the pydantic API models.
"""

import pytest
from datetime import datetime, timezone
from pydantic import ValidationError

from services.api_models import (
    AnswerEvent,
    DailyGoalUpdate,
    LearningEntrySchema,
    MasteryUpdate,
    PracticeAnswer,
    PracticeSessionStart,
    WordCreate,
)
from services.spaced_repetition import Direction
from tests.conftest import make_entry


class TestLearningEntrySchema:
    """Test LearningEntrySchema serialization"""

    def test_from_entry_uses_camel_case(self):
        entry = make_entry(word_id=7, streak_en_fi=2, next_review_date=datetime(2026, 10, 19, 12, 0))
        data = LearningEntrySchema.model_validate(entry).to_json()

        assert data['wordId'] == 7
        assert data['streakEnFi'] == 2
        assert data['easeFactor'] == 2.5
        assert data['lastPracticedFiEn'] is None
        assert data['nextReviewDate'].startswith('2026-10-19T12:00:00')
        assert data['nextReviewDate'].endswith(('Z', '+00:00'))

    def test_missing_counters_read_as_defaults(self):
        entry = make_entry(practice_count=None, ease_factor=None, mastered=None, interval=None)
        schema = LearningEntrySchema.model_validate(entry)

        assert schema.practice_count == 0
        assert schema.ease_factor == 2.5
        assert schema.mastered is False
        assert schema.interval == 0

    def test_accepts_camel_case_input(self):
        schema = LearningEntrySchema.model_validate({'wordId': 3, 'easeFactor': 1.9, 'repetitions': 2})
        assert schema.word_id == 3
        assert schema.ease_factor == 1.9

    def test_timestamps_normalised_to_utc(self):
        schema = LearningEntrySchema.model_validate({'word_id': 1, 'last_reviewed': '2026-10-18T09:00:00'})
        assert schema.last_reviewed == datetime(2026, 10, 18, 9, 0, tzinfo=timezone.utc)


class TestRequestModels:
    """Test request body validation"""

    @pytest.mark.parametrize('raw, expected', [('A', Direction.FI_EN), ('b', Direction.EN_FI), ('en-fi', Direction.EN_FI)])
    def test_answer_event_directions(self, raw, expected):
        event = AnswerEvent.model_validate({'direction': raw, 'isCorrect': False})
        assert event.direction is expected
        assert event.is_correct is False

    def test_answer_event_rejects_unknown_direction(self):
        with pytest.raises(ValidationError):
            AnswerEvent.model_validate({'direction': 'fi-sv', 'isCorrect': True})

    def test_mastery_update_requires_ids(self):
        assert MasteryUpdate.model_validate({'wordIds': [1, 2], 'mastered': False}).word_ids == [1, 2]
        with pytest.raises(ValidationError):
            MasteryUpdate.model_validate({'wordIds': [], 'mastered': True})

    def test_word_create_accepts_string_or_list(self):
        assert WordCreate.model_validate({'native': 'kissa', 'target': ['cat']}).native == 'kissa'
        assert WordCreate.model_validate({'native': ['a', 'b'], 'target': 'x'}).native == ['a', 'b']

    def test_practice_session_start(self):
        assert PracticeSessionStart.model_validate({'mode': 'due-review'}).count == 10
        with pytest.raises(ValidationError):
            PracticeSessionStart.model_validate({'mode': 'smart', 'count': 0})
        with pytest.raises(ValidationError):
            PracticeSessionStart.model_validate({'mode': 'fast'})

    def test_practice_answer(self):
        answer = PracticeAnswer.model_validate({'word_id': 1, 'direction': 'B', 'user_answer': 'kissa'})
        assert answer.direction is Direction.EN_FI

    def test_daily_goal_update_bounds(self):
        assert DailyGoalUpdate.model_validate({'target_accuracy': 100}).target_accuracy == 100
        with pytest.raises(ValidationError):
            DailyGoalUpdate.model_validate({'words_to_learn': 0})
