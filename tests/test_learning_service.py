"""
Tests for learning_service.

Covers the learning list (add/remove), answer recording against the
database, manual mastery, due/smart ordering, and optimistic concurrency.
"""

import pytest
from datetime import timedelta

from models import db
from models.learning_entry import LearningEntry
from services import learning_service, word_service
from services import spaced_repetition as srs
from services.exceptions import ConcurrentUpdateError, LearningEntryNotFound, WordNotFound
from tests.conftest import NOW


def _word(native, target='x', start_learning=True, **kwargs):
    return word_service.create_word(native, target, start_learning=start_learning, **kwargs)


class TestLearningList:
    """Test adding and removing words from the learning list"""

    def test_new_word_starts_learning_with_defaults(self, app_context):
        word = _word('kissa', 'cat')
        entry = learning_service.get_learning_entry(word.id)

        assert entry is not None
        assert entry.ease_factor == 2.5
        assert entry.interval == 0
        assert entry.repetitions == 0
        assert entry.next_review_date is None
        assert entry.mastered is False
        assert entry.version == 1

    def test_add_to_learning(self, app_context):
        word = _word('koira', 'dog', start_learning=False)
        assert not learning_service.has_learning_entry(word.id)

        entry = learning_service.add_to_learning(word.id)

        assert entry is not None
        assert learning_service.has_learning_entry(word.id)

    def test_add_twice_returns_none(self, app_context):
        word = _word('talo', 'house')
        assert learning_service.add_to_learning(word.id) is None
        assert LearningEntry.query.count() == 1

    def test_add_unknown_word(self, app_context):
        with pytest.raises(WordNotFound):
            learning_service.add_to_learning(999)

    def test_remove_discards_progress_but_keeps_word(self, app_context):
        word = _word('vesi', 'water')
        learning_service.record_answer(word.id, 'fi-en', True, now=NOW)

        assert learning_service.remove_from_learning(word.id) is True
        assert not learning_service.has_learning_entry(word.id)
        assert word_service.get_word(word.id) is not None

        # Re-adding starts over
        entry = learning_service.add_to_learning(word.id)
        assert entry.practice_count == 0
        assert entry.next_review_date is None

    def test_remove_missing_entry(self, app_context):
        word = _word('sade', 'rain', start_learning=False)
        assert learning_service.remove_from_learning(word.id) is False


class TestRecordAnswer:
    """Test learning_service.record_answer"""

    def test_first_correct_answer(self, app_context):
        word = _word('kissa', 'cat')
        result = learning_service.record_answer(word.id, 'fi-en', True, now=NOW)

        assert result['mastery_status'] == 'learning'
        assert result['quality'] == 3
        assert result['interval'] == 1
        assert result['repetitions'] == 1
        assert result['next_review'] == 'tomorrow'
        assert result['direction'] == 'fi-en'

        entry = learning_service.get_learning_entry(word.id)
        assert entry.streak_fi_en == 1
        assert entry.attempts_fi_en == 1
        assert entry.correct_fi_en == 1
        assert entry.practice_count == 1
        assert srs.as_utc(entry.next_review_date) == NOW + timedelta(days=1)
        assert srs.as_utc(entry.last_practiced_fi_en) == NOW

    def test_short_direction_labels(self, app_context):
        word = _word('kissa', 'cat')
        result = learning_service.record_answer(word.id, 'B', False, now=NOW)

        assert result['direction'] == 'en-fi'
        entry = learning_service.get_learning_entry(word.id)
        assert entry.attempts_en_fi == 1
        assert entry.correct_en_fi == 0

    def test_sequence_reaches_mastery_and_stays_mastered(self, app_context):
        word = _word('kissa', 'cat')
        statuses = []
        for i, direction in enumerate(['fi-en', 'en-fi'] * 3):
            result = learning_service.record_answer(word.id, direction, True, now=NOW + timedelta(minutes=i))
            statuses.append(result['mastery_status'])

        assert statuses == ['learning'] * 5 + ['newly_mastered']

        entry = learning_service.get_learning_entry(word.id)
        mastered_at = srs.as_utc(entry.mastered_at)
        assert mastered_at == NOW + timedelta(minutes=5)

        result = learning_service.record_answer(word.id, 'fi-en', False, now=NOW + timedelta(days=1))
        assert result['mastery_status'] == 'already_mastered'

        entry = learning_service.get_learning_entry(word.id)
        assert entry.mastered is True
        assert srs.as_utc(entry.mastered_at) == mastered_at

    def test_schedule_grows_with_correct_answers(self, app_context):
        word = _word('kissa', 'cat')
        intervals = []
        for i in range(4):
            result = learning_service.record_answer(word.id, 'fi-en', True, now=NOW + timedelta(days=i))
            intervals.append(result['interval'])

        # qualities 3, 3, 4, 5
        assert intervals == [1, 3, 7, 16]

    def test_version_increments_per_answer(self, app_context):
        word = _word('kissa', 'cat')
        learning_service.record_answer(word.id, 'fi-en', True, now=NOW)
        learning_service.record_answer(word.id, 'en-fi', True, now=NOW)

        assert learning_service.get_learning_entry(word.id).version == 3

    def test_word_not_in_learning_list(self, app_context):
        word = _word('kissa', 'cat', start_learning=False)
        with pytest.raises(LearningEntryNotFound):
            learning_service.record_answer(word.id, 'fi-en', True)

    def test_invalid_direction(self, app_context):
        word = _word('kissa', 'cat')
        with pytest.raises(ValueError):
            learning_service.record_answer(word.id, 'sideways', True)

        entry = learning_service.get_learning_entry(word.id)
        assert entry.practice_count == 0

    def test_settings_come_from_app_config(self, app_context):
        app_context.config['SM2_INITIAL_INTERVALS'] = [2, 6]
        app_context.config['MASTERY_STREAK_REQUIRED'] = 1

        word = _word('kissa', 'cat')
        learning_service.record_answer(word.id, 'fi-en', True, now=NOW)
        result = learning_service.record_answer(word.id, 'en-fi', True, now=NOW)

        assert result['interval'] == 6
        assert result['mastery_status'] == 'newly_mastered'

    def test_stale_entry_raises_concurrent_update(self, app_context):
        word = _word('kissa', 'cat')
        entry = learning_service.get_learning_entry(word.id)
        assert entry.version == 1

        # Another writer bumps the row behind the loaded entry's back
        db.session.execute(
            db.text('UPDATE learning_entries SET version = version + 1 WHERE word_id = :word_id'),
            {'word_id': word.id}
        )

        with pytest.raises(ConcurrentUpdateError):
            learning_service.record_answer(word.id, 'fi-en', True, now=NOW)

        fresh = learning_service.get_learning_entry(word.id)
        assert fresh.practice_count == 0


class TestManualMastery:
    """Test learning_service.set_mastery"""

    def test_mark_and_reset(self, app_context):
        first = _word('kissa', 'cat')
        second = _word('koira', 'dog')

        result = learning_service.set_mastery([first.id, second.id], True, now=NOW)
        assert result == {'updated': [first.id, second.id], 'unchanged': []}

        result = learning_service.set_mastery([first.id, second.id], True, now=NOW)
        assert result == {'updated': [], 'unchanged': [first.id, second.id]}

        entry = learning_service.get_learning_entry(first.id)
        assert entry.mastered is True
        assert srs.as_utc(entry.mastered_at) == NOW

        learning_service.set_mastery([first.id], False)
        entry = learning_service.get_learning_entry(first.id)
        assert entry.mastered is False
        assert entry.mastered_at is None

    def test_reset_zeroes_streaks(self, app_context):
        word = _word('kissa', 'cat')
        for direction in ['fi-en', 'en-fi'] * 3:
            learning_service.record_answer(word.id, direction, True, now=NOW)

        learning_service.set_mastery([word.id], False)

        entry = learning_service.get_learning_entry(word.id)
        assert entry.streak_fi_en == 0
        assert entry.streak_en_fi == 0
        assert entry.attempts_fi_en == 3

        result = learning_service.record_answer(word.id, 'fi-en', True, now=NOW)
        assert result['mastery_status'] == 'learning'

    def test_unknown_word_changes_nothing(self, app_context):
        word = _word('kissa', 'cat')
        with pytest.raises(LearningEntryNotFound):
            learning_service.set_mastery([word.id, 999], True)

        assert learning_service.get_learning_entry(word.id).mastered is False


class TestQueues:
    """Test due and smart-practice ordering over stored entries"""

    def test_due_queue_order(self, app_context):
        fresh = _word('kissa', 'cat')
        reviewed = _word('koira', 'dog')
        later = _word('talo', 'house')

        learning_service.record_answer(reviewed.id, 'fi-en', True, now=NOW - timedelta(days=3))
        learning_service.record_answer(later.id, 'fi-en', True, now=NOW)

        due = learning_service.get_due_entries(now=NOW)
        assert [entry.word_id for entry in due] == [fresh.id, reviewed.id]

    def test_mastered_words_only_on_request(self, app_context):
        word = _word('kissa', 'cat')
        learning_service.set_mastery([word.id], True)

        assert learning_service.get_due_entries(now=NOW) == []
        assert [e.word_id for e in learning_service.get_due_entries(include_mastered=True, now=NOW)] == [word.id]
        assert [e.word_id for e in learning_service.get_mastered_entries()] == [word.id]
        assert learning_service.get_words_for_practice() == []

    def test_smart_order_puts_unpracticed_first(self, app_context):
        practiced = _word('kissa', 'cat')
        fresh = _word('koira', 'dog')
        learning_service.record_answer(practiced.id, 'fi-en', True, now=NOW - timedelta(days=1))

        ordered = learning_service.get_smart_practice_entries(now=NOW)
        assert [entry.word_id for entry in ordered] == [fresh.id, practiced.id]
