"""
Tests for word_service and the Word model.

Tests the vocabulary catalog: one-or-many text forms, duplicate detection,
editing without losing progress, cascade delete, search and categories.
"""

import pytest

from models.learning_entry import LearningEntry
from models.word import DEFAULT_CATEGORIES, Word, normalize_forms
from services import daily_goals_service, learning_service, word_service
from services.exceptions import WordNotFound
from tests.conftest import NOW


class TestNormalizeForms:
    """Test normalize_forms function"""

    def test_single_string(self):
        assert normalize_forms('  kissa ') == ['kissa']

    def test_list_drops_blanks_and_duplicates(self):
        assert normalize_forms(['mitä', ' ', 'Mitä', 'mitäs']) == ['mitä', 'mitäs']

    @pytest.mark.parametrize('value', [None, '', '   ', [], ['', ' ']])
    def test_empty_values_rejected(self, value):
        with pytest.raises(ValueError):
            normalize_forms(value, 'native')

    @pytest.mark.parametrize('value', [42, ['kissa', 3], {'kissa': 'cat'}])
    def test_non_string_values_rejected(self, value):
        with pytest.raises(ValueError):
            normalize_forms(value)


class TestCreateWord:
    """Test word_service.create_word"""

    def test_create_with_single_forms(self, app_context):
        word = word_service.create_word('kissa', 'cat', category='Animals')

        assert word.id is not None
        assert word.native == ['kissa']
        assert word.target == ['cat']
        assert word.category == 'animals'
        assert word.entry_type == 'word'
        assert word.is_learning

    def test_create_with_alternative_forms(self, app_context):
        word = word_service.create_word(['mitä', 'mitäs'], ['what', "what's that"], entry_type='expression')

        stored = word_service.get_word(word.id)
        assert stored.native == ['mitä', 'mitäs']
        assert stored.target == ['what', "what's that"]
        assert stored.entry_type == 'expression'

    def test_blank_category_becomes_other(self, app_context):
        word = word_service.create_word('kissa', 'cat', category='  ')
        assert word.category == 'other'

    def test_without_learning(self, app_context):
        word = word_service.create_word('kissa', 'cat', start_learning=False)
        assert not word.is_learning
        assert LearningEntry.query.count() == 0

    def test_duplicate_native_form_rejected(self, app_context):
        word_service.create_word(['mitä', 'mitäs'], 'what')

        with pytest.raises(ValueError, match='already exists'):
            word_service.create_word('MITÄS', 'what now')

        assert Word.query.count() == 1

    def test_invalid_entry_type(self, app_context):
        with pytest.raises(ValueError):
            word_service.create_word('kissa', 'cat', entry_type='idiom')
        assert Word.query.count() == 0

    def test_blank_target_rejected(self, app_context):
        with pytest.raises(ValueError):
            word_service.create_word('kissa', ['  '])

    def test_counts_towards_daily_learning_goal(self, app_context):
        word_service.create_word('kissa', 'cat')
        word_service.create_word('koira', 'dog')
        word_service.create_word('talo', 'house', start_learning=False)

        assert daily_goals_service.get_today().words_learned == 2

    def test_to_dict(self, app_context):
        word = word_service.create_word('kissa', ['cat', 'kitty'], notes=' pet ')
        data = word.to_dict()

        assert data['native'] == ['kissa']
        assert data['target'] == ['cat', 'kitty']
        assert data['notes'] == 'pet'
        assert data['is_learning'] is True
        assert data['mastered'] is False
        assert data['practice_count'] == 0


class TestUpdateAndDelete:
    """Test update_word and delete_word"""

    def test_edit_keeps_learning_progress(self, app_context):
        word = word_service.create_word('kissa', 'cat')
        learning_service.record_answer(word.id, 'fi-en', True, now=NOW)

        word_service.update_word(word.id, target=['cat', 'kitty'], category='pets', notes=None)

        updated = word_service.get_word(word.id)
        assert updated.target == ['cat', 'kitty']
        assert updated.category == 'pets'
        assert updated.learning_entry.practice_count == 1
        assert updated.learning_entry.streak_fi_en == 1

    def test_edit_rejects_duplicate_of_other_word(self, app_context):
        word_service.create_word('kissa', 'cat')
        dog = word_service.create_word('koira', 'dog')

        with pytest.raises(ValueError, match='already exists'):
            word_service.update_word(dog.id, native=['koira', 'kissa'])

    def test_edit_own_forms_is_allowed(self, app_context):
        word = word_service.create_word('kissa', 'cat')
        word_service.update_word(word.id, native=['kissa', 'kisu'])
        assert word_service.get_word(word.id).native == ['kissa', 'kisu']

    def test_edit_unknown_field(self, app_context):
        word = word_service.create_word('kissa', 'cat')
        with pytest.raises(ValueError):
            word_service.update_word(word.id, mastered=True)

    def test_edit_missing_word(self, app_context):
        with pytest.raises(WordNotFound):
            word_service.update_word(999, notes='x')

    def test_delete_removes_learning_entry(self, app_context):
        word = word_service.create_word('kissa', 'cat')
        word_service.delete_word(word.id)

        assert Word.query.count() == 0
        assert LearningEntry.query.count() == 0

    def test_delete_missing_word(self, app_context):
        with pytest.raises(WordNotFound):
            word_service.delete_word(999)


class TestListingAndSearch:
    """Test list_words, search_words and list_categories"""

    @pytest.fixture
    def catalog(self, app_context):
        words = [
            word_service.create_word('omena', 'apple', category='food & drinks'),
            word_service.create_word('kissa', 'cat', category='animals', notes='a pet'),
            word_service.create_word('banaani', 'Banana', category='food & drinks', start_learning=False),
            word_service.create_word('moi', 'hi', category='slang'),
        ]
        return [word.id for word in words]

    def test_default_order_is_creation_order(self, catalog):
        assert [word.id for word in word_service.list_words()] == catalog

    def test_filter_by_category(self, catalog):
        words = word_service.list_words(category='Food & Drinks')
        assert [word.native[0] for word in words] == ['omena', 'banaani']

    def test_sort_by_native(self, catalog):
        words = word_service.list_words(sort_by='native')
        assert [word.native[0] for word in words] == ['banaani', 'kissa', 'moi', 'omena']

    def test_sort_by_target_descending(self, catalog):
        words = word_service.list_words(sort_by='target', order='desc')
        assert [word.target[0] for word in words] == ['hi', 'cat', 'Banana', 'apple']

    def test_learning_only(self, catalog):
        words = word_service.list_words(learning_only=True)
        assert 'banaani' not in [word.native[0] for word in words]
        assert len(words) == 3

    @pytest.mark.parametrize('sort_by, order', [('category', 'asc'), ('native', 'up')])
    def test_invalid_sort(self, catalog, sort_by, order):
        with pytest.raises(ValueError):
            word_service.list_words(sort_by=sort_by, order=order)

    def test_search_matches_forms_and_notes(self, catalog):
        assert [w.native[0] for w in word_service.search_words('AN')] == ['banaani']
        assert [w.native[0] for w in word_service.search_words('pet')] == ['kissa']
        assert [w.native[0] for w in word_service.search_words('app')] == ['omena']
        assert word_service.search_words('zebra') == []

    def test_blank_search_rejected(self, catalog):
        with pytest.raises(ValueError):
            word_service.search_words('  ')

    def test_categories_include_defaults_and_custom(self, catalog):
        categories = word_service.list_categories()
        names = [category['name'] for category in categories]

        assert names[:len(DEFAULT_CATEGORIES)] == DEFAULT_CATEGORIES
        assert names[-1] == 'slang'

        counts = {category['name']: category['word_count'] for category in categories}
        assert counts['food & drinks'] == 2
        assert counts['animals'] == 1
        assert counts['weather'] == 0
