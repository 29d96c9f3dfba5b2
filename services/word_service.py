"""Word Service - Vocabulary catalog: create, edit, delete, search and list words"""
import logging
from typing import List, Optional

from sqlalchemy import func

from models import db
from models.word import DEFAULT_CATEGORIES, Word, normalize_forms
from services import daily_goals_service
from services.exceptions import WordNotFound
from services.learning_service import create_learning_entry

logger = logging.getLogger(__name__)

SORT_FIELDS = ['native', 'target']
SORT_ORDERS = ['asc', 'desc']

EDITABLE_FIELDS = ['native', 'target', 'category', 'entry_type', 'example', 'notes']


def get_word(word_id: int) -> Word:
    """
    Get a word by ID.

    Raises:
        WordNotFound: If no word has this ID
    """
    word = db.session.get(Word, word_id)
    if word is None:
        raise WordNotFound(word_id)
    return word


def find_word_by_native(native) -> Optional[Word]:
    """
    Find an existing word sharing any native form (case-insensitive).

    Args:
        native: A string or list of native forms

    Returns:
        The first matching Word, or None
    """
    wanted = {form.lower() for form in normalize_forms(native, 'native')}
    for word in Word.query.order_by(Word.id).all():
        if any(form.lower() in wanted for form in word.native):
            return word
    return None


def create_word(
    native,
    target,
    category: str = 'other',
    entry_type: str = 'word',
    example: str = '',
    notes: str = '',
    start_learning: bool = True
) -> Word:
    """
    Create a new word and (by default) put it straight into the learning list.

    Native and target accept a single string or a list of alternative forms;
    both are stored as a canonical list.

    Args:
        native: Finnish form(s)
        target: English form(s)
        category: Category name (lower-cased; blank -> 'other')
        entry_type: word, phrase, sentence, or expression
        example: Optional example sentence
        notes: Optional notes
        start_learning: Also create a learning entry for the word

    Returns:
        The created Word

    Raises:
        ValueError: If the input is invalid or a word with the same native form exists
        RuntimeError: If the database operation fails

    Example:
        >>> word = create_word('kissa', ['cat', 'kitty'], category='animals')
        >>> word.target
        ['cat', 'kitty']
    """
    existing = find_word_by_native(native)
    if existing:
        logger.warning(f"Duplicate word rejected: native={native!r} matches word_id={existing.id}")
        raise ValueError(f"Word '{existing.native[0]}' already exists (id={existing.id})")

    word = Word(
        native=native,
        target=target,
        category=category,
        entry_type=entry_type,
        example=(example or '').strip(),
        notes=(notes or '').strip()
    )

    try:
        db.session.add(word)
        if start_learning:
            create_learning_entry(word)
            daily_goals_service.record_word_added()
        db.session.commit()
    except ValueError:
        db.session.rollback()
        raise
    except Exception as e:
        logger.error(f"Failed to create word native={native!r}: {str(e)}", exc_info=True)
        db.session.rollback()
        raise RuntimeError(f"Failed to create word: {str(e)}") from e

    logger.info(
        f"Created word: id={word.id}, native={word.native}, category={word.category}, "
        f"learning={start_learning}"
    )
    return word


def update_word(word_id: int, **changes) -> Word:
    """
    Edit a word definition. Learning progress is preserved.

    Args:
        word_id: The ID of the word
        **changes: Any of native, target, category, entry_type, example, notes.
                   None values are ignored.

    Raises:
        WordNotFound: If the word does not exist
        ValueError: If a field is unknown or a value is invalid
        RuntimeError: If the database operation fails
    """
    unknown = set(changes) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValueError(f"Cannot update fields: {sorted(unknown)}")

    word = get_word(word_id)

    if changes.get('native') is not None:
        clash = find_word_by_native(changes['native'])
        if clash and clash.id != word.id:
            raise ValueError(f"Word '{clash.native[0]}' already exists (id={clash.id})")

    try:
        for field in EDITABLE_FIELDS:
            value = changes.get(field)
            if value is None:
                continue
            if field in ('example', 'notes'):
                value = value.strip()
            setattr(word, field, value)
        db.session.commit()
    except ValueError:
        db.session.rollback()
        raise
    except Exception as e:
        logger.error(f"Failed to update word_id={word_id}: {str(e)}", exc_info=True)
        db.session.rollback()
        raise RuntimeError(f"Failed to update word: {str(e)}") from e

    logger.info(f"Updated word: id={word_id}, fields={sorted(k for k, v in changes.items() if v is not None)}")
    return word


def delete_word(word_id: int) -> None:
    """
    Delete a word. Its learning entry, if any, is deleted with it.

    Raises:
        WordNotFound: If the word does not exist
        RuntimeError: If the database operation fails
    """
    word = get_word(word_id)

    try:
        db.session.delete(word)
        db.session.commit()
    except Exception as e:
        logger.error(f"Failed to delete word_id={word_id}: {str(e)}", exc_info=True)
        db.session.rollback()
        raise RuntimeError(f"Failed to delete word: {str(e)}") from e

    logger.info(f"Deleted word: id={word_id}")


def list_words(
    category: Optional[str] = None,
    sort_by: Optional[str] = None,
    order: str = 'asc',
    learning_only: bool = False
) -> List[Word]:
    """
    List words, optionally filtered by category and sorted alphabetically.

    Sorting uses the first form of the chosen side, case-insensitively.
    Without sort_by, words come back in creation order.

    Raises:
        ValueError: If sort_by or order is invalid
    """
    if sort_by is not None and sort_by not in SORT_FIELDS:
        raise ValueError(f"Invalid sort field: '{sort_by}'. Must be one of: {SORT_FIELDS}")
    if order not in SORT_ORDERS:
        raise ValueError(f"Invalid sort order: '{order}'. Must be one of: {SORT_ORDERS}")

    query = Word.query
    if category:
        query = query.filter(Word.category == category.strip().lower())
    words = query.order_by(Word.id).all()

    if learning_only:
        words = [word for word in words if word.is_learning]

    if sort_by:
        words.sort(key=lambda word: getattr(word, sort_by)[0].lower(), reverse=(order == 'desc'))

    return words


def search_words(query: str) -> List[Word]:
    """
    Case-insensitive substring search across every native and target form
    and the notes.

    Raises:
        ValueError: If the query is blank
    """
    if not query or not query.strip():
        raise ValueError("Search query cannot be empty")

    term = query.strip().lower()
    results = []
    for word in Word.query.order_by(Word.id).all():
        forms = list(word.native) + list(word.target)
        if any(term in form.lower() for form in forms) or term in (word.notes or '').lower():
            results.append(word)

    logger.debug(f"Search '{term}' matched {len(results)} words")
    return results


def list_categories() -> List[dict]:
    """
    Default categories plus any custom category in use, with word counts.

    Returns:
        list: [{'name': str, 'word_count': int}, ...] defaults first, then
        custom categories alphabetically
    """
    counts = dict(
        db.session.query(Word.category, func.count(Word.id)).group_by(Word.category).all()
    )
    custom = sorted(name for name in counts if name not in DEFAULT_CATEGORIES)

    return [
        {'name': name, 'word_count': counts.get(name, 0)}
        for name in DEFAULT_CATEGORIES + custom
    ]
