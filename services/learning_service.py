"""Learning Service - Manages the active study set and applies practice answers to it"""
import logging
from datetime import datetime
from typing import Iterable, List, Optional

from flask import current_app
from sqlalchemy.orm.exc import StaleDataError

from models import db
from models.learning_entry import LearningEntry
from models.word import Word
from services import spaced_repetition as srs
from services.exceptions import ConcurrentUpdateError, LearningEntryNotFound, WordNotFound

logger = logging.getLogger(__name__)


def get_sm2_settings() -> srs.SM2Settings:
    return srs.SM2Settings.from_config(current_app.config)


def get_mastery_settings() -> srs.MasterySettings:
    return srs.MasterySettings.from_config(current_app.config)


def has_learning_entry(word_id: int) -> bool:
    """
    Check if a word is in the learning list.

    Args:
        word_id: The ID of the word

    Returns:
        True if a learning entry exists, False otherwise
    """
    return LearningEntry.query.filter_by(word_id=word_id).first() is not None


def get_learning_entry(word_id: int) -> Optional[LearningEntry]:
    """Get the learning entry for a word, or None if the word is not being learned"""
    return LearningEntry.query.filter_by(word_id=word_id).first()


def require_learning_entry(word_id: int) -> LearningEntry:
    entry = get_learning_entry(word_id)
    if entry is None:
        logger.warning(f"No learning entry for word_id={word_id}")
        raise LearningEntryNotFound(word_id)
    return entry


def create_learning_entry(word: Word, now: Optional[datetime] = None) -> LearningEntry:
    """
    Build a fresh learning entry for a word without committing.

    The entry starts with the default ease factor, zeroed counters, and no
    next_review_date, so it is due immediately.
    """
    settings = get_sm2_settings()
    entry = LearningEntry(
        word=word,
        started_learning_at=srs.as_utc(now) or srs.utcnow(),
        mastered=False,
        mastered_at=None,
        practice_count=0,
        correct_count=0,
        streak_fi_en=0,
        streak_en_fi=0,
        attempts_fi_en=0,
        attempts_en_fi=0,
        correct_fi_en=0,
        correct_en_fi=0,
        ease_factor=settings.default_ease_factor,
        interval=0,
        repetitions=0,
        next_review_date=None,
        last_reviewed=None
    )
    db.session.add(entry)
    return entry


def add_to_learning(word_id: int) -> Optional[LearningEntry]:
    """
    Add a word to the learning list.

    Args:
        word_id: The ID of the word

    Returns:
        The created LearningEntry, or None if the word was already being learned

    Raises:
        WordNotFound: If the word does not exist
        RuntimeError: If the database operation fails

    Example:
        >>> entry = add_to_learning(word_id=42)
        >>> entry.next_review_date is None
        True
    """
    word = db.session.get(Word, word_id)
    if word is None:
        raise WordNotFound(word_id)

    if word.learning_entry is not None:
        logger.debug(f"Word already in learning list: word_id={word_id}")
        return None

    try:
        entry = create_learning_entry(word)
        db.session.commit()
        logger.info(f"Added word to learning list: word_id={word_id}")
        return entry
    except Exception as e:
        logger.error(f"Failed to add word_id={word_id} to learning list: {str(e)}", exc_info=True)
        db.session.rollback()
        raise RuntimeError(f"Failed to add word to learning list: {str(e)}") from e


def remove_from_learning(word_id: int) -> bool:
    """
    Remove a word from the learning list.

    Its counters and scheduling state are discarded; the word definition
    itself is kept.

    Returns:
        True if an entry was removed, False if the word was not being learned
    """
    entry = get_learning_entry(word_id)
    if entry is None:
        logger.debug(f"Word not in learning list, nothing to remove: word_id={word_id}")
        return False

    try:
        db.session.delete(entry)
        db.session.commit()
        logger.info(f"Removed word from learning list: word_id={word_id}")
        return True
    except Exception as e:
        logger.error(f"Failed to remove word_id={word_id} from learning list: {str(e)}", exc_info=True)
        db.session.rollback()
        raise RuntimeError(f"Failed to remove word from learning list: {str(e)}") from e


def get_all_entries() -> List[LearningEntry]:
    """All learning entries in the order words joined the study set"""
    return LearningEntry.query.order_by(LearningEntry.id).all()


def get_words_for_practice(include_mastered: bool = False) -> List[LearningEntry]:
    query = LearningEntry.query
    if not include_mastered:
        query = query.filter(LearningEntry.mastered.is_(False))
    return query.order_by(LearningEntry.id).all()


def get_mastered_entries() -> List[LearningEntry]:
    return LearningEntry.query.filter(LearningEntry.mastered.is_(True)).order_by(LearningEntry.id).all()


def get_due_entries(include_mastered: bool = False, now: Optional[datetime] = None) -> List[LearningEntry]:
    """Entries due for review, most overdue first"""
    return srs.get_words_due_for_review(get_all_entries(), include_mastered=include_mastered, now=now)


def get_smart_practice_entries(include_mastered: bool = False, now: Optional[datetime] = None) -> List[LearningEntry]:
    """Entries ordered by smart-practice priority, highest first"""
    return srs.sort_by_priority(get_words_for_practice(include_mastered), now=now)


def record_answer(
    word_id: int,
    direction,
    is_correct: bool,
    now: Optional[datetime] = None,
    commit: bool = True
) -> dict:
    """
    Apply one practice answer to a word's learning entry.

    This is the main function called after the learner answers a prompt.
    It updates the directional counters, checks auto-mastery, scores the
    answer, and reschedules the word with SM-2.

    Args:
        word_id: The ID of the word that was asked
        direction: 'fi-en' / 'en-fi' (or 'A' / 'B')
        is_correct: Whether the answer was correct
        now: Answer time (defaults to current UTC time)
        commit: Commit the session; pass False to let the caller own the transaction

    Returns:
        dict: {
            'word_id': int,
            'direction': str,
            'is_correct': bool,
            'mastery_status': 'newly_mastered' | 'already_mastered' | 'learning',
            'quality': int,
            'ease_factor': float,
            'interval': int,
            'repetitions': int,
            'next_review_date': datetime,
            'next_review': str
        }

    Raises:
        ValueError: If the direction is invalid
        LearningEntryNotFound: If the word is not in the learning list
        ConcurrentUpdateError: If the entry was changed by another writer
        RuntimeError: If database operations fail

    Example:
        >>> result = record_answer(word_id=42, direction='fi-en', is_correct=True)
        >>> result['next_review']
        'tomorrow'
    """
    direction = srs.Direction.parse(direction)
    entry = require_learning_entry(word_id)

    outcome = srs.record_answer(
        entry,
        direction,
        is_correct,
        now=now,
        sm2_settings=get_sm2_settings(),
        mastery_settings=get_mastery_settings()
    )

    try:
        if commit:
            db.session.commit()
        else:
            db.session.flush()
    except StaleDataError as e:
        logger.warning(f"Concurrent update detected for word_id={word_id}; answer discarded")
        db.session.rollback()
        raise ConcurrentUpdateError(
            f"Learning entry for word {word_id} was modified concurrently; reload and retry"
        ) from e
    except Exception as e:
        logger.error(f"Failed to record answer for word_id={word_id}: {str(e)}", exc_info=True)
        db.session.rollback()
        raise RuntimeError(f"Failed to record answer: {str(e)}") from e

    if outcome.mastery_status is srs.MasteryStatus.NEWLY_MASTERED:
        logger.info(f"Word newly mastered: word_id={word_id}")

    logger.info(
        f"Recorded answer: word_id={word_id}, direction={direction.value}, "
        f"correct={is_correct}, quality={outcome.quality}, interval={outcome.interval}"
    )

    return {
        'word_id': word_id,
        'direction': direction.value,
        'is_correct': is_correct,
        'mastery_status': outcome.mastery_status.value,
        'quality': outcome.quality,
        'ease_factor': outcome.ease_factor,
        'interval': outcome.interval,
        'repetitions': outcome.repetitions,
        'next_review_date': outcome.next_review_date,
        'next_review': outcome.next_review_text
    }


def set_mastery(word_ids: Iterable[int], mastered: bool, now: Optional[datetime] = None) -> dict:
    """
    Manually mark words as mastered, or move mastered words back to learning.

    Resetting mastery also zeroes both directional streaks.

    Args:
        word_ids: IDs of words in the learning list
        mastered: True to mark as mastered, False to reset
        now: Timestamp used for mastered_at

    Returns:
        dict: {'updated': [word_id, ...], 'unchanged': [word_id, ...]}

    Raises:
        LearningEntryNotFound: If any word is not in the learning list
        RuntimeError: If the database operation fails
    """
    word_ids = list(word_ids)
    entries = [require_learning_entry(word_id) for word_id in word_ids]
    updated = []
    unchanged = []

    for entry in entries:
        if mastered:
            changed = srs.mark_mastered(entry, now=now)
        else:
            changed = srs.reset_mastery(entry)
        (updated if changed else unchanged).append(entry.word_id)

    try:
        db.session.commit()
    except StaleDataError as e:
        db.session.rollback()
        raise ConcurrentUpdateError("A learning entry was modified concurrently; reload and retry") from e
    except Exception as e:
        logger.error(f"Failed to update mastery for word_ids={list(word_ids)}: {str(e)}", exc_info=True)
        db.session.rollback()
        raise RuntimeError(f"Failed to update mastery: {str(e)}") from e

    logger.info(f"Manual mastery update: mastered={mastered}, updated={updated}, unchanged={unchanged}")

    return {'updated': updated, 'unchanged': unchanged}
