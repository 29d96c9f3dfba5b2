"""
Practice Service - Runs practice sessions over the learning list.

A session is started for a mode, hands out a batch of prompts (word +
direction + question text), accepts answers one at a time, and is finally
closed, at which point its totals count towards today's goals.

Modes:
- due-review: words due for SM-2 review, most overdue first
- smart: all learning words by smart-practice priority
- fi-en / en-fi / mixed: non-mastered words, shuffled
- review: mastered words, shuffled
"""

import logging
import random
from datetime import datetime
from typing import Optional, Sequence

from models import db
from models.practice_session import PracticeSession
from services import daily_goals_service
from services import spaced_repetition as srs
from services.exceptions import PracticeSessionNotFound
from services.learning_service import (
    get_due_entries,
    get_mastered_entries,
    get_smart_practice_entries,
    get_words_for_practice,
    record_answer,
    require_learning_entry,
)

logger = logging.getLogger(__name__)


def check_answer(user_answer: str, valid_answers: Sequence[str]) -> bool:
    """
    Check a typed answer against the accepted forms.

    Matching is case-insensitive and ignores surrounding whitespace.

    Example:
        >>> check_answer('  Cat ', ['cat', 'kitty'])
        True
    """
    if user_answer is None:
        return False
    normalized = user_answer.strip().lower()
    if not normalized:
        return False
    if isinstance(valid_answers, str):
        valid_answers = [valid_answers]
    return any(answer.strip().lower() == normalized for answer in valid_answers)


def question_and_answers(word, direction: srs.Direction):
    """Question text and accepted answers for asking a word in a direction"""
    if direction is srs.Direction.FI_EN:
        return srs.first_form(word.native), list(word.target)
    return srs.first_form(word.target), list(word.native)


def select_entries(mode: str, rng: random.Random, now: Optional[datetime] = None) -> list:
    """
    Pick the learning entries a session of the given mode draws from, in
    the order they should be asked.

    Raises:
        ValueError: If the mode is invalid
    """
    if mode == srs.MODE_DUE_REVIEW:
        return get_due_entries(include_mastered=False, now=now)
    if mode == srs.MODE_SMART:
        return get_smart_practice_entries(include_mastered=False, now=now)
    if mode == srs.MODE_REVIEW:
        entries = get_mastered_entries()
    elif mode in (srs.MODE_FI_EN, srs.MODE_EN_FI, srs.MODE_MIXED):
        entries = get_words_for_practice(include_mastered=False)
    else:
        raise ValueError(f"Invalid practice mode: '{mode}'. Must be one of: {srs.VALID_MODES}")

    rng.shuffle(entries)
    return entries


def start_session(
    mode: str,
    count: int = 10,
    rng: Optional[random.Random] = None,
    now: Optional[datetime] = None
) -> dict:
    """
    Start a practice session.

    Args:
        mode: One of srs.VALID_MODES
        count: Maximum number of prompts
        rng: Random source for shuffling and direction choice
        now: Reference time for due/priority ordering

    Returns:
        dict: {
            'session_id': int,
            'mode': str,
            'available': int,   # words eligible for this mode
            'prompts': [{'word_id': int, 'direction': str, 'question': str}, ...]
        }

    Raises:
        ValueError: If the mode or count is invalid, or no words are available
        RuntimeError: If the database operation fails
    """
    if not isinstance(count, int) or count < 1:
        raise ValueError(f"count must be a positive integer, got: {count}")

    rng = rng or random.Random()
    entries = select_entries(mode, rng, now=now)
    if not entries:
        logger.debug(f"No words available for practice mode '{mode}'")
        raise ValueError(f"No words available for practice mode '{mode}'")

    selected = entries[:count]
    prompts = []
    for entry in selected:
        direction = srs.choose_direction(entry, mode, rng)
        question, _ = question_and_answers(entry.word, direction)
        prompts.append({
            'word_id': entry.word_id,
            'direction': direction.value,
            'question': question,
        })

    try:
        session = PracticeSession(
            mode=mode,
            started_at=srs.as_utc(now) or srs.utcnow(),
            prompts=[dict(prompt, answered=False) for prompt in prompts],
            planned_count=len(prompts),
            answered_count=0,
            correct_count=0,
            newly_mastered_count=0
        )
        db.session.add(session)
        db.session.commit()
    except Exception as e:
        logger.error(f"Failed to start practice session mode={mode}: {str(e)}", exc_info=True)
        db.session.rollback()
        raise RuntimeError(f"Failed to start practice session: {str(e)}") from e

    logger.info(f"Started practice session: id={session.id}, mode={mode}, prompts={len(prompts)}")

    return {
        'session_id': session.id,
        'mode': mode,
        'available': len(entries),
        'prompts': prompts,
    }


def get_open_session(session_id: int) -> PracticeSession:
    """
    Raises:
        PracticeSessionNotFound: If the session does not exist
        ValueError: If the session is already finished
    """
    session = db.session.get(PracticeSession, session_id)
    if session is None:
        raise PracticeSessionNotFound(session_id)
    if session.is_finished:
        raise ValueError(f"Practice session {session_id} is already finished")
    return session


def submit_answer(
    session_id: int,
    word_id: int,
    direction,
    user_answer: str,
    now: Optional[datetime] = None
) -> dict:
    """
    Check and record one answer within a session.

    Args:
        session_id: The open practice session
        word_id: The word that was asked
        direction: Direction it was asked in
        user_answer: What the learner typed

    Returns:
        dict: {
            'is_correct': bool,
            'correct_answers': [str, ...],
            'mastery_status': str,
            'streak': int,            # streak in this direction after the answer
            'interval': int,
            'next_review': str,       # e.g. 'tomorrow'
            'next_review_date': datetime
        }

    Raises:
        PracticeSessionNotFound / LearningEntryNotFound: Unknown session or word
        ValueError: Finished session, invalid direction, or a prompt not asked
                    in this session or already answered
        ConcurrentUpdateError: If the entry was changed by another writer
        RuntimeError: If database operations fail
    """
    direction = srs.Direction.parse(direction)
    session = get_open_session(session_id)
    entry = require_learning_entry(word_id)

    prompt = session.find_prompt(word_id, direction.value)
    if prompt is None:
        logger.warning(f"Answer for word_id={word_id} ({direction.value}) not asked in session {session_id}")
        raise ValueError(f"Word {word_id} was not asked as '{direction.value}' in practice session {session_id}")
    if prompt['answered']:
        raise ValueError(f"Word {word_id} was already answered in practice session {session_id}")

    _, valid_answers = question_and_answers(entry.word, direction)
    is_correct = check_answer(user_answer, valid_answers)

    result = record_answer(word_id, direction, is_correct, now=now, commit=False)

    # Reassign so the JSON column is flagged as changed
    session.prompts = [
        dict(item, answered=True) if item is prompt else item
        for item in session.prompts
    ]
    session.answered_count = (session.answered_count or 0) + 1
    if is_correct:
        session.correct_count = (session.correct_count or 0) + 1
    if result['mastery_status'] == srs.MasteryStatus.NEWLY_MASTERED.value:
        session.newly_mastered_count = (session.newly_mastered_count or 0) + 1

    try:
        db.session.commit()
    except Exception as e:
        logger.error(f"Failed to save answer for session {session_id}: {str(e)}", exc_info=True)
        db.session.rollback()
        raise RuntimeError(f"Failed to save answer: {str(e)}") from e

    return {
        'is_correct': is_correct,
        'correct_answers': valid_answers,
        'mastery_status': result['mastery_status'],
        'streak': getattr(entry, f'streak_{direction.field_suffix}') or 0,
        'interval': result['interval'],
        'next_review': result['next_review'],
        'next_review_date': result['next_review_date'],
    }


def finish_session(session_id: int, now: Optional[datetime] = None) -> dict:
    """
    Close a session and add its totals to today's goals.

    Returns:
        dict: {
            'session_id': int,
            'mode': str,
            'total': int,
            'correct': int,
            'percentage': int,
            'newly_mastered': int,
            'remaining_to_learn': int
        }

    Raises:
        PracticeSessionNotFound: If the session does not exist
        ValueError: If the session is already finished
        RuntimeError: If the database operation fails
    """
    session = get_open_session(session_id)

    try:
        session.finished_at = srs.as_utc(now) or srs.utcnow()
        daily_goals_service.record_practice(session.answered_count or 0, session.correct_count or 0)
        db.session.commit()
    except Exception as e:
        logger.error(f"Failed to finish practice session {session_id}: {str(e)}", exc_info=True)
        db.session.rollback()
        raise RuntimeError(f"Failed to finish practice session: {str(e)}") from e

    total = session.answered_count or 0
    correct = session.correct_count or 0

    logger.info(f"Finished practice session: id={session_id}, score={correct}/{total}")

    return {
        'session_id': session.id,
        'mode': session.mode,
        'total': total,
        'correct': correct,
        'percentage': srs.percentage(correct, total),
        'newly_mastered': session.newly_mastered_count or 0,
        'remaining_to_learn': len(get_words_for_practice(include_mastered=False)),
    }
