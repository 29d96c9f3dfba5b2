"""Daily Goals Service - Per-day learning and practice targets"""
import logging
from datetime import date
from typing import Optional

from flask import current_app

from models import db
from models.daily_goal import DailyGoal
from services import spaced_repetition as srs

logger = logging.getLogger(__name__)


def get_today(today: Optional[date] = None) -> DailyGoal:
    """
    Get today's goal row, creating it from the configured defaults.

    Progress counters start at zero for every new day. Targets carry over
    from the most recent earlier day when one exists.

    Args:
        today: Override for the current date (defaults to the current UTC date)

    Returns:
        DailyGoal for the given day (flushed, not committed)
    """
    today = today or srs.utcnow().date()
    goal = DailyGoal.query.filter_by(day=today).first()
    if goal:
        return goal

    previous = DailyGoal.query.filter(DailyGoal.day < today).order_by(DailyGoal.day.desc()).first()
    if previous:
        targets = {
            'words_to_learn': previous.words_to_learn,
            'words_to_practice': previous.words_to_practice,
            'target_accuracy': previous.target_accuracy,
        }
    else:
        targets = {
            'words_to_learn': current_app.config['DAILY_GOAL_WORDS_TO_LEARN'],
            'words_to_practice': current_app.config['DAILY_GOAL_WORDS_TO_PRACTICE'],
            'target_accuracy': current_app.config['DAILY_GOAL_TARGET_ACCURACY'],
        }

    goal = DailyGoal(
        day=today,
        words_learned=0,
        words_practiced=0,
        correct_answers=0,
        **targets
    )
    db.session.add(goal)
    db.session.flush()

    logger.debug(f"Started daily goals for {today}")
    return goal


def record_word_added(today: Optional[date] = None) -> DailyGoal:
    """Count a newly added word towards today's learning goal (caller commits)"""
    goal = get_today(today)
    goal.words_learned = (goal.words_learned or 0) + 1
    return goal


def record_practice(words_practiced: int, correct_answers: int, today: Optional[date] = None) -> DailyGoal:
    """Add a finished session's totals to today's practice goal (caller commits)"""
    goal = get_today(today)
    goal.words_practiced = (goal.words_practiced or 0) + words_practiced
    goal.correct_answers = (goal.correct_answers or 0) + correct_answers
    return goal


def update_goals(
    words_to_learn: Optional[int] = None,
    words_to_practice: Optional[int] = None,
    target_accuracy: Optional[int] = None,
    today: Optional[date] = None
) -> DailyGoal:
    """
    Change today's targets. Omitted values keep their current setting.

    Raises:
        ValueError: If a target is out of range
        RuntimeError: If the database operation fails
    """
    goal = get_today(today)

    if words_to_learn is not None:
        goal.words_to_learn = words_to_learn
    if words_to_practice is not None:
        goal.words_to_practice = words_to_practice
    if target_accuracy is not None:
        goal.target_accuracy = target_accuracy

    try:
        db.session.commit()
    except Exception as e:
        logger.error(f"Failed to update daily goals: {str(e)}", exc_info=True)
        db.session.rollback()
        raise RuntimeError(f"Failed to update daily goals: {str(e)}") from e

    logger.info(
        f"Updated daily goals: learn={goal.words_to_learn}, practice={goal.words_to_practice}, "
        f"accuracy={goal.target_accuracy}%"
    )
    return goal


def get_daily_progress_summary(today: Optional[date] = None) -> dict:
    """
    Summarise today's progress against the goals.

    Returns:
        dict: {
            'date': 'YYYY-MM-DD',
            'words_learned': int, 'words_to_learn': int, 'learn_progress': int (0-100),
            'words_practiced': int, 'words_to_practice': int, 'practice_progress': int (0-100),
            'accuracy': int, 'target_accuracy': int,
            'learn_goal_met': bool, 'practice_goal_met': bool
        }
    """
    goal = get_today(today)
    words_learned = goal.words_learned or 0
    words_practiced = goal.words_practiced or 0

    return {
        'date': goal.day.isoformat(),
        'words_learned': words_learned,
        'words_to_learn': goal.words_to_learn,
        'learn_progress': min(100, srs.percentage(words_learned, goal.words_to_learn)),
        'words_practiced': words_practiced,
        'words_to_practice': goal.words_to_practice,
        'practice_progress': min(100, srs.percentage(words_practiced, goal.words_to_practice)),
        'accuracy': srs.percentage(goal.correct_answers or 0, words_practiced),
        'target_accuracy': goal.target_accuracy,
        'learn_goal_met': words_learned >= goal.words_to_learn,
        'practice_goal_met': words_practiced >= goal.words_to_practice,
    }
