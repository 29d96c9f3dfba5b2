"""Statistics Service - Progress reporting over the catalog and the learning list"""
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import func

from models import db
from models.learning_entry import LearningEntry
from models.practice_session import PracticeSession
from models.word import Word
from services import spaced_repetition as srs
from services.learning_service import get_all_entries

logger = logging.getLogger(__name__)

TOP_PRACTICED_LIMIT = 5
NEEDS_ATTENTION_LIMIT = 5
NEEDS_ATTENTION_MIN_PRACTICE = 3
NEEDS_ATTENTION_MAX_ACCURACY = 0.5


def get_quick_stats() -> dict:
    """
    Headline counts for the catalog and the learning list.

    Returns:
        dict: {'total_in_catalog', 'total_learning', 'mastered', 'learning'}
    """
    total_in_catalog = db.session.query(func.count(Word.id)).scalar() or 0
    total_learning = db.session.query(func.count(LearningEntry.id)).scalar() or 0
    mastered = db.session.query(func.count(LearningEntry.id)).filter(
        LearningEntry.mastered.is_(True)
    ).scalar() or 0

    return {
        'total_in_catalog': total_in_catalog,
        'total_learning': total_learning,
        'mastered': mastered,
        'learning': total_learning - mastered,
    }


def get_review_stats(now: Optional[datetime] = None) -> dict:
    """Due counts (now / later today / this week) over the learning list"""
    return srs.get_review_stats(get_all_entries(), now=now)


def get_session_stats() -> dict:
    """Number of finished practice sessions and when the last one ended"""
    finished = PracticeSession.query.filter(PracticeSession.finished_at.isnot(None))
    last = finished.order_by(PracticeSession.finished_at.desc()).first()
    last_practice = srs.as_utc(last.finished_at) if last else None

    return {
        'total_practice_sessions': finished.count(),
        'last_practice_date': last_practice.isoformat() if last_practice else None,
    }


def _word_summary(entry: LearningEntry) -> dict:
    word = entry.word
    practice_count = entry.practice_count or 0
    return {
        'word_id': entry.word_id,
        'native': srs.first_form(word.native),
        'target': list(word.target),
        'practice_count': practice_count,
        'accuracy': srs.percentage(entry.correct_count or 0, practice_count),
    }


def get_overview() -> dict:
    """
    Full statistics overview for the learning list.

    Returns:
        dict: {
            'total': int,
            'mastered': int,
            'learning': int,
            'mastered_percent': int,
            'total_practice_sessions': int,
            'last_practice_date': str or None,
            'categories': [{'name', 'total', 'mastered', 'progress'}, ...],
            'most_practiced': [{'word_id', 'native', 'target', 'practice_count', 'accuracy'}, ...],
            'needs_attention': [...same shape...]
        }
    """
    entries = get_all_entries()
    total = len(entries)
    mastered = sum(1 for entry in entries if entry.mastered)

    categories = {}
    for entry in entries:
        bucket = categories.setdefault(entry.word.category, {'total': 0, 'mastered': 0})
        bucket['total'] += 1
        if entry.mastered:
            bucket['mastered'] += 1

    category_rows = [
        {
            'name': name,
            'total': counts['total'],
            'mastered': counts['mastered'],
            'progress': srs.percentage(counts['mastered'], counts['total']),
        }
        for name, counts in sorted(categories.items())
    ]

    practiced = [entry for entry in entries if (entry.practice_count or 0) > 0]
    most_practiced = sorted(practiced, key=lambda entry: entry.practice_count, reverse=True)

    needs_attention = [
        entry for entry in entries
        if (entry.practice_count or 0) >= NEEDS_ATTENTION_MIN_PRACTICE
        and (entry.correct_count or 0) / entry.practice_count < NEEDS_ATTENTION_MAX_ACCURACY
    ]

    overview = {
        'total': total,
        'mastered': mastered,
        'learning': total - mastered,
        'mastered_percent': srs.percentage(mastered, total),
        'categories': category_rows,
        'most_practiced': [_word_summary(entry) for entry in most_practiced[:TOP_PRACTICED_LIMIT]],
        'needs_attention': [_word_summary(entry) for entry in needs_attention[:NEEDS_ATTENTION_LIMIT]],
    }
    overview.update(get_session_stats())
    return overview
