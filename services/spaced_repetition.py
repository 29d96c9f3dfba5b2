"""
Spaced repetition engine (SM-2) for vocabulary learning entries.

Everything in this module is a pure function over in-memory entries. An
"entry" is any object exposing the scheduling attributes of
``models.learning_entry.LearningEntry`` (the ORM model itself, or any
stand-in). Missing or ``None`` counters are read as their zero-value
default, so partially initialised records (e.g. words imported without any
prior progress) schedule exactly like fresh ones.

Flow for a single answer:
    answer -> quality estimate -> SM-2 update (ease, interval, repetitions)
           -> per-direction counters -> auto-mastery check

Read-side queries (due queue, review stats, smart-practice priority) never
mutate entries.
"""

import math
import random
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Iterable, List, Mapping, NamedTuple, Optional, Sequence, Tuple

SECONDS_PER_DAY = 24 * 60 * 60
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# Stand-in for "days since last practice" when a word was never practiced
NEVER_PRACTICED_DAYS = 999

MIN_QUALITY = 0
MAX_QUALITY = 5
PASSING_QUALITY = 3


class Direction(Enum):
    """Recall direction for a practice answer"""
    FI_EN = 'fi-en'
    EN_FI = 'en-fi'

    @classmethod
    def parse(cls, value) -> 'Direction':
        """
        Resolve a direction from its wire form.

        Accepts a Direction, 'fi-en' / 'en-fi', or the short labels
        'A' (fi-en) and 'B' (en-fi), case-insensitively.

        Raises:
            ValueError: If the value names no known direction
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            normalized = value.strip().lower()
            aliases = {'a': cls.FI_EN, 'b': cls.EN_FI}
            if normalized in aliases:
                return aliases[normalized]
            for direction in cls:
                if direction.value == normalized:
                    return direction
        raise ValueError(f"Invalid direction: {value!r}. Must be one of: 'fi-en', 'en-fi', 'A', 'B'")

    @property
    def field_suffix(self) -> str:
        return self.value.replace('-', '_')

    @property
    def opposite(self) -> 'Direction':
        return Direction.EN_FI if self is Direction.FI_EN else Direction.FI_EN


class MasteryStatus(Enum):
    """Outcome of an answer with respect to mastery"""
    NEWLY_MASTERED = 'newly_mastered'
    ALREADY_MASTERED = 'already_mastered'
    LEARNING = 'learning'


# Practice modes understood by choose_direction
MODE_DUE_REVIEW = 'due-review'
MODE_SMART = 'smart'
MODE_FI_EN = 'fi-en'
MODE_EN_FI = 'en-fi'
MODE_MIXED = 'mixed'
MODE_REVIEW = 'review'

VALID_MODES = [MODE_DUE_REVIEW, MODE_SMART, MODE_FI_EN, MODE_EN_FI, MODE_MIXED, MODE_REVIEW]


@dataclass(frozen=True)
class SM2Settings:
    """SM-2 algorithm constants"""
    default_ease_factor: float = 2.5
    min_ease_factor: float = 1.3
    initial_intervals: Tuple[int, int] = (1, 3)

    def __post_init__(self):
        intervals = tuple(self.initial_intervals)
        if len(intervals) != 2 or any(int(days) < 0 for days in intervals):
            raise ValueError(
                f"initial_intervals must hold exactly two non-negative day counts, got: {self.initial_intervals}"
            )
        if self.min_ease_factor <= 0:
            raise ValueError(f"min_ease_factor must be positive, got: {self.min_ease_factor}")
        object.__setattr__(self, 'initial_intervals', tuple(int(days) for days in intervals))

    @classmethod
    def from_config(cls, mapping: Mapping) -> 'SM2Settings':
        """Build settings from a config mapping such as Flask's app.config"""
        return cls(
            default_ease_factor=float(mapping.get('SM2_DEFAULT_EASE_FACTOR', cls.default_ease_factor)),
            min_ease_factor=float(mapping.get('SM2_MIN_EASE_FACTOR', cls.min_ease_factor)),
            initial_intervals=tuple(mapping.get('SM2_INITIAL_INTERVALS', cls.initial_intervals)),
        )


@dataclass(frozen=True)
class MasterySettings:
    """Auto-mastery thresholds"""
    streak_required: int = 3
    min_attempts: int = 4
    accuracy_threshold: float = 0.85

    def __post_init__(self):
        if self.streak_required < 1:
            raise ValueError(f"streak_required must be at least 1, got: {self.streak_required}")
        if self.min_attempts < 0:
            raise ValueError(f"min_attempts must be non-negative, got: {self.min_attempts}")
        if not 0 < self.accuracy_threshold <= 1:
            raise ValueError(f"accuracy_threshold must be in (0, 1], got: {self.accuracy_threshold}")

    @classmethod
    def from_config(cls, mapping: Mapping) -> 'MasterySettings':
        """Build settings from a config mapping such as Flask's app.config"""
        return cls(
            streak_required=int(mapping.get('MASTERY_STREAK_REQUIRED', cls.streak_required)),
            min_attempts=int(mapping.get('MASTERY_MIN_ATTEMPTS', cls.min_attempts)),
            accuracy_threshold=float(mapping.get('MASTERY_ACCURACY_THRESHOLD', cls.accuracy_threshold)),
        )


DEFAULT_SM2_SETTINGS = SM2Settings()
DEFAULT_MASTERY_SETTINGS = MasterySettings()


class ReviewResult(NamedTuple):
    """Scheduling state produced by one SM-2 update"""
    ease_factor: float
    interval: int
    repetitions: int
    next_review_date: datetime
    last_reviewed: datetime


@dataclass
class AnswerOutcome:
    """Everything the caller needs to report back after one answer"""
    mastery_status: MasteryStatus
    quality: int
    streak_before: int
    ease_factor: float
    interval: int
    repetitions: int
    next_review_date: datetime

    @property
    def next_review_text(self) -> str:
        return format_next_review(self.interval)


# Time helpers

def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalise a timestamp to aware UTC (SQLite hands back naive values)"""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _resolve_now(now: Optional[datetime]) -> datetime:
    return as_utc(now) if now is not None else utcnow()


def _days_between(later: datetime, earlier: datetime) -> float:
    return (later - earlier).total_seconds() / SECONDS_PER_DAY


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (not banker's rounding)"""
    return int(math.floor(value + 0.5))


def _counter(entry, name: str) -> int:
    value = getattr(entry, name, None)
    return value if value is not None else 0


# Quality Estimator

def calculate_quality(is_correct: bool, streak_before: int) -> int:
    """
    Map one answer to an SM-2 quality score (0-5).

    Args:
        is_correct: Whether the answer was correct
        streak_before: Directional streak BEFORE this answer was applied

    Returns:
        int: 0 failing cold, 1 broke a streak, 3/4/5 for correct answers
             on a streak of 0-1 / 2 / 3+

    Example:
        >>> calculate_quality(False, 2)
        1
        >>> calculate_quality(True, 3)
        5
    """
    streak = max(0, streak_before or 0)

    if not is_correct:
        return 1 if streak > 0 else 0

    if streak >= 3:
        return 5
    if streak == 2:
        return 4
    return 3


# Review Scheduler (SM-2)

def calculate_sm2_review(
    ease_factor: Optional[float],
    interval: Optional[int],
    repetitions: Optional[int],
    quality: int,
    now: Optional[datetime] = None,
    settings: SM2Settings = DEFAULT_SM2_SETTINGS
) -> ReviewResult:
    """
    Calculate the next SM-2 scheduling state.

    The interval is derived from the PRE-update repetition count and ease
    factor; the ease factor is then updated unconditionally, even for a
    failed recall, and clamped to the configured minimum.

    Args:
        ease_factor: Current ease factor (None -> default)
        interval: Current interval in days (None -> 0)
        repetitions: Successful reviews in a row (None -> 0)
        quality: Response quality (0-5)
        now: Reference time (defaults to current UTC time)
        settings: Algorithm constants

    Returns:
        ReviewResult: (ease_factor, interval, repetitions, next_review_date, last_reviewed)

    Raises:
        ValueError: If quality is outside 0-5

    Example:
        >>> result = calculate_sm2_review(2.5, 0, 0, quality=5)
        >>> result.interval, result.repetitions
        (1, 1)
    """
    if isinstance(quality, bool) or not isinstance(quality, int) or not MIN_QUALITY <= quality <= MAX_QUALITY:
        raise ValueError(f"quality must be an integer between {MIN_QUALITY} and {MAX_QUALITY}, got: {quality!r}")

    ease = settings.default_ease_factor if ease_factor is None else ease_factor
    days = 0 if interval is None else interval
    reps = 0 if repetitions is None else repetitions
    first_step, second_step = settings.initial_intervals

    if quality < PASSING_QUALITY:
        reps = 0
        days = first_step
    else:
        if reps == 0:
            days = first_step
        elif reps == 1:
            days = second_step
        else:
            days = round_half_up(days * ease)
        reps += 1

    lapse = MAX_QUALITY - quality
    ease = ease + (0.1 - lapse * (0.08 + lapse * 0.02))
    ease = max(settings.min_ease_factor, ease)

    reviewed_at = _resolve_now(now)
    return ReviewResult(
        ease_factor=ease,
        interval=days,
        repetitions=reps,
        next_review_date=reviewed_at + timedelta(days=days),
        last_reviewed=reviewed_at
    )


def initialize_sm2_fields(entry, settings: SM2Settings = DEFAULT_SM2_SETTINGS) -> None:
    """Fill in scheduling fields that were never set; next_review_date stays unset (due now)"""
    if getattr(entry, 'ease_factor', None) is None:
        entry.ease_factor = settings.default_ease_factor
    if getattr(entry, 'interval', None) is None:
        entry.interval = 0
    if getattr(entry, 'repetitions', None) is None:
        entry.repetitions = 0


def apply_sm2_review(
    entry,
    quality: int,
    now: Optional[datetime] = None,
    settings: SM2Settings = DEFAULT_SM2_SETTINGS
) -> ReviewResult:
    """Run calculate_sm2_review for an entry and write the result back onto it"""
    initialize_sm2_fields(entry, settings)
    result = calculate_sm2_review(
        entry.ease_factor,
        entry.interval,
        entry.repetitions,
        quality,
        now=now,
        settings=settings
    )

    entry.ease_factor = result.ease_factor
    entry.interval = result.interval
    entry.repetitions = result.repetitions
    entry.next_review_date = result.next_review_date
    entry.last_reviewed = result.last_reviewed

    return result


def format_next_review(interval_days: int) -> str:
    """Human-readable form of an interval, e.g. 'tomorrow' or 'in 3 weeks'"""
    if interval_days <= 0:
        return 'today'
    if interval_days == 1:
        return 'tomorrow'
    if interval_days < 7:
        return f'in {interval_days} days'
    if interval_days < 14:
        return 'in 1 week'
    if interval_days < 30:
        return f'in {round_half_up(interval_days / 7)} weeks'
    if interval_days < 60:
        return 'in 1 month'
    return f'in {round_half_up(interval_days / 30)} months'


# Mastery Evaluator

def check_auto_mastery(entry, settings: MasterySettings = DEFAULT_MASTERY_SETTINGS) -> bool:
    """
    Decide whether an entry has earned mastery.

    Either branch is sufficient:
    - both directional streaks reach streak_required, or
    - both directions have at least min_attempts attempts AND both
      directions' accuracy reaches accuracy_threshold.

    Args:
        entry: Learning entry (counters may be missing)
        settings: Mastery thresholds

    Returns:
        bool: True if the entry qualifies for mastery
    """
    streak_fi_en = _counter(entry, 'streak_fi_en')
    streak_en_fi = _counter(entry, 'streak_en_fi')

    if streak_fi_en >= settings.streak_required and streak_en_fi >= settings.streak_required:
        return True

    attempts_fi_en = _counter(entry, 'attempts_fi_en')
    attempts_en_fi = _counter(entry, 'attempts_en_fi')

    if attempts_fi_en >= settings.min_attempts and attempts_en_fi >= settings.min_attempts:
        # min_attempts of 0 would allow a zero denominator
        if attempts_fi_en == 0 or attempts_en_fi == 0:
            return False
        accuracy_fi_en = _counter(entry, 'correct_fi_en') / attempts_fi_en
        accuracy_en_fi = _counter(entry, 'correct_en_fi') / attempts_en_fi
        if accuracy_fi_en >= settings.accuracy_threshold and accuracy_en_fi >= settings.accuracy_threshold:
            return True

    return False


def mark_mastered(entry, now: Optional[datetime] = None) -> bool:
    """Manually master an entry. Returns False if it was already mastered."""
    if entry.mastered:
        return False
    entry.mastered = True
    entry.mastered_at = _resolve_now(now)
    return True


def reset_mastery(entry) -> bool:
    """
    Manually move a mastered entry back to learning.

    This is the only way mastery is ever cleared. Both directional streaks
    are zeroed, so the streak branch of check_auto_mastery starts over.
    Attempt and correct counters are kept, so an entry that still meets
    the accuracy branch re-masters on its next answer.
    Returns False if the entry was not mastered.
    """
    if not entry.mastered:
        return False
    entry.mastered = False
    entry.mastered_at = None
    entry.streak_fi_en = 0
    entry.streak_en_fi = 0
    return True


def update_word_stats(
    entry,
    direction,
    is_correct: bool,
    now: Optional[datetime] = None,
    settings: MasterySettings = DEFAULT_MASTERY_SETTINGS
) -> MasteryStatus:
    """
    Apply one answer to the per-direction counters and evaluate mastery.

    Args:
        entry: Learning entry to mutate
        direction: Direction (or its wire form) the word was asked in
        is_correct: Whether the answer was correct
        now: Answer time (defaults to current UTC time)
        settings: Mastery thresholds

    Returns:
        MasteryStatus: NEWLY_MASTERED on the answer that crosses the
        threshold, ALREADY_MASTERED for entries mastered before this
        answer, LEARNING otherwise
    """
    direction = Direction.parse(direction)
    answered_at = _resolve_now(now)
    suffix = direction.field_suffix

    attempts_field = f'attempts_{suffix}'
    correct_field = f'correct_{suffix}'
    streak_field = f'streak_{suffix}'

    setattr(entry, attempts_field, _counter(entry, attempts_field) + 1)
    if is_correct:
        setattr(entry, correct_field, _counter(entry, correct_field) + 1)
        setattr(entry, streak_field, _counter(entry, streak_field) + 1)
    else:
        setattr(entry, correct_field, _counter(entry, correct_field))
        setattr(entry, streak_field, 0)
    setattr(entry, f'last_practiced_{suffix}', answered_at)

    entry.practice_count = _counter(entry, 'practice_count') + 1
    entry.correct_count = _counter(entry, 'correct_count') + (1 if is_correct else 0)

    if getattr(entry, 'mastered', False):
        return MasteryStatus.ALREADY_MASTERED

    if check_auto_mastery(entry, settings):
        entry.mastered = True
        entry.mastered_at = answered_at
        return MasteryStatus.NEWLY_MASTERED

    return MasteryStatus.LEARNING


def record_answer(
    entry,
    direction,
    is_correct: bool,
    now: Optional[datetime] = None,
    sm2_settings: SM2Settings = DEFAULT_SM2_SETTINGS,
    mastery_settings: MasterySettings = DEFAULT_MASTERY_SETTINGS
) -> AnswerOutcome:
    """
    Full pipeline for one practice answer.

    The directional streak is captured before the counters change so the
    quality score reflects the streak the learner brought into the answer.

    Example:
        >>> outcome = record_answer(entry, 'fi-en', is_correct=True)
        >>> outcome.mastery_status
        <MasteryStatus.LEARNING: 'learning'>
    """
    direction = Direction.parse(direction)
    answered_at = _resolve_now(now)

    streak_before = _counter(entry, f'streak_{direction.field_suffix}')
    mastery_status = update_word_stats(entry, direction, is_correct, now=answered_at, settings=mastery_settings)
    quality = calculate_quality(is_correct, streak_before)
    review = apply_sm2_review(entry, quality, now=answered_at, settings=sm2_settings)

    return AnswerOutcome(
        mastery_status=mastery_status,
        quality=quality,
        streak_before=streak_before,
        ease_factor=review.ease_factor,
        interval=review.interval,
        repetitions=review.repetitions,
        next_review_date=review.next_review_date
    )


# Due-Set Selector

def is_word_due_for_review(entry, now: Optional[datetime] = None) -> bool:
    next_review = as_utc(getattr(entry, 'next_review_date', None))
    if next_review is None:
        return True
    return _resolve_now(now) >= next_review


def overdue_days(entry, now: Optional[datetime] = None) -> float:
    """Days past the scheduled review; an unscheduled entry counts from the epoch"""
    next_review = as_utc(getattr(entry, 'next_review_date', None)) or EPOCH
    return _days_between(_resolve_now(now), next_review)


def get_words_due_for_review(
    entries: Iterable,
    include_mastered: bool = False,
    now: Optional[datetime] = None
) -> List:
    """
    Build the review queue: due entries, most overdue first.

    Args:
        entries: Learning entries in their natural (input) order
        include_mastered: Whether mastered entries may be queued
        now: Reference time (defaults to current UTC time)

    Returns:
        list: Due entries ordered by descending overdue magnitude. Ties
        keep their input order.
    """
    now = _resolve_now(now)
    due = [
        entry for entry in entries
        if (include_mastered or not getattr(entry, 'mastered', False))
        and is_word_due_for_review(entry, now)
    ]
    # sorted() is stable, and stays stable with reverse=True
    return sorted(due, key=lambda entry: overdue_days(entry, now), reverse=True)


def get_review_stats(entries: Iterable, now: Optional[datetime] = None) -> dict:
    """Count non-mastered entries due now, later today, and within the week"""
    now = _resolve_now(now)
    stats = {'due_now': 0, 'due_today': 0, 'due_this_week': 0}

    for entry in entries:
        if getattr(entry, 'mastered', False):
            continue
        next_review = as_utc(getattr(entry, 'next_review_date', None))
        if next_review is None:
            stats['due_now'] += 1
            continue

        days_until = _days_between(next_review, now)
        if days_until <= 0:
            stats['due_now'] += 1
        elif days_until <= 1:
            stats['due_today'] += 1
        elif days_until <= 7:
            stats['due_this_week'] += 1

    return stats


# Priority Scorer

def get_word_priority(entry, now: Optional[datetime] = None) -> float:
    """
    Smart-practice priority (higher = practice sooner).

    priority = days_since_last_practice * (1.5 - accuracy), where the last
    practice is the later of both directions and accuracy spans both
    directions (0.5 when never attempted). A never-practiced entry scores
    999 * 1.5 = 1498.5.
    """
    now = _resolve_now(now)
    practiced = [
        as_utc(getattr(entry, 'last_practiced_fi_en', None)),
        as_utc(getattr(entry, 'last_practiced_en_fi', None)),
    ]
    practiced = [stamp for stamp in practiced if stamp is not None]
    days_since = _days_between(now, max(practiced)) if practiced else NEVER_PRACTICED_DAYS

    total_attempts = _counter(entry, 'attempts_fi_en') + _counter(entry, 'attempts_en_fi')
    total_correct = _counter(entry, 'correct_fi_en') + _counter(entry, 'correct_en_fi')
    accuracy = total_correct / total_attempts if total_attempts > 0 else 0.5

    return days_since * (1.5 - accuracy)


def sort_by_priority(entries: Iterable, now: Optional[datetime] = None) -> List:
    now = _resolve_now(now)
    return sorted(entries, key=lambda entry: get_word_priority(entry, now), reverse=True)


def choose_direction(entry, mode: str, rng: Optional[random.Random] = None) -> Direction:
    """
    Pick the direction to ask an entry in for a given practice mode.

    Fixed-direction modes return their direction. Mixed and review modes
    pick at random. Smart and due-review modes ask the weaker direction
    (lower streak, fi-en on a tie) with a 30% chance of flipping.
    """
    rng = rng or random
    if mode == MODE_FI_EN:
        return Direction.FI_EN
    if mode == MODE_EN_FI:
        return Direction.EN_FI
    if mode in (MODE_MIXED, MODE_REVIEW):
        return Direction.FI_EN if rng.random() > 0.5 else Direction.EN_FI
    if mode not in (MODE_SMART, MODE_DUE_REVIEW):
        raise ValueError(f"Invalid practice mode: '{mode}'. Must be one of: {VALID_MODES}")

    if _counter(entry, 'streak_fi_en') <= _counter(entry, 'streak_en_fi'):
        direction = Direction.FI_EN
    else:
        direction = Direction.EN_FI

    if rng.random() > 0.7:
        direction = direction.opposite

    return direction


def percentage(correct: int, total: int) -> int:
    return round_half_up(correct / total * 100) if total > 0 else 0


def first_form(forms: Sequence[str]) -> str:
    return forms[0] if forms else ''
