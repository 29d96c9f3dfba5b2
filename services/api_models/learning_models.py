"""
Learning Pydantic Models

The camelCase JSON contract for a learning entry's scheduling fields, and
the events that mutate them.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from services.spaced_repetition import Direction, as_utc

COUNTER_FIELDS = (
    'practice_count', 'correct_count',
    'streak_fi_en', 'streak_en_fi',
    'attempts_fi_en', 'attempts_en_fi',
    'correct_fi_en', 'correct_en_fi',
    'interval', 'repetitions',
)

TIMESTAMP_FIELDS = (
    'started_learning_at', 'mastered_at',
    'last_practiced_fi_en', 'last_practiced_en_fi',
    'next_review_date', 'last_reviewed',
)


class LearningEntrySchema(BaseModel):
    """
    Scheduling state of one word in the study set.

    Missing counters read as zero and a missing ease factor as the default,
    so partially initialised records still serialise cleanly.

    Example:
    {
        "wordId": 42,
        "easeFactor": 2.6,
        "interval": 1,
        "repetitions": 1,
        "nextReviewDate": "2026-10-19T09:00:00Z",
        "mastered": false,
        "streakFiEn": 1,
        "streakEnFi": 0,
        ...
    }
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    word_id: int
    started_learning_at: Optional[datetime] = None
    mastered: bool = False
    mastered_at: Optional[datetime] = None
    practice_count: int = 0
    correct_count: int = 0
    streak_fi_en: int = 0
    streak_en_fi: int = 0
    attempts_fi_en: int = 0
    attempts_en_fi: int = 0
    correct_fi_en: int = 0
    correct_en_fi: int = 0
    last_practiced_fi_en: Optional[datetime] = None
    last_practiced_en_fi: Optional[datetime] = None
    ease_factor: float = 2.5
    interval: int = Field(default=0, ge=0)
    repetitions: int = Field(default=0, ge=0)
    next_review_date: Optional[datetime] = None
    last_reviewed: Optional[datetime] = None

    @field_validator(*COUNTER_FIELDS, mode='before')
    @classmethod
    def default_missing_counter(cls, value):
        return 0 if value is None else value

    @field_validator('ease_factor', mode='before')
    @classmethod
    def default_missing_ease(cls, value):
        return 2.5 if value is None else value

    @field_validator('mastered', mode='before')
    @classmethod
    def default_missing_mastered(cls, value):
        return False if value is None else value

    @field_validator(*TIMESTAMP_FIELDS, mode='after')
    @classmethod
    def normalize_timestamp(cls, value):
        return as_utc(value)

    def to_json(self) -> dict:
        return self.model_dump(by_alias=True, mode='json')


class AnswerEvent(BaseModel):
    """
    One recorded practice answer.

    Example:
    {"direction": "A", "isCorrect": true}
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    direction: Direction
    is_correct: bool

    @field_validator('direction', mode='before')
    @classmethod
    def parse_direction(cls, value):
        return Direction.parse(value)


class MasteryUpdate(BaseModel):
    """
    Manual mastery toggle for a batch of words.

    Example:
    {"wordIds": [1, 2, 3], "mastered": true}
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    word_ids: List[int] = Field(min_length=1)
    mastered: bool
