"""
API Pydantic Models

Request and response models for the JSON API:
- Learning models (LearningEntrySchema, AnswerEvent, MasteryUpdate)
- Word models (WordCreate, WordUpdate)
- Practice models (PracticeSessionStart, PracticeAnswer)
- Goal models (DailyGoalUpdate)
"""

from .learning_models import LearningEntrySchema, AnswerEvent, MasteryUpdate
from .word_models import WordCreate, WordUpdate
from .practice_models import PracticeSessionStart, PracticeAnswer
from .goal_models import DailyGoalUpdate

__all__ = [
    'LearningEntrySchema',
    'AnswerEvent',
    'MasteryUpdate',
    'WordCreate',
    'WordUpdate',
    'PracticeSessionStart',
    'PracticeAnswer',
    'DailyGoalUpdate'
]
