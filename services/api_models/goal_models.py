"""
Goal Pydantic Models
"""

from pydantic import BaseModel, Field
from typing import Optional


class DailyGoalUpdate(BaseModel):
    """
    Change today's targets; omitted fields keep their value.

    Example:
    {"words_to_learn": 5, "words_to_practice": 20, "target_accuracy": 90}
    """
    words_to_learn: Optional[int] = Field(default=None, ge=1)
    words_to_practice: Optional[int] = Field(default=None, ge=1)
    target_accuracy: Optional[int] = Field(default=None, ge=0, le=100)
