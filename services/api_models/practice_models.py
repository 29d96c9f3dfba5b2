"""
Practice Pydantic Models

Request bodies for practice sessions.
"""

from pydantic import BaseModel, Field, field_validator

from services.spaced_repetition import Direction, VALID_MODES


class PracticeSessionStart(BaseModel):
    """
    Example:
    {"mode": "smart", "count": 10}
    """
    mode: str = Field(description=f"One of: {', '.join(VALID_MODES)}")
    count: int = Field(default=10, ge=1)

    @field_validator('mode')
    @classmethod
    def validate_mode(cls, value):
        if value not in VALID_MODES:
            raise ValueError(f"Invalid practice mode: '{value}'. Must be one of: {VALID_MODES}")
        return value


class PracticeAnswer(BaseModel):
    """
    Example:
    {"word_id": 42, "direction": "fi-en", "user_answer": "cat"}
    """
    word_id: int
    direction: Direction
    user_answer: str

    @field_validator('direction', mode='before')
    @classmethod
    def parse_direction(cls, value):
        return Direction.parse(value)
