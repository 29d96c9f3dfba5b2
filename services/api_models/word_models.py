"""
Word Pydantic Models

Request bodies for creating and editing vocabulary words. Native and target
text accept either a single string or a list of alternative forms.
"""

from pydantic import BaseModel, Field
from typing import List, Optional, Union


class WordCreate(BaseModel):
    """
    New word definition.

    Example:
    {
        "native": "kissa",
        "target": ["cat", "kitty"],
        "category": "animals",
        "entry_type": "word",
        "example": "Kissa nukkuu.",
        "notes": ""
    }
    """
    native: Union[str, List[str]] = Field(description="Finnish form(s)")
    target: Union[str, List[str]] = Field(description="English form(s)")
    category: str = Field(default='other')
    entry_type: str = Field(default='word')
    example: str = Field(default='')
    notes: str = Field(default='')


class WordUpdate(BaseModel):
    """Partial update of a word definition; learning progress is untouched"""
    native: Optional[Union[str, List[str]]] = None
    target: Optional[Union[str, List[str]]] = None
    category: Optional[str] = None
    entry_type: Optional[str] = None
    example: Optional[str] = None
    notes: Optional[str] = None
