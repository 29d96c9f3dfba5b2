from models import db
from datetime import datetime, timezone
from sqlalchemy.orm import validates

# Kinds of vocabulary entries
ENTRY_TYPES = ['word', 'phrase', 'sentence', 'expression']

DEFAULT_CATEGORIES = [
    'grocery',
    'weather',
    'automobiles',
    'body parts',
    'greetings',
    'numbers',
    'colors',
    'food & drinks',
    'family',
    'animals',
    'verbs',
    'adjectives',
    'question words',
    'pronouns',
    'common phrases',
    'spoken finnish',
    'other',
]


def normalize_forms(value, field_name='forms'):
    """
    Resolve a "string or list of strings" value into a canonical list.

    Forms are stripped, blanks dropped, and case-insensitive duplicates
    removed while keeping the first spelling and the original order.

    Raises:
        ValueError: If no usable form remains
    """
    if value is None:
        raise ValueError(f'{field_name} is required')
    if isinstance(value, str):
        candidates = [value]
    elif isinstance(value, (list, tuple)):
        candidates = list(value)
    else:
        raise ValueError(f'{field_name} must be a string or a list of strings')

    forms = []
    seen = set()
    for candidate in candidates:
        if not isinstance(candidate, str):
            raise ValueError(f'{field_name} must only contain strings')
        text = candidate.strip()
        if text and text.lower() not in seen:
            seen.add(text.lower())
            forms.append(text)

    if not forms:
        raise ValueError(f'{field_name} cannot be empty or whitespace')
    return forms


class Word(db.Model):
    """Word model - a native/target language pair with optional alternative forms"""
    __tablename__ = 'words'

    id = db.Column(db.Integer, primary_key=True)

    # Finnish forms, e.g. ["kissa"] or ["mitä", "mitäs"]
    native = db.Column(db.JSON, nullable=False)

    # English forms, e.g. ["cat"] or ["what", "what's that"]
    target = db.Column(db.JSON, nullable=False)

    category = db.Column(db.String, nullable=False, default='other', index=True)

    # word, phrase, sentence, expression
    entry_type = db.Column(db.String, nullable=False, default='word')

    example = db.Column(db.String, default='')
    notes = db.Column(db.String, default='')

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc)
    )

    # Relationships
    learning_entry = db.relationship(
        'LearningEntry',
        back_populates='word',
        uselist=False,
        cascade='all, delete-orphan'
    )

    @validates('native')
    def validate_native(self, key, value):
        return normalize_forms(value, 'native')

    @validates('target')
    def validate_target(self, key, value):
        return normalize_forms(value, 'target')

    @validates('category')
    def validate_category(self, key, category):
        if not category or not category.strip():
            return 'other'
        return category.strip().lower()

    @validates('entry_type')
    def validate_entry_type(self, key, entry_type):
        if entry_type not in ENTRY_TYPES:
            raise ValueError(f'Invalid entry_type: {entry_type}. Must be one of: {ENTRY_TYPES}')
        return entry_type

    @property
    def is_learning(self):
        return self.learning_entry is not None

    def to_dict(self):
        entry = self.learning_entry
        return {
            'id': self.id,
            'native': list(self.native),
            'target': list(self.target),
            'category': self.category,
            'entry_type': self.entry_type,
            'example': self.example or '',
            'notes': self.notes or '',
            'is_learning': entry is not None,
            'mastered': bool(entry.mastered) if entry else False,
            'practice_count': (entry.practice_count or 0) if entry else 0,
            'correct_count': (entry.correct_count or 0) if entry else 0,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f'<Word {self.native[0] if self.native else "?"} ({self.category})>'
