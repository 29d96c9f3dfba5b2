from models import db
from datetime import datetime, timezone


class LearningEntry(db.Model):
    """LearningEntry model - a word in the active study set and its SM-2 scheduling state"""
    __tablename__ = 'learning_entries'

    id = db.Column(db.Integer, primary_key=True)

    word_id = db.Column(db.Integer, db.ForeignKey('words.id'), nullable=False, unique=True)

    started_learning_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    # Set together; only a manual reset clears them
    mastered = db.Column(db.Boolean, nullable=False, default=False)
    mastered_at = db.Column(db.DateTime)

    # Totals across both directions
    practice_count = db.Column(db.Integer, default=0)
    correct_count = db.Column(db.Integer, default=0)

    # Finnish -> English direction
    streak_fi_en = db.Column(db.Integer, default=0)
    attempts_fi_en = db.Column(db.Integer, default=0)
    correct_fi_en = db.Column(db.Integer, default=0)
    last_practiced_fi_en = db.Column(db.DateTime)

    # English -> Finnish direction
    streak_en_fi = db.Column(db.Integer, default=0)
    attempts_en_fi = db.Column(db.Integer, default=0)
    correct_en_fi = db.Column(db.Integer, default=0)
    last_practiced_en_fi = db.Column(db.DateTime)

    # SM-2 scheduling state; NULL next_review_date means due immediately
    ease_factor = db.Column(db.Float, default=2.5)
    interval = db.Column(db.Integer, default=0)
    repetitions = db.Column(db.Integer, default=0)
    next_review_date = db.Column(db.DateTime, index=True)
    last_reviewed = db.Column(db.DateTime)

    # Optimistic concurrency: stale writes raise StaleDataError on flush
    version = db.Column(db.Integer, nullable=False)

    # Relationships
    word = db.relationship('Word', back_populates='learning_entry')

    __mapper_args__ = {
        'version_id_col': version,
    }

    def __repr__(self):
        return f'<LearningEntry word_id={self.word_id} mastered={self.mastered} interval={self.interval}>'
