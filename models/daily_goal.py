from models import db
from datetime import datetime, timezone
from sqlalchemy.orm import validates


class DailyGoal(db.Model):
    """DailyGoal model - targets and progress for one calendar day"""
    __tablename__ = 'daily_goals'

    id = db.Column(db.Integer, primary_key=True)

    day = db.Column(db.Date, nullable=False, unique=True, default=lambda: datetime.now(timezone.utc).date())

    # Targets
    words_to_learn = db.Column(db.Integer, nullable=False, default=3)
    words_to_practice = db.Column(db.Integer, nullable=False, default=10)
    target_accuracy = db.Column(db.Integer, nullable=False, default=80)  # percent

    # Progress
    words_learned = db.Column(db.Integer, default=0)
    words_practiced = db.Column(db.Integer, default=0)
    correct_answers = db.Column(db.Integer, default=0)

    @validates('words_to_learn', 'words_to_practice')
    def validate_positive_target(self, key, value):
        if value is None or value < 1:
            raise ValueError(f'{key} must be a positive integer')
        return value

    @validates('target_accuracy')
    def validate_target_accuracy(self, key, value):
        if value is None or not 0 <= value <= 100:
            raise ValueError('target_accuracy must be between 0 and 100')
        return value

    def __repr__(self):
        return f'<DailyGoal {self.day} learned={self.words_learned} practiced={self.words_practiced}>'
