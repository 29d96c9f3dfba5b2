from models import db
from datetime import datetime, timezone


class PracticeSession(db.Model):
    """PracticeSession model - one run through a batch of practice prompts"""
    __tablename__ = 'practice_sessions'

    id = db.Column(db.Integer, primary_key=True)

    # due-review, smart, fi-en, en-fi, mixed, review
    mode = db.Column(db.String, nullable=False)

    started_at = db.Column(db.DateTime, nullable=False, default=lambda: datetime.now(timezone.utc), index=True)
    finished_at = db.Column(db.DateTime)

    # Prompts handed out when the session started: [{"word_id", "direction", "answered"}, ...]
    prompts = db.Column(db.JSON, nullable=False, default=list)
    planned_count = db.Column(db.Integer, default=0)

    answered_count = db.Column(db.Integer, default=0)
    correct_count = db.Column(db.Integer, default=0)
    newly_mastered_count = db.Column(db.Integer, default=0)

    @property
    def is_finished(self):
        return self.finished_at is not None

    def find_prompt(self, word_id, direction):
        for prompt in self.prompts or []:
            if prompt['word_id'] == word_id and prompt['direction'] == direction:
                return prompt
        return None

    def __repr__(self):
        return f'<PracticeSession {self.id} mode={self.mode} {self.correct_count}/{self.answered_count}>'
