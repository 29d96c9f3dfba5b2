"""Service-layer exceptions mapped to HTTP status codes by the routes"""


class NotFoundError(ValueError):
    """A referenced record does not exist"""


class WordNotFound(NotFoundError):
    def __init__(self, word_id):
        self.word_id = word_id
        super().__init__(f"Word {word_id} not found")


class LearningEntryNotFound(NotFoundError):
    def __init__(self, word_id):
        self.word_id = word_id
        super().__init__(f"Word {word_id} is not in the learning list")


class PracticeSessionNotFound(NotFoundError):
    def __init__(self, session_id):
        self.session_id = session_id
        super().__init__(f"Practice session {session_id} not found")


class ConcurrentUpdateError(RuntimeError):
    """The learning entry was modified by another writer since it was loaded"""
