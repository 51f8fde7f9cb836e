"""Exceptions raised by the progress and assessment services."""


class TutorError(Exception):
    """Base class for every error the core raises."""


class InvalidInput(TutorError):
    """Malformed arguments, including a malformed question set at start."""


class InvalidTarget(InvalidInput):
    pass


class InvalidState(TutorError):
    """Operation attempted in the wrong session state."""


class NotActive(InvalidState):
    def __init__(self, operation: str):
        super().__init__(f"Cannot {operation}: no assessment session is active")
        self.operation = operation


class SessionAlreadyActive(InvalidState):
    def __init__(self, session_id: str):
        super().__init__(f"Session {session_id} is still active; finish or abandon it first")
        self.session_id = session_id


class UnknownQuestion(TutorError):
    def __init__(self, ordinal: int):
        super().__init__(f"No question with ordinal {ordinal} in this session")
        self.ordinal = ordinal


class InvalidOption(TutorError):
    def __init__(self, ordinal: int, key: str):
        super().__init__(f"Option {key!r} is not a choice of question {ordinal}")
        self.ordinal = ordinal
        self.key = key


class PersistenceError(TutorError):
    """The key/value store could not be read or written."""
