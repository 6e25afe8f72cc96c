from .models import (
    Mode, Signal, Word, WordRecord, WordBank, SessionLogEntry, ProfileData,
    promote_level, demote_level
)
from .engine import SessionEngine, SessionState, SessionSummary
from .profile import ProfileSession
from .interfaces import WordSource, ProfileStore
from .errors import (
    WordbankError, GenerationError, PersistenceError, ProfileLoadError, InvalidFeedback
)
from .config import (
    CEFR_LEVELS, INITIAL_LEVEL, NEW_WORD_LIMIT, SCHEDULE, MAX_RANK,
    LANGUAGES, DEFAULT_LANGUAGE
)

__all__ = [
    'Mode', 'Signal', 'Word', 'WordRecord', 'WordBank', 'SessionLogEntry', 'ProfileData',
    'promote_level', 'demote_level',
    'SessionEngine', 'SessionState', 'SessionSummary', 'ProfileSession',
    'WordSource', 'ProfileStore',
    'WordbankError', 'GenerationError', 'PersistenceError', 'ProfileLoadError',
    'InvalidFeedback',
    'CEFR_LEVELS', 'INITIAL_LEVEL', 'NEW_WORD_LIMIT', 'SCHEDULE', 'MAX_RANK',
    'LANGUAGES', 'DEFAULT_LANGUAGE'
]
