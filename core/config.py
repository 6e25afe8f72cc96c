"""Configuration constants for wordbank application."""

HOUR = 3600 * 1000
DAY = 24 * HOUR

# Difficulty axis
CEFR_LEVELS = ['A1', 'A2', 'B1', 'B2', 'C1', 'C2']
INITIAL_LEVEL = 'A1'

# Session pacing
NEW_WORD_LIMIT = 5            # New words introduced per session
PROMOTE_AFTER_DEFERRED = 5    # Consecutive "remind me later" answers that raise the level
DEMOTE_AFTER_REFRESHED = 3    # Consecutive "new word" answers that lower the level

# Re-exposure delay (ms) per mastery rank
SCHEDULE = {
    1: 3 * HOUR,
    2: 24 * HOUR,
    3: 48 * HOUR,
    4: 5 * DAY,
    5: 20 * DAY,
    6: 100 * DAY,
    7: 365 * DAY,
}
MAX_RANK = len(SCHEDULE)

# Rank written by the bulk clear instead of deleting the record
CLEARED_RANK = -1

# Supported target languages: name -> speech locale
LANGUAGES = {
    'Dutch': 'nl-NL',
    'Italian': 'it-IT',
    'French': 'fr-FR',
    'Spanish': 'es-ES',
}
DEFAULT_LANGUAGE = 'Dutch'

GEMINI_MODEL = 'gemini-2.5-flash'
