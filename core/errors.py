"""Error taxonomy for wordbank application.

None of these is fatal to the process: generation failures are retried by the
learner, persistence failures are logged while the in-memory session goes on,
and a failed profile load falls back to an empty word bank.
"""


class WordbankError(Exception):
    """Base class for wordbank errors."""


class GenerationError(WordbankError):
    """The word source was unavailable or returned an unusable word."""


class PersistenceError(WordbankError):
    """A write to the profile store failed."""


class ProfileLoadError(WordbankError):
    """The initial bulk read of a profile failed."""


class InvalidFeedback(WordbankError, ValueError):
    """A feedback signal was given that the current mode does not accept."""
