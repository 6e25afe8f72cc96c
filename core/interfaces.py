"""Abstract base classes for dependency injection."""

from abc import ABC, abstractmethod

from .models import ProfileData, SessionLogEntry, Word, WordRecord


class WordSource(ABC):
    """Abstract base class for the generator of new vocabulary."""

    @abstractmethod
    def request_word(self, language: str, level: str, exclusions: list[str]) -> Word:
        """Return one word at `level` that is not in `exclusions`.

        Exclusion is best effort. Raises GenerationError on failure.
        """
        pass


class ProfileStore(ABC):
    """Abstract base class for per-profile, per-language persistence."""

    @abstractmethod
    def read_all(self, profile_id: str, language: str) -> ProfileData:
        """Load records, logs and level. Raises ProfileLoadError."""
        pass

    @abstractmethod
    def upsert_record(self, profile_id: str, language: str, record: WordRecord) -> None:
        """Insert or replace a word record by id. Raises PersistenceError."""
        pass

    @abstractmethod
    def append_log(self, profile_id: str, language: str, entry: SessionLogEntry) -> None:
        """Append a session log entry. Raises PersistenceError."""
        pass

    @abstractmethod
    def set_level(self, profile_id: str, language: str, level: str) -> None:
        """Store the current difficulty level. Raises PersistenceError."""
        pass
