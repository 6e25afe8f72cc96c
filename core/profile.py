"""Per-profile host around the session engine."""

import logging

from .config import CLEARED_RANK, DEFAULT_LANGUAGE, INITIAL_LEVEL
from .engine import SessionEngine, SessionSummary
from .errors import PersistenceError, ProfileLoadError
from .interfaces import ProfileStore, WordSource
from .models import SessionLogEntry, WordBank
from .stats import summarize_logs
from .utils import now_ms

logger = logging.getLogger(__name__)


class ProfileSession:
    """Loads a profile's state for one language and runs sessions over it.

    The word bank is read fully before a session starts and written one
    record at a time while feedback is applied.
    """

    def __init__(self, store: ProfileStore, word_source: WordSource,
                 profile_id: str, language: str = DEFAULT_LANGUAGE, clock=now_ms):
        self.store = store
        self.profile_id = profile_id
        self.language = language
        self.bank = WordBank()
        self.logs = []
        self.level = INITIAL_LEVEL
        self.engine = SessionEngine(word_source, store, profile_id, language, clock=clock)
        self.engine.subscribe('session_over', self._on_session_over)

    def load(self) -> None:
        """Read the profile, falling back to an empty bank if that fails."""
        try:
            data = self.store.read_all(self.profile_id, self.language)
        except ProfileLoadError as e:
            logger.warning(f"Could not load {self.profile_id}/{self.language}, starting empty: {e}")
            self.bank = WordBank()
            self.logs = []
            self.level = INITIAL_LEVEL
            return
        self.bank = WordBank(data.records)
        self.logs = list(data.logs)
        self.level = data.level
        logger.info(f"Loaded {self.profile_id}/{self.language}: "
                    f"{len(self.bank)} words, {len(self.logs)} sessions, level {self.level}")

    def start(self):
        """Start a fresh session over the loaded bank."""
        return self.engine.start_session(self.bank, self.level)

    def switch_language(self, language: str) -> None:
        """Reload for another language and start over.

        A word request still in flight for the old session is dropped when
        it returns.
        """
        self.language = language
        self.engine.language = language
        self.load()
        self.start()

    def switch_profile(self, profile_id: str) -> None:
        self.profile_id = profile_id
        self.engine.profile_id = profile_id
        self.load()
        self.start()

    def clear_word_bank(self) -> int:
        """Tombstone every word in the bank. Returns how many were cleared.

        Records are rewritten with CLEARED_RANK rather than deleted, so the
        store keeps them; they are left out of the bank on the next load.
        The running session is restarted so its queues no longer hold
        cleared records.
        """
        cleared = 0
        for record in self.bank.records():
            tombstone = record.copy()
            tombstone.mastery_rank = CLEARED_RANK
            try:
                self.store.upsert_record(self.profile_id, self.language, tombstone)
                cleared += 1
            except PersistenceError as e:
                logger.warning(f"Could not clear {record.word!r}: {e}")
        self.bank.clear()
        if self.engine.state is not None:
            self.start()
        return cleared

    def stats(self) -> dict:
        return summarize_logs(self.logs)

    def _on_session_over(self, summary: SessionSummary) -> None:
        entry: SessionLogEntry = summary.log
        self.logs.append(entry)
        self.level = entry.end_level
