"""Practice session state machine.

A session walks through three modes. Due reviews come first; then up to
NEW_WORD_LIMIT new words are introduced, pulled one at a time from the word
source; finally the reviews the learner deferred get a second pass. The
meaning of each feedback signal depends on the mode it is given in:

    mode          known                deferred                 refreshed
    review        rank up, reschedule  queue for final review   -
    final-review  rank up, reschedule  rank down, reschedule    -
    learn         discard, level up    save at rank 1           save at rank 1

Five deferred answers in a row while learning raise the level one step;
three refreshed answers in a row lower it one step.
"""

import logging

from .config import (
    DEFAULT_LANGUAGE, INITIAL_LEVEL, NEW_WORD_LIMIT,
    PROMOTE_AFTER_DEFERRED, DEMOTE_AFTER_REFRESHED
)
from .errors import GenerationError, InvalidFeedback, PersistenceError
from .interfaces import ProfileStore, WordSource
from .models import (
    Mode, Signal, SessionLogEntry, Word, WordBank, WordRecord,
    STATUS_DEFERRED, STATUS_RETAINED,
    is_valid_level, promote_level, demote_level
)
from .schedule import new_record, reschedule
from .utils import now_ms, speakable_example

logger = logging.getLogger(__name__)

EVENTS = ('word_loaded', 'card_flipped', 'session_over')


class SessionSummary:
    """What the learner sees when a session is over."""

    def __init__(self, new_words: list[Word], repeated_words: list[Word], log: SessionLogEntry):
        self.new_words = new_words
        self.repeated_words = repeated_words
        self.log = log


class SessionState:
    """Everything one practice session tracks. Never reused across sessions."""

    def __init__(self, due_queue: list[WordRecord], level: str, mode: Mode):
        self.mode = mode
        self.due_queue = list(due_queue)
        self.final_queue = []
        self.new_word_count = 0
        self.deferred_streak = 0
        self.refreshed_streak = 0
        self.level = level
        self.history = []           # surface forms of generated words
        self.new_words = []         # words saved with "new word"
        self.repeated_words = []    # words saved with "remind me later"
        self.current = None
        self.flipped = False
        self.started_at = None

    def reset_streaks(self) -> None:
        self.deferred_streak = 0
        self.refreshed_streak = 0


class SessionEngine:
    """Drives one practice session at a time for a profile and language."""

    def __init__(self, word_source: WordSource, store: ProfileStore = None,
                 profile_id: str = None, language: str = DEFAULT_LANGUAGE, clock=now_ms):
        self.word_source = word_source
        self.store = store
        self.profile_id = profile_id
        self.language = language
        self.clock = clock
        self.bank = WordBank()
        self.state = None
        self.summary = None
        self._observers = {event: [] for event in EVENTS}

    @property
    def mode(self) -> Mode:
        return self.state.mode if self.state else Mode.SESSION_OVER

    @property
    def level(self) -> str | None:
        return self.state.level if self.state else None

    @property
    def current(self) -> Word | None:
        return self.state.current if self.state else None

    @property
    def is_over(self) -> bool:
        return self.mode == Mode.SESSION_OVER

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, event: str, callback) -> None:
        """Register a view-layer callback for one of EVENTS."""
        if event not in self._observers:
            raise ValueError(f"Unknown event: {event}")
        self._observers[event].append(callback)

    def _notify(self, event: str, *args) -> None:
        for callback in self._observers[event]:
            try:
                callback(*args)
            except Exception:
                logger.exception(f"Observer for {event} failed")

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def start_session(self, bank: WordBank, stored_level: str) -> SessionState:
        """Begin a fresh session over the caller's word bank."""
        if not is_valid_level(stored_level):
            logger.warning(f"Unknown stored level {stored_level!r}, using {INITIAL_LEVEL}")
            stored_level = INITIAL_LEVEL
        self.bank = bank
        due = bank.due(self.clock())
        mode = Mode.REVIEW if due else Mode.LEARN
        self.state = SessionState(due, stored_level, mode)
        self.summary = None
        logger.info(f"Session started for {self.profile_id}/{self.language}: "
                    f"{len(due)} due, level {stored_level}")
        return self.state

    def advance(self) -> Word | None:
        """Load the next card. Returns None once the session is over.

        Raises GenerationError if a new word was needed and could not be
        produced; the session is left as it was so the call can be retried.
        """
        state = self.state
        if state is None or state.mode == Mode.SESSION_OVER:
            return None

        if state.due_queue:
            state.mode = Mode.REVIEW
            return self._present(state.due_queue.pop(0))

        if state.mode != Mode.LEARN or state.new_word_count < NEW_WORD_LIMIT:
            try:
                word = self._fetch_word(state)
            except GenerationError:
                if state is not self.state:
                    logger.info("Dropping generation failure from a replaced session")
                    return None
                raise
            if state is not self.state:
                logger.info(f"Dropping {word.word!r} generated for a replaced session")
                return None
            state.mode = Mode.LEARN
            state.history.append(word.word)
            return self._present(word)

        if state.final_queue:
            state.mode = Mode.FINAL_REVIEW
            return self._present(state.final_queue.pop(0))

        self._end_session(state)
        return None

    def respond(self, signal: Signal | str) -> Word | None:
        """Apply the learner's feedback on the current card, then advance."""
        state = self.state
        if state is None or state.current is None:
            raise InvalidFeedback("There is no card to respond to")
        signal = Signal(signal)
        handler = self._HANDLERS.get((state.mode, signal))
        if handler is None:
            raise InvalidFeedback(f"'{signal.value}' is not accepted in {state.mode.value} mode")

        card = state.current
        state.current = None
        state.flipped = False
        handler(self, state, card)
        return self.advance()

    def flip(self) -> bool:
        """Turn the current card over. Returns True when the back is showing."""
        state = self.state
        if state is None or state.current is None:
            return False
        state.flipped = not state.flipped
        if state.flipped:
            self._notify('card_flipped', state.current, speakable_example(state.current.example))
        return state.flipped

    def status_text(self) -> str:
        state = self.state
        if state is None:
            return ''
        if state.mode == Mode.REVIEW:
            return f"Reviewing: {len(state.due_queue) + 1} word(s) due"
        if state.mode == Mode.LEARN:
            return f"Learning: {state.new_word_count} / {NEW_WORD_LIMIT} new words"
        if state.mode == Mode.FINAL_REVIEW:
            return f"Final Review: {len(state.final_queue) + 1} word(s) left"
        return ''

    # ------------------------------------------------------------------
    # Feedback handlers, keyed by (mode, signal) in _HANDLERS
    # ------------------------------------------------------------------

    def _review_known(self, state: SessionState, record: WordRecord) -> None:
        state.reset_streaks()
        self._save(reschedule(record, record.mastery_rank + 1, self.clock()))

    def _review_deferred(self, state: SessionState, record: WordRecord) -> None:
        state.reset_streaks()
        state.final_queue.append(record)

    def _final_deferred(self, state: SessionState, record: WordRecord) -> None:
        state.reset_streaks()
        self._save(reschedule(record, record.mastery_rank - 1, self.clock()))

    def _learn_known(self, state: SessionState, word: Word) -> None:
        state.reset_streaks()
        self._change_level(state, promote_level(state.level))

    def _learn_deferred(self, state: SessionState, word: Word) -> None:
        self._save(new_record(word, STATUS_DEFERRED, self.clock()))
        state.repeated_words.append(word)
        state.new_word_count += 1
        state.refreshed_streak = 0
        state.deferred_streak += 1
        if state.deferred_streak >= PROMOTE_AFTER_DEFERRED:
            state.deferred_streak = 0
            self._change_level(state, promote_level(state.level))

    def _learn_refreshed(self, state: SessionState, word: Word) -> None:
        self._save(new_record(word, STATUS_RETAINED, self.clock()))
        state.new_words.append(word)
        state.new_word_count += 1
        state.deferred_streak = 0
        state.refreshed_streak += 1
        if state.refreshed_streak >= DEMOTE_AFTER_REFRESHED:
            state.refreshed_streak = 0
            self._change_level(state, demote_level(state.level))

    _HANDLERS = {
        (Mode.REVIEW, Signal.KNOWN): _review_known,
        (Mode.REVIEW, Signal.DEFERRED): _review_deferred,
        (Mode.FINAL_REVIEW, Signal.KNOWN): _review_known,
        (Mode.FINAL_REVIEW, Signal.DEFERRED): _final_deferred,
        (Mode.LEARN, Signal.KNOWN): _learn_known,
        (Mode.LEARN, Signal.DEFERRED): _learn_deferred,
        (Mode.LEARN, Signal.REFRESHED): _learn_refreshed,
    }

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _fetch_word(self, state: SessionState) -> Word:
        exclusions = state.history + self.bank.surface_forms()
        word = self.word_source.request_word(self.language, state.level, exclusions)
        if word.level != state.level:
            raise GenerationError(
                f"Asked for a {state.level} word, got {word.word!r} at {word.level}"
            )
        if word.word in state.history or word.id in self.bank:
            logger.warning(f"Word source repeated {word.word!r} despite exclusions")
        return word

    def _present(self, card: Word) -> Word:
        state = self.state
        if state.started_at is None:
            state.started_at = self.clock()
        state.current = card
        state.flipped = False
        self._notify('word_loaded', card, state.mode)
        return card

    def _change_level(self, state: SessionState, level: str) -> None:
        if level != state.level:
            logger.info(f"Level {state.level} -> {level}")
            state.level = level

    def _save(self, record: WordRecord) -> None:
        self.bank.upsert(record)
        self._persist(f"word {record.word!r}", 'upsert_record', record)

    def _persist(self, what: str, operation: str, value) -> None:
        if self.store is None:
            return
        try:
            getattr(self.store, operation)(self.profile_id, self.language, value)
        except PersistenceError as e:
            logger.warning(f"Could not persist {what}: {e}")

    def _end_session(self, state: SessionState) -> None:
        now = self.clock()
        duration = now - state.started_at if state.started_at is not None else 0
        entry = SessionLogEntry(now, duration, len(state.history),
                                len(state.new_words), state.level)
        state.mode = Mode.SESSION_OVER
        self.summary = SessionSummary(list(state.new_words), list(state.repeated_words), entry)
        logger.info(f"Session over for {self.profile_id}/{self.language}: "
                    f"{entry.total_words} words, {entry.new_words} new, level {entry.end_level}")
        self._persist('session log', 'append_log', entry)
        self._persist('level', 'set_level', state.level)
        self._notify('session_over', self.summary)
