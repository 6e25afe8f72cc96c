"""File-based storage implementation."""

import json
import logging
import os
from urllib.parse import quote

from core.config import INITIAL_LEVEL
from core.errors import PersistenceError, ProfileLoadError
from core.interfaces import ProfileStore
from core.models import ProfileData, SessionLogEntry, WordRecord

logger = logging.getLogger(__name__)


class FileStorage(ProfileStore):
    """File-based storage implementation.

    One JSON document per profile:
    {"languages": {"Dutch": {"words": {id: record}, "logs": [...], "level": "A1"}}}
    """

    def __init__(self, config_file: str = None, state_dir: str = None):
        self.config_file = config_file or os.path.expanduser('~/.config/wordbank/config.json')
        # Project root is one level up from server/
        project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
        self.state_dir = state_dir or os.environ.get('WORDBANK_STATE_DIR') or project_root

    def _get_state_file(self, profile_id: str) -> str:
        """Get state file path for a profile."""
        safe_id = quote(profile_id, safe='')
        return os.path.join(self.state_dir, f'wordbank_{safe_id}.json')

    def load_config(self) -> dict:
        if not os.path.exists(self.config_file):
            raise FileNotFoundError(
                f"Config file not found at {self.config_file}\n"
                f'Please create it with: {{"gemini_api_key": "YOUR_API_KEY_HERE"}}'
            )
        with open(self.config_file, 'r') as f:
            return json.load(f)

    def _load_profile(self, profile_id: str) -> dict:
        state_file = self._get_state_file(profile_id)
        if not os.path.exists(state_file):
            return {'languages': {}}
        with open(state_file, 'r') as f:
            return json.load(f)

    def _save_profile(self, profile_id: str, profile: dict) -> None:
        os.makedirs(self.state_dir, exist_ok=True)
        state_file = self._get_state_file(profile_id)
        tmp_file = state_file + '.tmp'
        with open(tmp_file, 'w') as f:
            json.dump(profile, f, indent=2)
        os.replace(tmp_file, state_file)

    def _update_language(self, profile_id: str, language: str, update) -> None:
        try:
            profile = self._load_profile(profile_id)
            lang = profile.setdefault('languages', {}).setdefault(
                language, {'words': {}, 'logs': [], 'level': INITIAL_LEVEL}
            )
            update(lang)
            self._save_profile(profile_id, profile)
        except (OSError, ValueError) as e:
            logger.error(f"Error saving state for {profile_id}/{language}: {e}")
            raise PersistenceError(str(e)) from e

    def read_all(self, profile_id: str, language: str) -> ProfileData:
        try:
            profile = self._load_profile(profile_id)
            lang = profile.get('languages', {}).get(language)
            if not lang:
                return ProfileData()
            records = [WordRecord.from_dict(r) for r in lang.get('words', {}).values()]
            logs = [SessionLogEntry.from_dict(entry) for entry in lang.get('logs', [])]
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
            logger.error(f"Error loading state for {profile_id}/{language}: {e!r}")
            raise ProfileLoadError(str(e)) from e
        logs.sort(key=lambda entry: entry.timestamp)
        return ProfileData(records, logs, lang.get('level') or INITIAL_LEVEL)

    def upsert_record(self, profile_id: str, language: str, record: WordRecord) -> None:
        def update(lang):
            lang.setdefault('words', {})[record.id] = record.to_dict()
        self._update_language(profile_id, language, update)

    def append_log(self, profile_id: str, language: str, entry: SessionLogEntry) -> None:
        def update(lang):
            lang.setdefault('logs', []).append(entry.to_dict())
        self._update_language(profile_id, language, update)

    def set_level(self, profile_id: str, language: str, level: str) -> None:
        def update(lang):
            lang['level'] = level
        self._update_language(profile_id, language, update)

