"""REST API client for wordbank server."""

import requests

from core.errors import GenerationError, PersistenceError, ProfileLoadError
from core.interfaces import ProfileStore, WordSource
from core.models import ProfileData, SessionLogEntry, Word, WordRecord


class WordbankAPIClient:
    """Client for communicating with the wordbank REST API."""

    def __init__(self, base_url: str = "http://localhost:8000", timeout: float = 30):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = requests.Session()

    def _request(self, method: str, endpoint: str, **kwargs) -> dict:
        response = self.session.request(method, f"{self.base_url}{endpoint}",
                                        timeout=self.timeout, **kwargs)
        response.raise_for_status()
        return response.json()

    def health_check(self) -> dict:
        """Check if the server is running."""
        return self._request('GET', '/')

    def get_languages(self) -> list[dict]:
        return self._request('GET', '/api/languages')['languages']

    def get_data(self, profile_id: str, language: str) -> dict:
        """Get word bank, logs and level."""
        return self._request('GET', '/api/data',
                             params={'profile_id': profile_id, 'language': language})

    def update_word(self, profile_id: str, language: str, word: dict) -> dict:
        return self._request('POST', '/api/word', json={
            'profile_id': profile_id,
            'language': language,
            'word': word
        })

    def add_log(self, profile_id: str, language: str, log: dict) -> dict:
        return self._request('POST', '/api/log', json={
            'profile_id': profile_id,
            'language': language,
            'log': log
        })

    def update_level(self, profile_id: str, language: str, level: str) -> dict:
        return self._request('PUT', '/api/level', json={
            'profile_id': profile_id,
            'language': language,
            'level': level
        })

    def generate_word(self, language: str, level: str, exclusions: list[str]) -> dict:
        """Ask the server for one new word."""
        return self._request('POST', '/api/generate-word', json={
            'language': language,
            'level': level,
            'exclusions': exclusions
        })


class APIProfileStore(ProfileStore):
    """Profile store backed by the wordbank server."""

    def __init__(self, client: WordbankAPIClient):
        self.client = client

    def read_all(self, profile_id: str, language: str) -> ProfileData:
        try:
            return ProfileData.from_dict(self.client.get_data(profile_id, language))
        except (requests.RequestException, ValueError, KeyError) as e:
            raise ProfileLoadError(str(e)) from e

    def upsert_record(self, profile_id: str, language: str, record: WordRecord) -> None:
        try:
            self.client.update_word(profile_id, language, record.to_dict())
        except requests.RequestException as e:
            raise PersistenceError(str(e)) from e

    def append_log(self, profile_id: str, language: str, entry: SessionLogEntry) -> None:
        try:
            self.client.add_log(profile_id, language, entry.to_dict())
        except requests.RequestException as e:
            raise PersistenceError(str(e)) from e

    def set_level(self, profile_id: str, language: str, level: str) -> None:
        try:
            self.client.update_level(profile_id, language, level)
        except requests.RequestException as e:
            raise PersistenceError(str(e)) from e


class APIWordSource(WordSource):
    """Word source backed by the server's generation endpoint."""

    def __init__(self, client: WordbankAPIClient):
        self.client = client

    def request_word(self, language: str, level: str, exclusions: list[str]) -> Word:
        try:
            data = self.client.generate_word(language, level, exclusions)
            return Word(data['word'], data['translation'], data['level'], language, data['example'])
        except (requests.RequestException, ValueError, KeyError) as e:
            raise GenerationError(str(e)) from e
