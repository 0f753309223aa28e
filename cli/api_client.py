"""REST API client for vocabin server."""

import uuid

import requests


class VocabinAPIClient:
    """Client for communicating with the vocabin REST API."""

    def __init__(self, base_url: str = "http://localhost:8000", user_id: str = "default"):
        self.base_url = base_url.rstrip('/')
        self.user_id = user_id
        self.session = requests.Session()

    def _get(self, endpoint: str, params: dict = None) -> dict:
        """Make a GET request."""
        if params is None:
            params = {}
        params['user_id'] = self.user_id
        response = self.session.get(f"{self.base_url}{endpoint}", params=params)
        response.raise_for_status()
        return response.json()

    def _post(self, endpoint: str, data: dict = None) -> dict:
        """Make a POST request."""
        if data is None:
            data = {}
        data['user_id'] = self.user_id
        response = self.session.post(f"{self.base_url}{endpoint}", json=data)
        response.raise_for_status()
        return response.json()

    def _post_query(self, endpoint: str) -> dict:
        """POST where the user id travels as a query parameter."""
        response = self.session.post(f"{self.base_url}{endpoint}", params={'user_id': self.user_id})
        response.raise_for_status()
        return response.json()

    def health_check(self) -> dict:
        """Check if the server is running."""
        response = self.session.get(f"{self.base_url}/")
        response.raise_for_status()
        return response.json()

    def ensure_user(self) -> bool:
        """Create the user if needed. Returns True if it was created."""
        response = self.session.post(f"{self.base_url}/api/users/{self.user_id}")
        response.raise_for_status()
        return response.json().get('success', False)

    def get_overview(self) -> dict:
        """All dictionaries with this user's progress."""
        return self._get("/api/user/dictionaries")

    def start_dictionary(self, dictionary_id: str) -> dict:
        return self._post_query(f"/api/user/dictionaries/{dictionary_id}/start")

    def get_current_word(self, dictionary_id: str) -> dict:
        return self._get(f"/api/user/dictionaries/{dictionary_id}/current-word")

    def get_progress(self, dictionary_id: str) -> dict:
        return self._get(f"/api/user/dictionaries/{dictionary_id}/progress")

    def submit_answer(self, dictionary_id: str, word: str, word_index: int, is_correct: bool,
                      response_time: int = 0, user_difficulty: int = None, user_answer: str = '',
                      submission_id: str = None) -> dict:
        """Submit an answer.

        Without a submission_id a new one is generated. Pass the same id again
        when retrying so the server counts the answer once.
        """
        data = {
            'dictionary_id': dictionary_id,
            'word': word,
            'word_index': word_index,
            'is_correct': is_correct,
            'user_answer': user_answer,
            'response_time': response_time,
            'submission_id': submission_id or uuid.uuid4().hex
        }
        if user_difficulty is not None:
            data['user_difficulty'] = user_difficulty
        return self._post("/api/user/word-answer", data)

    def get_wrong_words(self, sort_by: str = 'urgency', limit: int = 20) -> dict:
        return self._get("/api/wrong-words", {'sort_by': sort_by, 'limit': limit})

    def review_wrong_word(self, wrong_word_id: str, was_successful: bool, response_time: int = 0) -> dict:
        return self._post(f"/api/wrong-words/{wrong_word_id}/review", {
            'was_successful': was_successful,
            'review_method': 'study',
            'response_time': response_time
        })
