"""File-based storage implementation."""

import json
import logging
import os

from core.config import SUBMISSION_HISTORY_SIZE
from core.interfaces import Storage
from core.utils import utc_now, to_iso

logger = logging.getLogger(__name__)

USER_FILE_PREFIX = 'vocabin_user_'


def _empty_document(user_id: str) -> dict:
    return {
        'user_id': user_id,
        'created_at': to_iso(utc_now()),
        'dictionaries': {},    # dictionary_id -> user dictionary
        'words': {},           # dictionary_id -> {word -> word progress}
        'wrong_words': {},     # wrong word id -> wrong word
        'submissions': {}      # submission id -> answer result, oldest first
    }


class FileStorage(Storage):
    """File-based storage implementation. One JSON document per user."""

    def __init__(self, config_file: str = None, state_dir: str = None):
        self.config_file = config_file or os.path.expanduser('~/.config/vocabin/config.json')
        # Project root is one level up from server/
        project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
        self.state_dir = state_dir or project_root

    def _get_user_file(self, user_id: str) -> str:
        """Get state file path for a user."""
        return os.path.join(self.state_dir, f'{USER_FILE_PREFIX}{user_id}.json')

    def _read(self, user_file: str) -> dict:
        with open(user_file, 'r', encoding='utf-8') as f:
            return json.load(f)

    def _load(self, user_id: str) -> dict | None:
        user_file = self._get_user_file(user_id)
        if not os.path.exists(user_file):
            return None
        try:
            return self._read(user_file)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error reading {user_file}: {e}")
            return None

    def _load_or_create(self, user_id: str) -> dict:
        """Load the document to update. An unreadable file is never replaced."""
        user_file = self._get_user_file(user_id)
        if not os.path.exists(user_file):
            return _empty_document(user_id)
        try:
            return self._read(user_file)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error reading {user_file} before write: {e}")
            raise

    def _save(self, user_id: str, document: dict) -> None:
        os.makedirs(self.state_dir, exist_ok=True)
        user_file = self._get_user_file(user_id)
        tmp_file = user_file + '.tmp'
        with open(tmp_file, 'w', encoding='utf-8') as f:
            json.dump(document, f, indent=2, ensure_ascii=False)
        os.replace(tmp_file, user_file)

    def load_config(self) -> dict:
        if not os.path.exists(self.config_file):
            raise FileNotFoundError(
                f"Config file not found at {self.config_file}\n"
                f'Please create it with: {{"gemini_api_key": "YOUR_API_KEY_HERE"}}'
            )
        with open(self.config_file, 'r') as f:
            return json.load(f)

    # Users

    def create_user(self, user_id: str) -> bool:
        if self.user_exists(user_id):
            return False
        self._save(user_id, _empty_document(user_id))
        return True

    def user_exists(self, user_id: str) -> bool:
        return os.path.exists(self._get_user_file(user_id))

    def list_users(self) -> list[str]:
        """List all existing user IDs."""
        users = []
        if os.path.exists(self.state_dir):
            for filename in os.listdir(self.state_dir):
                if filename.startswith(USER_FILE_PREFIX) and filename.endswith('.json'):
                    users.append(filename[len(USER_FILE_PREFIX):-len('.json')])
        return sorted(users)

    def delete_user(self, user_id: str) -> bool:
        user_file = self._get_user_file(user_id)
        if os.path.exists(user_file):
            os.remove(user_file)
            return True
        return False

    # Dictionary progress

    def load_user_dictionary(self, user_id: str, dictionary_id: str) -> dict | None:
        document = self._load(user_id)
        if document is None:
            return None
        return document['dictionaries'].get(dictionary_id)

    def save_user_dictionary(self, data: dict) -> None:
        document = self._load_or_create(data['user_id'])
        document['dictionaries'][data['dictionary_id']] = data
        self._save(data['user_id'], document)

    def list_user_dictionaries(self, user_id: str) -> list[dict]:
        document = self._load(user_id)
        return list(document['dictionaries'].values()) if document else []

    # Word progress

    def load_word_progress(self, user_id: str, dictionary_id: str, word: str) -> dict | None:
        document = self._load(user_id)
        if document is None:
            return None
        return document['words'].get(dictionary_id, {}).get(word)

    def save_word_progress(self, data: dict) -> None:
        document = self._load_or_create(data['user_id'])
        document['words'].setdefault(data['dictionary_id'], {})[data['word']] = data
        self._save(data['user_id'], document)

    def list_word_progress(self, user_id: str, dictionary_id: str | None = None) -> list[dict]:
        document = self._load(user_id)
        if document is None:
            return []
        if dictionary_id is not None:
            return list(document['words'].get(dictionary_id, {}).values())
        return [row for words in document['words'].values() for row in words.values()]

    # Wrong words

    def load_wrong_word(self, user_id: str, dictionary_id: str, word: str) -> dict | None:
        document = self._load(user_id)
        if document is None:
            return None
        for row in document['wrong_words'].values():
            if row['dictionary_id'] == dictionary_id and row['word'] == word:
                return row
        return None

    def load_wrong_word_by_id(self, user_id: str, wrong_word_id: str) -> dict | None:
        document = self._load(user_id)
        if document is None:
            return None
        return document['wrong_words'].get(wrong_word_id)

    def save_wrong_word(self, data: dict) -> None:
        document = self._load_or_create(data['user_id'])
        document['wrong_words'][data['id']] = data
        self._save(data['user_id'], document)

    def delete_wrong_word(self, user_id: str, wrong_word_id: str) -> bool:
        document = self._load(user_id)
        if document is None or wrong_word_id not in document['wrong_words']:
            return False
        del document['wrong_words'][wrong_word_id]
        self._save(user_id, document)
        return True

    def list_wrong_words(self, user_id: str, dictionary_id: str | None = None,
                         include_resolved: bool = False) -> list[dict]:
        document = self._load(user_id)
        if document is None:
            return []
        rows = list(document['wrong_words'].values())
        if dictionary_id is not None:
            rows = [row for row in rows if row['dictionary_id'] == dictionary_id]
        if not include_resolved:
            rows = [row for row in rows if not row.get('is_resolved')]
        return rows

    # Answer submissions

    def load_submission(self, user_id: str, submission_id: str) -> dict | None:
        document = self._load(user_id)
        if document is None:
            return None
        return document['submissions'].get(submission_id)

    def save_submission(self, user_id: str, submission_id: str, result: dict) -> None:
        document = self._load_or_create(user_id)
        submissions = document['submissions']
        submissions[submission_id] = result
        # Keep only the most recent submissions
        while len(submissions) > SUBMISSION_HISTORY_SIZE:
            del submissions[next(iter(submissions))]
        self._save(user_id, document)
