"""Mock implementations of the core interfaces, shared by the test modules."""

import copy
import json
import os

from core.interfaces import AIProvider, Storage


class MockAIProvider(AIProvider):
    """Mock AI provider for testing."""

    def __init__(self):
        self.responses = []
        self.generate_hints_calls = []

    def set_hints_response(self, hints: list, ms: int = 120):
        """Queue a hints response."""
        self.responses.append((hints, ms))

    def generate_hints(self, word: str, translations: list, error_details: list) -> tuple[list, int]:
        self.generate_hints_calls.append((word, list(translations), len(error_details)))
        if self.responses:
            return self.responses.pop(0)
        return ([
            {'hint_type': 'etymology', 'hint_content': f'Think about where "{word}" comes from.'},
            {'hint_type': 'usage_example', 'hint_content': f'Use "{word}" in a sentence.'}
        ], 120)


class MockStorage(Storage):
    """In-memory storage for testing. Records are deep-copied in and out."""

    def __init__(self):
        self.config = {'gemini_api_key': 'test-api-key'}
        self.users = set()
        self.dictionaries = {}   # (user, dictionary) -> dict
        self.words = {}          # (user, dictionary, word) -> dict
        self.wrong_words = {}    # (user, id) -> dict
        self.submissions = {}    # (user, submission id) -> dict
        self.save_calls = []

    def load_config(self) -> dict:
        return self.config

    def create_user(self, user_id: str) -> bool:
        if user_id in self.users:
            return False
        self.users.add(user_id)
        return True

    def user_exists(self, user_id: str) -> bool:
        return user_id in self.users

    def list_users(self) -> list[str]:
        return sorted(self.users)

    def delete_user(self, user_id: str) -> bool:
        if user_id not in self.users:
            return False
        self.users.discard(user_id)
        for store in (self.dictionaries, self.words, self.wrong_words, self.submissions):
            for key in [k for k in store if k[0] == user_id]:
                del store[key]
        return True

    def load_user_dictionary(self, user_id: str, dictionary_id: str) -> dict | None:
        return copy.deepcopy(self.dictionaries.get((user_id, dictionary_id)))

    def save_user_dictionary(self, data: dict) -> None:
        self.save_calls.append(('user_dictionary', data['dictionary_id']))
        self.dictionaries[(data['user_id'], data['dictionary_id'])] = copy.deepcopy(data)

    def list_user_dictionaries(self, user_id: str) -> list[dict]:
        return [copy.deepcopy(v) for k, v in self.dictionaries.items() if k[0] == user_id]

    def load_word_progress(self, user_id: str, dictionary_id: str, word: str) -> dict | None:
        return copy.deepcopy(self.words.get((user_id, dictionary_id, word)))

    def save_word_progress(self, data: dict) -> None:
        self.save_calls.append(('word_progress', data['word']))
        self.words[(data['user_id'], data['dictionary_id'], data['word'])] = copy.deepcopy(data)

    def list_word_progress(self, user_id: str, dictionary_id: str | None = None) -> list[dict]:
        return [copy.deepcopy(v) for k, v in self.words.items()
                if k[0] == user_id and (dictionary_id is None or k[1] == dictionary_id)]

    def load_wrong_word(self, user_id: str, dictionary_id: str, word: str) -> dict | None:
        for (owner, _), row in self.wrong_words.items():
            if owner == user_id and row['dictionary_id'] == dictionary_id and row['word'] == word:
                return copy.deepcopy(row)
        return None

    def load_wrong_word_by_id(self, user_id: str, wrong_word_id: str) -> dict | None:
        return copy.deepcopy(self.wrong_words.get((user_id, wrong_word_id)))

    def save_wrong_word(self, data: dict) -> None:
        self.save_calls.append(('wrong_word', data['word']))
        self.wrong_words[(data['user_id'], data['id'])] = copy.deepcopy(data)

    def delete_wrong_word(self, user_id: str, wrong_word_id: str) -> bool:
        return self.wrong_words.pop((user_id, wrong_word_id), None) is not None

    def list_wrong_words(self, user_id: str, dictionary_id: str | None = None,
                         include_resolved: bool = False) -> list[dict]:
        rows = [copy.deepcopy(row) for (owner, _), row in self.wrong_words.items() if owner == user_id]
        if dictionary_id is not None:
            rows = [row for row in rows if row['dictionary_id'] == dictionary_id]
        if not include_resolved:
            rows = [row for row in rows if not row['is_resolved']]
        return rows

    def load_submission(self, user_id: str, submission_id: str) -> dict | None:
        return copy.deepcopy(self.submissions.get((user_id, submission_id)))

    def save_submission(self, user_id: str, submission_id: str, result: dict) -> None:
        self.submissions[(user_id, submission_id)] = copy.deepcopy(result)


SAMPLE_WORDS = [
    {'name': 'apple', 'trans': ['n. 苹果'], 'usphone': 'ˈæpl', 'ukphone': 'ˈæpl'},
    {'name': 'abandon', 'trans': ['v. 放弃', 'v. 抛弃']},
    {'name': 'banana', 'trans': ['n. 香蕉']},
]


def write_dictionary(dict_dir: str, filename: str, words) -> str:
    """Write a dictionary file and return its path."""
    path = os.path.join(dict_dir, filename)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(words, f, ensure_ascii=False)
    return path
