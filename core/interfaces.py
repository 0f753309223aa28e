"""Abstract base classes for dependency injection."""

from abc import ABC, abstractmethod


class AIProvider(ABC):
    """Abstract base class for AI/LLM provider."""

    @abstractmethod
    def generate_hints(self, word: str, translations: list, error_details: list) -> tuple[list, int]:
        """Generate study hints for a word.
        Returns ([{hint_type, hint_content}], generation_time_ms)."""
        pass


class Storage(ABC):
    """Abstract base class for user progress and config storage.

    Records are exchanged as plain dicts produced by the models' to_dict().
    """

    @abstractmethod
    def load_config(self) -> dict:
        """Load configuration. Returns config dict."""
        pass

    # Users

    @abstractmethod
    def create_user(self, user_id: str) -> bool:
        """Register a user. Returns False if the user already exists."""
        pass

    @abstractmethod
    def user_exists(self, user_id: str) -> bool:
        """Check whether a user is registered."""
        pass

    @abstractmethod
    def list_users(self) -> list[str]:
        """List registered user ids."""
        pass

    @abstractmethod
    def delete_user(self, user_id: str) -> bool:
        """Delete a user and all of their progress. Returns True if deleted."""
        pass

    # Dictionary progress

    @abstractmethod
    def load_user_dictionary(self, user_id: str, dictionary_id: str) -> dict | None:
        """Load a user's progress in one dictionary. Returns dict or None."""
        pass

    @abstractmethod
    def save_user_dictionary(self, data: dict) -> None:
        """Save a user's progress in one dictionary."""
        pass

    @abstractmethod
    def list_user_dictionaries(self, user_id: str) -> list[dict]:
        """List all dictionary progress records of a user."""
        pass

    # Word progress

    @abstractmethod
    def load_word_progress(self, user_id: str, dictionary_id: str, word: str) -> dict | None:
        """Load the learning state of one word. Returns dict or None."""
        pass

    @abstractmethod
    def save_word_progress(self, data: dict) -> None:
        """Save the learning state of one word."""
        pass

    @abstractmethod
    def list_word_progress(self, user_id: str, dictionary_id: str | None = None) -> list[dict]:
        """List word learning states, optionally limited to one dictionary."""
        pass

    # Wrong words

    @abstractmethod
    def load_wrong_word(self, user_id: str, dictionary_id: str, word: str) -> dict | None:
        """Load the wrong word record for a word. Returns dict or None."""
        pass

    @abstractmethod
    def load_wrong_word_by_id(self, user_id: str, wrong_word_id: str) -> dict | None:
        """Load a wrong word record by id. Returns dict or None."""
        pass

    @abstractmethod
    def save_wrong_word(self, data: dict) -> None:
        """Save a wrong word record."""
        pass

    @abstractmethod
    def delete_wrong_word(self, user_id: str, wrong_word_id: str) -> bool:
        """Delete a wrong word record. Returns True if deleted."""
        pass

    @abstractmethod
    def list_wrong_words(self, user_id: str, dictionary_id: str | None = None,
                         include_resolved: bool = False) -> list[dict]:
        """List wrong word records of a user."""
        pass

    # Answer submissions

    @abstractmethod
    def load_submission(self, user_id: str, submission_id: str) -> dict | None:
        """Load the stored result of an answer submission. Returns dict or None."""
        pass

    @abstractmethod
    def save_submission(self, user_id: str, submission_id: str, result: dict) -> None:
        """Store the result of an answer submission for replay."""
        pass
