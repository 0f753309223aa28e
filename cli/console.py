"""Console UI for vocabin application."""

import time
import uuid

import requests

from core.config import MAX_MASTERY_LEVEL
from cli.api_client import VocabinAPIClient


class ConsoleUI:
    """Console flashcard interface: show a word, reveal its meaning, grade yourself."""

    def __init__(self, client: VocabinAPIClient):
        self.client = client

    def print_word(self, word: dict):
        """Print a word with its phonetics."""
        print('\n' + '=' * 50)
        print(f"  {word['name']}")
        phonetics = [p for p in (word.get('usphone'), word.get('ukphone')) if p]
        if phonetics:
            print(f"  /{'/  /'.join(phonetics)}/")
        progress = word.get('progress')
        if progress:
            print(f"  Mastery {progress['mastery_level']}/{MAX_MASTERY_LEVEL} - {progress['learning_status']}")
        print('=' * 50)

    def print_translations(self, word: dict):
        for translation in word.get('trans') or []:
            print(f'  - {translation}')

    def print_result(self, result: dict):
        progress = result['word_progress']
        dictionary = result['dictionary_progress']
        print('-' * 40)
        print(f"Mastery: {progress['mastery_level']}/{MAX_MASTERY_LEVEL} ({progress['learning_status']})")
        print(f"Next review in {progress['days_until_review']} day(s)")
        if result.get('wrong_word'):
            wrong = result['wrong_word']
            print(f"Added to review list (errors: {wrong['error_count']}, priority: {wrong['review_priority']})")
        print(f"Dictionary: {dictionary['completed_words']}/{dictionary['total_words']} "
              f"({dictionary['completion_percentage']}%), accuracy {dictionary['accuracy_rate']}%")
        print('-' * 40)

    def print_progress(self, data: dict):
        """Print detailed progress for a dictionary."""
        overall = data['overall']
        stats = data['word_level_stats']
        print('\n' + '=' * 50)
        print(f"PROGRESS: {data['dictionary']['display_name']}")
        print('=' * 50)
        print(f"Status: {overall['progress_status']} ({overall['completion_percentage']}%)")
        print(f"Position: {overall['current_position']}/{overall['total_words']}")
        print(f"Accuracy: {overall['accuracy_rate']}% "
              f"({overall['correct_answers']} correct, {overall['wrong_answers']} wrong)")
        print(f"Words attempted: {stats['words_attempted']}, mastered: {stats['mastered_words']}")
        print(f"Average mastery: {stats['average_mastery_level']}")
        print(f"Words to review: {stats['wrong_words_count']}")
        print('=' * 50 + '\n')

    def ask_yes_no(self, prompt: str) -> bool | None:
        """Returns True/False, or None when the user wants to leave."""
        while True:
            answer = input(f'{prompt} [y/n] ').strip().lower()
            if answer in ('y', 'yes'):
                return True
            if answer in ('n', 'no'):
                return False
            if answer == 'exit':
                return None

    def choose_dictionary(self) -> str | None:
        """List dictionaries and let the user pick one."""
        overview = self.client.get_overview()
        entries = overview['dictionaries']
        if not entries:
            print('No dictionaries available on the server.')
            return None

        print('\nDictionaries:')
        for i, entry in enumerate(entries, 1):
            d = entry['dictionary']
            progress = entry['progress']
            done = f" - {progress['completion_percentage']}% done" if progress else ''
            print(f"  {i}. {d['display_name']} [{d['category']}, {d['formatted_difficulty']}] "
                  f"{d['total_words']} words{done}")

        while True:
            choice = input('Choose a dictionary (number, or "exit"): ').strip()
            if choice.lower() == 'exit':
                return None
            if choice.isdigit() and 1 <= int(choice) <= len(entries):
                return entries[int(choice) - 1]['dictionary']['id']
            print('Invalid choice.')

    def review(self):
        """Go through the most urgent wrong words."""
        wrong_words = self.client.get_wrong_words(sort_by='urgency', limit=10)['wrong_words']
        if not wrong_words:
            print('\nNothing to review.')
            return

        print(f'\nReviewing {len(wrong_words)} word(s). Type "exit" to stop.')
        for entry in wrong_words:
            word = entry['word_data'] or {'name': entry['word']}
            self.print_word(word)
            print(f"  ({entry['review_status']}, urgency {entry['urgency_score']})")
            start = time.time()
            input('Press Enter to reveal...')
            elapsed_ms = int((time.time() - start) * 1000)
            self.print_translations(word)
            knew = self.ask_yes_no('Did you know it?')
            if knew is None:
                return
            result = self.client.review_wrong_word(entry['id'], knew, elapsed_ms)
            status = result['wrong_word']
            if status['is_resolved']:
                print('Resolved! Removed from the review list.')
            else:
                print(f"Review status: {status['review_status']}")

    def study(self, dictionary_id: str):
        """Study loop over the words of one dictionary."""
        self.client.start_dictionary(dictionary_id)
        print('Commands: Enter to reveal, "status" for progress, "review" for wrong words, "exit" to quit\n')

        while True:
            try:
                data = self.client.get_current_word(dictionary_id)
            except requests.HTTPError as e:
                if e.response is not None and e.response.status_code == 400:
                    print('\nDictionary completed. Well done!')
                    return
                raise

            word = data['word']
            self.print_word(word)
            start = time.time()

            command = input('==> ').strip().lower()
            if command == 'exit':
                print('Goodbye!')
                return
            if command == 'status':
                self.print_progress(self.client.get_progress(dictionary_id))
                continue
            if command == 'review':
                self.review()
                continue

            elapsed_ms = int((time.time() - start) * 1000)
            self.print_translations(word)
            knew = self.ask_yes_no('Did you know it?')
            if knew is None:
                print('Goodbye!')
                return

            submission_id = uuid.uuid4().hex
            try:
                result = self.client.submit_answer(dictionary_id, word['name'], word['index'], knew,
                                                   elapsed_ms, submission_id=submission_id)
            except requests.ConnectionError:
                print('Connection lost, retrying...')
                result = self.client.submit_answer(dictionary_id, word['name'], word['index'], knew,
                                                   elapsed_ms, submission_id=submission_id)
            self.print_result(result)

    def run(self, review_only: bool = False):
        """Run the main application loop."""
        # Check server connection
        try:
            health = self.client.health_check()
            print(f"Connected to vocabin server ({health['dictionaries']} dictionaries)")
        except requests.RequestException:
            print(f"Error: Cannot connect to server at {self.client.base_url}")
            print("Make sure the server is running: python run_server.py")
            return

        if self.client.ensure_user():
            print(f"Created user '{self.client.user_id}'")

        if review_only:
            self.review()
            return

        dictionary_id = self.choose_dictionary()
        if dictionary_id:
            self.study(dictionary_id)
