"""Tests for the file-based storage backend."""

import json
import os
import tempfile
import unittest

from core.config import SUBMISSION_HISTORY_SIZE
from core.models import UserDictionary, WordProgress, WrongWord
from server.file_storage import FileStorage


class TestFileStorage(unittest.TestCase):
    """Test cases for FileStorage."""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.storage = FileStorage(config_file=os.path.join(self.tmp.name, 'config.json'),
                                   state_dir=self.tmp.name)

    def tearDown(self):
        self.tmp.cleanup()

    def test_users(self):
        self.assertTrue(self.storage.create_user('bob'))
        self.assertTrue(self.storage.create_user('alice'))
        self.assertFalse(self.storage.create_user('bob'))
        self.assertTrue(self.storage.user_exists('bob'))
        self.assertEqual(self.storage.list_users(), ['alice', 'bob'])
        self.assertTrue(self.storage.delete_user('bob'))
        self.assertFalse(self.storage.delete_user('bob'))
        self.assertEqual(self.storage.list_users(), ['alice'])

    def test_load_config(self):
        with self.assertRaises(FileNotFoundError):
            self.storage.load_config()
        with open(self.storage.config_file, 'w') as f:
            json.dump({'gemini_api_key': 'secret'}, f)
        self.assertEqual(self.storage.load_config()['gemini_api_key'], 'secret')

    def test_user_dictionary(self):
        self.storage.create_user('alice')
        self.assertIsNone(self.storage.load_user_dictionary('alice', 'CET4_T'))
        progress = UserDictionary('alice', 'CET4_T', 10).start()
        self.storage.save_user_dictionary(progress.to_dict())
        loaded = self.storage.load_user_dictionary('alice', 'CET4_T')
        self.assertEqual(loaded['status'], 'in_progress')
        self.assertEqual(len(self.storage.list_user_dictionaries('alice')), 1)

    def test_word_progress(self):
        self.storage.create_user('alice')
        apple = WordProgress('alice', 'CET4_T', 'apple').record_attempt(True)
        gre = WordProgress('alice', 'GRE3000_3_T', 'abate').record_attempt(False)
        self.storage.save_word_progress(apple.to_dict())
        self.storage.save_word_progress(gre.to_dict())
        loaded = self.storage.load_word_progress('alice', 'CET4_T', 'apple')
        self.assertEqual(loaded['correct_attempts'], 1)
        self.assertIsNone(self.storage.load_word_progress('alice', 'CET4_T', 'abate'))
        self.assertEqual(len(self.storage.list_word_progress('alice')), 2)
        self.assertEqual(len(self.storage.list_word_progress('alice', 'CET4_T')), 1)

    def test_wrong_words(self):
        self.storage.create_user('alice')
        apple = WrongWord.create('alice', 'CET4_T', 'apple')
        banana = WrongWord.create('alice', 'CET4_T', 'banana').mark_as_resolved()
        self.storage.save_wrong_word(apple.to_dict())
        self.storage.save_wrong_word(banana.to_dict())

        self.assertEqual(self.storage.load_wrong_word('alice', 'CET4_T', 'apple')['id'], apple.id)
        self.assertEqual(self.storage.load_wrong_word_by_id('alice', banana.id)['word'], 'banana')
        self.assertEqual(len(self.storage.list_wrong_words('alice')), 1)
        self.assertEqual(len(self.storage.list_wrong_words('alice', include_resolved=True)), 2)
        self.assertEqual(self.storage.list_wrong_words('alice', 'CET6_T', True), [])

        self.assertTrue(self.storage.delete_wrong_word('alice', apple.id))
        self.assertFalse(self.storage.delete_wrong_word('alice', apple.id))
        self.assertIsNone(self.storage.load_wrong_word_by_id('alice', apple.id))

    def test_submissions_are_trimmed(self):
        self.storage.create_user('alice')
        for i in range(SUBMISSION_HISTORY_SIZE + 5):
            self.storage.save_submission('alice', f'sub-{i}', {'correct': True, 'n': i})
        self.assertIsNone(self.storage.load_submission('alice', 'sub-0'))
        self.assertIsNone(self.storage.load_submission('alice', 'sub-4'))
        self.assertEqual(self.storage.load_submission('alice', 'sub-5')['n'], 5)
        last = f'sub-{SUBMISSION_HISTORY_SIZE + 4}'
        self.assertEqual(self.storage.load_submission('alice', last)['n'], SUBMISSION_HISTORY_SIZE + 4)

    def test_unknown_user_reads(self):
        self.assertIsNone(self.storage.load_user_dictionary('ghost', 'CET4_T'))
        self.assertEqual(self.storage.list_word_progress('ghost'), [])
        self.assertEqual(self.storage.list_wrong_words('ghost'), [])
        self.assertIsNone(self.storage.load_submission('ghost', 'sub-1'))

    def test_corrupt_file_reads_as_missing(self):
        self.storage.create_user('alice')
        with open(self.storage._get_user_file('alice'), 'w') as f:
            f.write('{broken')
        self.assertIsNone(self.storage.load_user_dictionary('alice', 'CET4_T'))
        self.assertEqual(self.storage.list_user_dictionaries('alice'), [])

    def test_corrupt_file_is_not_overwritten(self):
        self.storage.create_user('alice')
        self.storage.save_word_progress(WordProgress('alice', 'CET4_T', 'apple').to_dict())
        user_file = self.storage._get_user_file('alice')
        with open(user_file, 'r+') as f:
            f.truncate(40)
        with open(user_file) as f:
            damaged = f.read()

        pear = WordProgress('alice', 'CET4_T', 'pear')
        with self.assertLogs('server.file_storage', level='ERROR'):
            with self.assertRaises(json.JSONDecodeError):
                self.storage.save_word_progress(pear.to_dict())
        with self.assertRaises(json.JSONDecodeError):
            self.storage.save_submission('alice', 'sub-1', {'correct': True})
        with open(user_file) as f:
            self.assertEqual(f.read(), damaged)


if __name__ == '__main__':
    unittest.main()
