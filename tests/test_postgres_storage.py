"""Tests for the PostgreSQL storage backend with the connection mocked."""

import json
import unittest
from unittest.mock import MagicMock, patch

import psycopg2

from server.postgres_storage import PostgresStorage


class TestPostgresStorage(unittest.TestCase):

    def setUp(self):
        patcher = patch('server.postgres_storage.psycopg2.connect')
        self.connect = patcher.start()
        self.addCleanup(patcher.stop)
        self.db = MagicMock()
        self.db.closed = 0
        self.connect.return_value = self.db
        self.cursor = self.db.cursor.return_value.__enter__.return_value
        self.storage = PostgresStorage(db_url='postgresql://test/vocabin')
        self.storage.conn  # creates tables
        self.cursor.reset_mock()
        self.db.commit.reset_mock()

    def test_connects_once(self):
        self.storage.conn
        self.connect.assert_called_once_with('postgresql://test/vocabin')

    def test_list_wrong_words_filters(self):
        self.cursor.fetchall.return_value = [{'data': {'word': 'apple'}}]
        rows = self.storage.list_wrong_words('alice', 'CET4_T')
        self.assertEqual(rows, [{'word': 'apple'}])
        query, params = self.cursor.execute.call_args[0]
        self.assertIn('dictionary_id = %s', query)
        self.assertIn('is_resolved = FALSE', query)
        self.assertEqual(params, ('alice', 'CET4_T'))

        self.storage.list_wrong_words('alice', include_resolved=True)
        query, params = self.cursor.execute.call_args[0]
        self.assertNotIn('is_resolved', query)
        self.assertEqual(params, ('alice',))

    def test_save_wrong_word(self):
        data = {'id': 'abc', 'user_id': 'alice', 'dictionary_id': 'CET4_T', 'word': 'apple',
                'is_resolved': False}
        self.storage.save_wrong_word(data)
        params = self.cursor.execute.call_args[0][1]
        self.assertEqual(params[:5], ('abc', 'alice', 'CET4_T', 'apple', False))
        self.assertEqual(json.loads(params[5]), data)
        self.db.commit.assert_called_once()

    def test_write_error_rolls_back(self):
        self.cursor.execute.side_effect = psycopg2.Error('boom')
        with self.assertRaises(psycopg2.Error):
            self.storage.save_user_dictionary({'user_id': 'alice', 'dictionary_id': 'CET4_T'})
        self.db.rollback.assert_called_once()

    def test_read_error_returns_none(self):
        self.cursor.execute.side_effect = psycopg2.Error('boom')
        self.assertIsNone(self.storage.load_word_progress('alice', 'CET4_T', 'apple'))
        self.assertEqual(self.storage.list_user_dictionaries('alice'), [])
        self.assertEqual(self.db.rollback.call_count, 2)

    def test_read_error_clears_aborted_transaction(self):
        self.cursor.execute.side_effect = psycopg2.Error('boom')
        self.assertFalse(self.storage.user_exists('alice'))
        self.assertEqual(self.storage.list_users(), [])
        self.assertEqual(self.storage.get_user_events('alice'), [])
        self.assertEqual(self.db.rollback.call_count, 3)

        self.cursor.execute.side_effect = None
        self.cursor.fetchone.return_value = (1,)
        self.assertTrue(self.storage.user_exists('alice'))

    def test_log_event(self):
        self.storage.log_event('answer.submit', 'alice', dictionary_id='CET4_T', word='apple')
        params = self.cursor.execute.call_args[0][1]
        self.assertEqual(params[:3], ('answer.submit', 'alice', 'CET4_T'))
        self.assertEqual(json.loads(params[3]), {'word': 'apple'})

    def test_log_event_error_is_logged(self):
        self.cursor.execute.side_effect = psycopg2.Error('boom')
        with self.assertLogs('server.postgres_storage', level='ERROR'):
            self.storage.log_event('user.create', 'alice')
        self.db.rollback.assert_called_once()


if __name__ == '__main__':
    unittest.main()
