"""Tests for the FastAPI server with mock storage and hint provider."""

import tempfile
import unittest

from fastapi.testclient import TestClient

from core.dictionary import DictionaryCatalog
from server.app import create_app

from mocks import MockStorage, MockAIProvider, SAMPLE_WORDS, write_dictionary


class ServerTestCase(unittest.TestCase):
    """Base class: one app per test with user 'alice' already created."""

    hint_provider = True

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        write_dictionary(self.tmp.name, 'CET4_T.json', SAMPLE_WORDS)
        self.catalog = DictionaryCatalog(self.tmp.name)
        self.catalog.load()
        self.storage = MockStorage()
        self.provider = MockAIProvider() if self.hint_provider else None
        self.client = TestClient(create_app(self.storage, self.catalog, self.provider))
        self.client.post('/api/users/alice')

    def tearDown(self):
        self.tmp.cleanup()

    def start(self):
        response = self.client.post('/api/user/dictionaries/CET4_T/start', params={'user_id': 'alice'})
        self.assertEqual(response.status_code, 200)

    def answer(self, word, index, is_correct, **extra):
        return self.client.post('/api/user/word-answer', json={
            'user_id': 'alice', 'dictionary_id': 'CET4_T', 'word': word,
            'word_index': index, 'is_correct': is_correct, **extra
        })


class TestUserEndpoints(ServerTestCase):

    def test_health(self):
        response = self.client.get('/')
        self.assertEqual(response.json(), {'name': 'vocabin', 'status': 'ok', 'dictionaries': 1})

    def test_create_and_list_users(self):
        self.assertFalse(self.client.post('/api/users/alice').json()['success'])
        self.assertTrue(self.client.post('/api/users/bob').json()['success'])
        self.assertEqual(self.client.get('/api/users').json(), {'users': ['alice', 'bob']})
        self.assertTrue(self.client.get('/api/users/bob/exists').json()['exists'])

    def test_delete_user(self):
        self.assertEqual(self.client.delete('/api/users/alice').status_code, 200)
        self.assertEqual(self.client.delete('/api/users/alice').status_code, 404)

    def test_unknown_user_is_404(self):
        response = self.client.get('/api/user/dictionaries', params={'user_id': 'ghost'})
        self.assertEqual(response.status_code, 404)

    def test_admin_stats(self):
        self.client.post('/api/users/bob')
        self.start()
        self.answer('apple', 0, False)
        data = self.client.get('/api/admin/stats').json()
        self.assertEqual(data['total_users'], 2)
        self.assertEqual(data['total_dictionaries'], 1)
        self.assertEqual(data['total_user_dictionaries'], 1)
        self.assertEqual(data['total_word_progress'], 1)
        self.assertEqual(data['unresolved_wrong_words'], 1)

    def test_events_need_event_log(self):
        response = self.client.get('/api/events/recent', params={'user_id': 'alice'})
        self.assertIn('error', response.json())


class TestDictionaryEndpoints(ServerTestCase):

    def test_list(self):
        data = self.client.get('/api/dictionaries').json()
        self.assertEqual(data['summary']['total_words'], 3)
        self.assertEqual(data['dictionaries'][0]['id'], 'CET4_T')

    def test_unknown_dictionary_is_404(self):
        self.assertEqual(self.client.get('/api/dictionaries/nope').status_code, 404)
        self.assertEqual(self.client.get('/api/dictionaries/nope/words').status_code, 404)

    def test_words(self):
        data = self.client.get('/api/dictionaries/CET4_T/words', params={'limit': 2}).json()
        self.assertEqual(len(data['words']), 2)
        self.assertTrue(data['pagination']['has_next'])
        self.assertEqual(self.client.get('/api/dictionaries/CET4_T/words',
                                         params={'limit': 500}).status_code, 422)

    def test_word(self):
        self.assertEqual(self.client.get('/api/dictionaries/CET4_T/words/2').json()['name'], 'banana')
        self.assertEqual(self.client.get('/api/dictionaries/CET4_T/words/3').status_code, 404)

    def test_search_stats_validate(self):
        data = self.client.get('/api/dictionaries/CET4_T/search', params={'q': 'nana'}).json()
        self.assertEqual([w['name'] for w in data['words']], ['banana'])
        self.assertEqual(self.client.get('/api/dictionaries/CET4_T/stats').json()['total_words'], 3)
        self.assertTrue(self.client.get('/api/dictionaries/CET4_T/validate').json()['is_valid'])

    def test_reload_and_cache(self):
        write_dictionary(self.tmp.name, 'CET6_T.json', SAMPLE_WORDS[:1])
        data = self.client.post('/api/dictionaries/reload').json()
        self.assertEqual(sorted(data['loaded']), ['CET4_T', 'CET6_T'])
        data = self.client.delete('/api/dictionaries/cache', params={'dictionary_id': 'CET6_T'}).json()
        self.assertEqual(data['cached'], ['CET4_T'])


class TestProgressEndpoints(ServerTestCase):

    def test_answer_flow(self):
        self.start()
        current = self.client.get('/api/user/dictionaries/CET4_T/current-word',
                                  params={'user_id': 'alice'}).json()
        self.assertEqual(current['word']['name'], 'apple')

        response = self.answer('apple', 0, False, user_answer='pear', response_time=1200)
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertFalse(data['correct'])
        self.assertEqual(data['wrong_word']['error_count'], 1)
        self.assertEqual(data['next_word']['name'], 'abandon')

        progress = self.client.get('/api/user/dictionaries/CET4_T/progress',
                                   params={'user_id': 'alice'}).json()
        self.assertEqual(progress['overall']['wrong_answers'], 1)
        self.assertEqual(progress['word_level_stats']['wrong_words_count'], 1)

    def test_answer_before_start_is_404(self):
        self.assertEqual(self.answer('apple', 0, True).status_code, 404)

    def test_answer_validation(self):
        self.start()
        self.assertEqual(self.answer('apple', 0, True, response_time=-1).status_code, 422)
        self.assertEqual(self.answer('apple', 0, True, user_difficulty=6).status_code, 422)
        self.assertEqual(self.answer('apple', -1, True).status_code, 422)

    def test_duplicate_submission(self):
        self.start()
        first = self.answer('apple', 0, True, submission_id='abc').json()
        second = self.answer('apple', 0, True, submission_id='abc').json()
        self.assertFalse(first['duplicate'])
        self.assertTrue(second['duplicate'])
        self.assertEqual(self.storage.load_user_dictionary('alice', 'CET4_T')['correct_answers'], 1)

    def test_completed_dictionary_is_400(self):
        self.start()
        for index, word in enumerate(SAMPLE_WORDS):
            self.answer(word['name'], index, True)
        response = self.client.get('/api/user/dictionaries/CET4_T/current-word',
                                   params={'user_id': 'alice'})
        self.assertEqual(response.status_code, 400)

    def test_update_progress(self):
        self.start()
        response = self.client.put('/api/user/dictionaries/CET4_T/progress', json={
            'user_id': 'alice', 'current_position': 2, 'settings': {'daily_goal': 10}
        })
        progress = response.json()['progress']
        self.assertEqual(progress['current_position'], 2)
        self.assertEqual(progress['settings']['daily_goal'], 10)
        response = self.client.put('/api/user/dictionaries/CET4_T/progress', json={
            'user_id': 'alice', 'current_position': 9
        })
        self.assertEqual(response.status_code, 400)

    def test_pause_resume_reset(self):
        self.start()
        params = {'user_id': 'alice'}
        self.assertEqual(self.client.post('/api/user/dictionaries/CET4_T/pause', params=params)
                         .json()['progress']['status'], 'paused')
        self.assertEqual(self.client.post('/api/user/dictionaries/CET4_T/resume', params=params)
                         .json()['progress']['status'], 'in_progress')
        self.assertEqual(self.client.post('/api/user/dictionaries/CET4_T/reset', params=params)
                         .json()['progress']['status'], 'not_started')

    def test_word_actions(self):
        self.start()
        self.answer('apple', 0, False)
        body = {'user_id': 'alice', 'dictionary_id': 'CET4_T', 'word': 'apple'}
        data = self.client.post('/api/user/words/master', json=body).json()
        self.assertTrue(data['word_progress']['is_mastered'])
        mastered = self.client.get('/api/user/words/mastered', params={'user_id': 'alice'}).json()
        self.assertEqual(mastered['total'], 1)
        data = self.client.post('/api/user/words/reset', json=body).json()
        self.assertEqual(data['word_progress']['total_attempts'], 0)
        body['word'] = 'banana'
        self.assertEqual(self.client.post('/api/user/words/reset', json=body).status_code, 404)

    def test_overview(self):
        self.start()
        data = self.client.get('/api/user/dictionaries', params={'user_id': 'alice'}).json()
        self.assertEqual(data['summary']['started_dictionaries'], 1)


class TestWrongWordEndpoints(ServerTestCase):

    def setUp(self):
        super().setUp()
        self.start()
        self.wrong_id = self.answer('apple', 0, False, user_answer='pear').json()['wrong_word']['id']
        self.answer('abandon', 1, False)

    def test_list(self):
        data = self.client.get('/api/wrong-words',
                               params={'user_id': 'alice', 'sort_by': 'alphabetical'}).json()
        self.assertEqual([w['word'] for w in data['wrong_words']], ['abandon', 'apple'])
        self.assertEqual(data['summary']['total_wrong_words'], 2)
        response = self.client.get('/api/wrong-words', params={'user_id': 'alice', 'sort_by': 'random'})
        self.assertEqual(response.status_code, 422)

    def test_review_queue(self):
        queue = self.client.get('/api/wrong-words/review-queue', params={'user_id': 'alice'}).json()
        self.assertEqual(len(queue), 2)
        self.assertEqual(set(queue[0]), {'id', 'dictionary_id', 'word', 'urgency_score',
                                         'review_status', 'successful_review_rate'})

    def test_dictionary_wrong_words(self):
        data = self.client.get('/api/wrong-words/dictionaries/CET4_T', params={'user_id': 'alice'}).json()
        self.assertEqual(len(data['wrong_words']), 2)

    def test_high_priority_and_analytics(self):
        data = self.client.get('/api/wrong-words/high-priority', params={'user_id': 'alice'}).json()
        self.assertEqual(data['wrong_words'], [])
        data = self.client.get('/api/wrong-words/analytics', params={'user_id': 'alice'}).json()
        self.assertEqual(data['overall']['total_wrong_words'], 2)

    def test_review_until_resolved(self):
        for _ in range(3):
            response = self.client.post(f'/api/wrong-words/{self.wrong_id}/review', json={
                'user_id': 'alice', 'was_successful': True, 'review_method': 'quiz'
            })
        self.assertTrue(response.json()['wrong_word']['is_resolved'])
        response = self.client.post(f'/api/wrong-words/{self.wrong_id}/review', json={
            'user_id': 'alice', 'was_successful': True, 'review_method': 'guess'
        })
        self.assertEqual(response.status_code, 422)

    def test_resolve_notes_delete(self):
        params = {'user_id': 'alice'}
        data = self.client.put(f'/api/wrong-words/{self.wrong_id}/resolved', params=params).json()
        self.assertTrue(data['wrong_word']['is_resolved'])
        data = self.client.put(f'/api/wrong-words/{self.wrong_id}/unresolved', params=params).json()
        self.assertFalse(data['wrong_word']['is_resolved'])
        data = self.client.put(f'/api/wrong-words/{self.wrong_id}/notes',
                               json={'user_id': 'alice', 'mnemonic': 'red fruit'}).json()
        self.assertEqual(data['learning_notes']['mnemonic'], 'red fruit')
        self.assertEqual(self.client.delete(f'/api/wrong-words/{self.wrong_id}', params=params)
                         .json()['deleted_word']['word'], 'apple')
        self.assertEqual(self.client.delete(f'/api/wrong-words/{self.wrong_id}', params=params)
                         .status_code, 404)

    def test_hints(self):
        response = self.client.post(f'/api/wrong-words/{self.wrong_id}/hints', json={'user_id': 'alice'})
        data = response.json()
        self.assertEqual(data['word'], 'apple')
        self.assertEqual(data['total_hints'], 2)
        self.assertEqual(self.provider.generate_hints_calls[0][0], 'apple')

        response = self.client.put(f'/api/wrong-words/{self.wrong_id}/hints/0',
                                   json={'user_id': 'alice', 'rating': 4})
        self.assertEqual(response.json()['hints'][0]['effectiveness_rating'], 4)
        response = self.client.put(f'/api/wrong-words/{self.wrong_id}/hints/9',
                                   json={'user_id': 'alice', 'rating': 4})
        self.assertEqual(response.status_code, 404)

    def test_unknown_wrong_word_is_404(self):
        response = self.client.put('/api/wrong-words/missing/resolved', params={'user_id': 'alice'})
        self.assertEqual(response.status_code, 404)


class TestWithoutHintProvider(ServerTestCase):

    hint_provider = False

    def test_hints_unavailable(self):
        self.start()
        wrong_id = self.answer('apple', 0, False).json()['wrong_word']['id']
        response = self.client.post(f'/api/wrong-words/{wrong_id}/hints', json={'user_id': 'alice'})
        self.assertEqual(response.status_code, 503)


if __name__ == '__main__':
    unittest.main()
