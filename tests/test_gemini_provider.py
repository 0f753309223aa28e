"""Tests for the Gemini hint provider with the Gemini client patched out."""

import unittest
from unittest.mock import MagicMock, patch

from server.gemini_provider import GeminiProvider, MAX_HINTS


class TestGeminiProvider(unittest.TestCase):
    """Test cases for parsing hint responses."""

    def setUp(self):
        patcher = patch('server.gemini_provider.genai')
        self.genai = patcher.start()
        self.addCleanup(patcher.stop)
        self.provider = GeminiProvider('test-api-key')

    def respond(self, text: str):
        self.provider.model.generate_content.return_value = MagicMock(text=text)

    def test_configures_client(self):
        self.genai.configure.assert_called_once_with(api_key='test-api-key')
        self.genai.GenerativeModel.assert_called_once_with('gemini-2.0-flash')

    def test_sanitize_hints(self):
        raw = "```python\n[{'hint_type': 'etymology', 'hint_content': null}]\n```"
        self.assertEqual(self.provider._sanitize_hints(raw),
                         "[{'hint_type': 'etymology', 'hint_content': None}]")

    def test_valid_response(self):
        self.respond("```python\n["
                     "{'hint_type': 'etymology', 'hint_content': ' From Old English aeppel. '},"
                     "{'hint_type': 'usage_example', 'hint_content': 'She ate an apple.'}"
                     "]\n```")
        hints, ms = self.provider.generate_hints('apple', ['n. 苹果'], [{'user_answer': 'pear'}])
        self.assertEqual(hints, [
            {'hint_type': 'etymology', 'hint_content': 'From Old English aeppel.'},
            {'hint_type': 'usage_example', 'hint_content': 'She ate an apple.'}
        ])
        self.assertGreaterEqual(ms, 0)
        prompt = self.provider.model.generate_content.call_args[0][0]
        self.assertIn('apple', prompt)
        self.assertIn('pear', prompt)

    def test_malformed_entries_are_dropped(self):
        self.respond("[{'hint_type': 'rhyme', 'hint_content': 'x'},"
                     " {'hint_type': 'etymology', 'hint_content': ''},"
                     " 'just a string',"
                     " {'hint_type': 'memory_technique', 'hint_content': 'Picture it.'}]")
        hints, _ = self.provider.generate_hints('apple', [], [])
        self.assertEqual(hints, [{'hint_type': 'memory_technique', 'hint_content': 'Picture it.'}])

    def test_hints_are_capped(self):
        entry = "{'hint_type': 'etymology', 'hint_content': 'hint'}"
        self.respond('[' + ', '.join([entry] * (MAX_HINTS + 2)) + ']')
        hints, _ = self.provider.generate_hints('apple', [], [])
        self.assertEqual(len(hints), MAX_HINTS)

    def test_unparseable_response(self):
        self.respond('Sorry, I cannot help with that.')
        with self.assertLogs('server.gemini_provider', level='ERROR'):
            hints, _ = self.provider.generate_hints('apple', [], [])
        self.assertEqual(hints, [])


if __name__ == '__main__':
    unittest.main()
