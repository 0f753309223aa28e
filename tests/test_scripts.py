"""Tests for the dictionary load report script."""

import io
import tempfile
import unittest
from contextlib import redirect_stdout

from core.dictionary import DictionaryCatalog
from scripts.load_dictionaries import build_report, main

from mocks import SAMPLE_WORDS, write_dictionary


class TestLoadDictionaries(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.tmp.cleanup()

    def test_build_report(self):
        write_dictionary(self.tmp.name, 'CET4_T.json', SAMPLE_WORDS)
        write_dictionary(self.tmp.name, 'extra.json', SAMPLE_WORDS)
        report = build_report(DictionaryCatalog(self.tmp.name))
        self.assertEqual([d['id'] for d in report['loaded']], ['CET4_T'])
        self.assertTrue(report['validations']['CET4_T']['is_valid'])
        self.assertEqual(report['errors'], [{'filename': 'extra.json', 'error': 'No mapping found'}])

    def test_main_exit_codes(self):
        out = io.StringIO()
        with redirect_stdout(out):
            self.assertEqual(main([self.tmp.name]), 1)
        write_dictionary(self.tmp.name, 'CET6_T.json', SAMPLE_WORDS)
        with redirect_stdout(out):
            self.assertEqual(main([self.tmp.name]), 0)
        self.assertIn('CET6_T', out.getvalue())


if __name__ == '__main__':
    unittest.main()
