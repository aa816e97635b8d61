#!/usr/bin/env python3
# tests/test_simulator.py - Unit tests for simulator.py

import pytest
import io
import os
import sys
from unittest.mock import patch

# Add src directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

import keysyms
import simulator
from backend import DictionaryBackend, NativeBackend
from conftest import FakeBackend


def simulate(text, backend, **kwargs):
    out = io.StringIO()
    simulator.run(io.StringIO(text), backend, out, **kwargs)
    return out.getvalue().splitlines()


class TestParseToken:
    """Test suite for parse_token()"""

    def test_named_keys(self):
        assert simulator.parse_token('Return') == [('key', keysyms.Return, 0)]
        assert simulator.parse_token('space') == [('key', keysyms.space, 0)]
        assert simulator.parse_token('BackSpace') == [('key', keysyms.BackSpace, 0)]

    def test_characters(self):
        assert simulator.parse_token('kA') == [
            ('key', ord('k'), 0),
            ('key', ord('A'), keysyms.SHIFT_MASK),
        ]

    def test_click(self):
        assert simulator.parse_token('click:3') == [('click', 3)]

    def test_modifiers(self):
        assert simulator.parse_token('ctrl+c') == [('key', ord('c'), keysyms.CONTROL_MASK)]
        assert simulator.parse_token('alt+Return') == [('key', keysyms.Return, keysyms.MOD1_MASK)]

    @pytest.mark.parametrize('token', ['click:', 'click:one', 'ctrl+foo'])
    def test_malformed(self, token):
        with pytest.raises(ValueError):
            simulator.parse_token(token)


class TestRun:
    """Test suite for run()"""

    def test_compose_and_commit(self, backend):
        lines = simulate('ka m Return\n', backend)
        assert lines == [
            'UPDATE_PREEDIT_TEXT k',
            'UPDATE_LOOKUP_TABLE 0 क|के|को',
            'UPDATE_PREEDIT_TEXT ka',
            'UPDATE_LOOKUP_TABLE 0 क|का',
            'UPDATE_PREEDIT_TEXT kam',
            'UPDATE_LOOKUP_TABLE 0 काम|कम',
            'COMMIT_TEXT काम',
            'HIDE_PREEDIT_TEXT',
            'HIDE_LOOKUP_TABLE',
        ]
        assert backend.confirmed == [('kam', 'काम')]

    def test_click(self, backend):
        lines = simulate('kam click:1', backend)
        assert 'COMMIT_TEXT कम' in lines
        assert backend.confirmed == [('kam', 'कम')]

    def test_unconsumed_keys_are_reported(self, backend):
        lines = simulate('Return ctrl+c', backend)
        assert lines == ['PASS Return', 'PASS c']

    def test_bad_tokens_are_skipped(self, backend):
        lines = simulate('click:x k', backend)
        assert lines[0] == 'UPDATE_PREEDIT_TEXT k'

    def test_tab_commit_can_be_disabled(self, backend):
        lines = simulate('kam Tab', backend, commit_on_tab=False)
        assert lines[-1] == 'PASS Tab'

    def test_max_candidates(self, backend):
        lines = simulate('k', backend, max_candidates=2)
        assert lines[-1] == 'UPDATE_LOOKUP_TABLE 0 क|के'

    def test_backend_lifecycle(self, backend):
        simulate('kam', backend)
        assert backend.init_count == 1
        assert backend.destroy_count == 1
        # unfinished composition is dropped, not committed
        assert backend.confirmed == []

    def test_backend_destroyed_on_error(self):
        backend = FakeBackend()

        def explode(lines):
            yield 'k'
            raise KeyboardInterrupt

        with pytest.raises(KeyboardInterrupt):
            simulator.run(explode(None), backend, io.StringIO())
        assert backend.destroy_count == 1


class TestMain:
    """Test suite for the command line entry point"""

    def test_build_native_backend(self):
        args = simulator.argparse.Namespace(backend='native', library='/tmp/lib.so')
        assert isinstance(simulator.build_backend(args), NativeBackend)

    def test_main_with_dictionary(self, tmp_path, capsys):
        words = tmp_path / 'words.json'
        words.write_text('{"nam": {"नाम": 3}}', encoding='utf-8')
        with patch('sys.stdin', io.StringIO('nam space\n')):
            assert simulator.main(['-D', str(words)]) == 0
        out = capsys.readouterr().out.splitlines()
        assert 'COMMIT_TEXT नाम' in out

    def test_word_missing_from_dictionary_is_committed(self, tmp_path, capsys):
        words = tmp_path / 'words.json'
        words.write_text('{"kam": {"काम": 5}}', encoding='utf-8')
        with patch('sys.stdin', io.StringIO('namaste space\n')):
            assert simulator.main(['-D', str(words)]) == 0
        out = capsys.readouterr().out.splitlines()
        assert 'UPDATE_LOOKUP_TABLE 0 नमस्ते|नमास्ते' in out
        assert 'COMMIT_TEXT नमस्ते' in out

    def test_main_builds_dictionary_backend(self):
        with patch('simulator.run') as run, patch('simulator.setup_logging'):
            simulator.main(['-D', 'a.json', '-D', 'b.json', '-n', '4', '-m', '3', '--no-tab-commit'])
        backend = run.call_args[0][1]
        assert isinstance(backend, DictionaryBackend)
        assert run.call_args[1] == {'max_candidates': 3, 'commit_on_tab': False}

    def test_invalid_max_candidates(self):
        with pytest.raises(SystemExit):
            simulator.main(['-m', '0'])

    def test_invalid_suggestion_count(self):
        with pytest.raises(SystemExit):
            simulator.main(['-n', '0'])
