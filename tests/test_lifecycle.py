#!/usr/bin/env python3
# tests/test_lifecycle.py - Unit tests for lifecycle.py

import pytest
import os
import sys
from unittest.mock import MagicMock

# Add src directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from lifecycle import SessionLifecycle
from conftest import FakeBackend


class TestSessionLifecycle:
    """Test suite for the reference-counted backend lifecycle"""

    @pytest.fixture
    def factory(self):
        return MagicMock(side_effect=lambda: FakeBackend())

    def test_no_backend_before_first_session(self, factory):
        lifecycle = SessionLifecycle(factory)
        assert lifecycle.backend is None
        assert lifecycle.session_count == 0
        factory.assert_not_called()

    def test_first_session_initializes_backend(self, factory):
        lifecycle = SessionLifecycle(factory)
        backend = lifecycle.on_session_start()
        assert backend is lifecycle.backend
        assert backend.init_count == 1
        assert lifecycle.session_count == 1

    def test_backend_shared_across_sessions(self, factory):
        lifecycle = SessionLifecycle(factory)
        first = lifecycle.on_session_start()
        second = lifecycle.on_session_start()
        third = lifecycle.on_session_start()
        assert first is second is third
        assert factory.call_count == 1
        assert first.init_count == 1
        assert lifecycle.session_count == 3

    def test_last_session_destroys_backend(self, factory):
        lifecycle = SessionLifecycle(factory)
        backend = lifecycle.on_session_start()
        lifecycle.on_session_start()
        lifecycle.on_session_end()
        assert backend.destroy_count == 0
        assert lifecycle.backend is backend
        lifecycle.on_session_end()
        assert backend.destroy_count == 1
        assert lifecycle.backend is None
        assert lifecycle.session_count == 0

    def test_unmatched_end_does_not_underflow(self, factory):
        lifecycle = SessionLifecycle(factory)
        lifecycle.on_session_end()
        lifecycle.on_session_end()
        assert lifecycle.session_count == 0
        backend = lifecycle.on_session_start()
        assert backend.init_count == 1
        assert lifecycle.session_count == 1

    def test_reopen_creates_fresh_backend(self, factory):
        lifecycle = SessionLifecycle(factory)
        first = lifecycle.on_session_start()
        lifecycle.on_session_end()
        second = lifecycle.on_session_start()
        assert first is not second
        assert first.destroy_count == 1
        assert second.init_count == 1
        assert factory.call_count == 2

    def test_init_failure_leaves_no_backend(self):
        backend = MagicMock()
        backend.init.side_effect = OSError('library missing')
        lifecycle = SessionLifecycle(lambda: backend)
        assert lifecycle.on_session_start() is None
        assert lifecycle.session_count == 1
        lifecycle.on_session_end()
        backend.destroy.assert_not_called()
        assert lifecycle.session_count == 0

    def test_destroy_failure_is_contained(self):
        backend = MagicMock()
        backend.destroy.side_effect = RuntimeError('save failed')
        lifecycle = SessionLifecycle(lambda: backend)
        lifecycle.on_session_start()
        lifecycle.on_session_end()
        assert lifecycle.backend is None
        assert lifecycle.session_count == 0
