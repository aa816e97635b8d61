#!/usr/bin/env python3
# tests/conftest.py - Shared fixtures

import pytest
import os
import sys
from unittest.mock import MagicMock

# Add src directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from backend import SuggestionBackend
from controller import CompositionController, CompositionHost


class FakeBackend(SuggestionBackend):
    """Backend answering from a dict and recording every call"""

    def __init__(self, table=None):
        self.table = dict(table or {})
        self.queries = []
        self.confirmed = []
        self.init_count = 0
        self.destroy_count = 0

    def init(self):
        self.init_count += 1

    def destroy(self):
        self.destroy_count += 1

    def get_suggestions(self, prefix):
        self.queries.append(prefix)
        return self.table.get(prefix, [])

    def confirm_word(self, original, chosen):
        self.confirmed.append((original, chosen))


@pytest.fixture
def backend():
    return FakeBackend({
        'k': ['क', 'के', 'को'],
        'ka': ['क', 'का'],
        'kam': ['काम', 'कम'],
        'na': ['न', 'ना'],
        'nam': ['नाम'],
        '.': ['।'],
        '1': ['१'],
        ',': [','],
    })


@pytest.fixture
def host():
    return MagicMock(spec=CompositionHost)


@pytest.fixture
def controller(host, backend):
    return CompositionController(host, backend)
