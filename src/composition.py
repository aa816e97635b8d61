#!/usr/bin/env python3
"""
composition.py - State of one composition session

================================================================================
OVERVIEW
================================================================================

A composition session lives as long as one focused input context (one engine
instance). It holds three pieces of state:

    buffer      the romanized text typed since the last commit/cancel
    candidates  the suggestions returned for the current buffer
    cursor      the highlighted candidate

    ┌────────────┐  append/backspace  ┌──────────────┐  refresh   ┌────────────┐
    │   Idle     │ ─────────────────► │  Composing   │ ─────────► │ candidates │
    │ buffer=""  │ ◄───────────────── │ buffer="kam" │            │ + cursor   │
    └────────────┘  commit / cancel   └──────────────┘            └────────────┘

Invariants:
    - candidates non-empty  =>  buffer non-empty
    - 0 <= cursor < len(candidates) whenever candidates is non-empty

================================================================================
"""

import logging

import keysyms

logger = logging.getLogger(__name__)


def is_accepted_char(c):
    '''
    Returns True if the character may be appended to the composition buffer.
    Only printable ASCII (0x20 - 0x7E) is accepted.
    '''
    if not isinstance(c, str) or len(c) != 1:
        return False
    return keysyms.is_printable(ord(c))


class CompositionBuffer:
    """
    The in-progress romanized text.

    The buffer operates on code points; backspace() removes exactly one of
    them regardless of how the text would be rendered.
    """

    def __init__(self):
        self._text = ''

    @property
    def text(self):
        return self._text

    def append(self, c):
        """
        Append a character to the buffer.

        Args:
            c: A single character

        Returns:
            bool: True if the character was appended, False if it is outside
                  the accepted alphabet (the buffer is left untouched)
        """
        if not is_accepted_char(c):
            logger.debug(f'CompositionBuffer.append({c!r}) rejected')
            return False
        self._text += c
        return True

    def backspace(self):
        """
        Remove the last character.

        Returns:
            bool: False if the buffer was already empty (the host should then
                  handle the key itself), True otherwise
        """
        if not self._text:
            return False
        self._text = self._text[:-1]
        return True

    def clear(self):
        self._text = ''

    def is_empty(self):
        return len(self._text) == 0

    def __len__(self):
        return len(self._text)

    def __str__(self):
        return self._text


class CandidateList:
    """
    Ordered candidates for the current buffer plus the cursor over them.
    The cursor is clamped; it never wraps around.
    """

    def __init__(self):
        self._items = []
        self._cursor = 0

    @property
    def items(self):
        return list(self._items)

    @property
    def cursor(self):
        '''
        The cursor index, or None when there are no candidates.
        '''
        if not self._items:
            return None
        return self._cursor

    def set(self, items):
        self._items = list(items)
        self._cursor = 0

    def clear(self):
        self._items = []
        self._cursor = 0

    def is_empty(self):
        return len(self._items) == 0

    def current(self):
        if not self._items:
            return None
        return self._items[self._cursor]

    def cursor_up(self):
        """
        Move the cursor one step towards the top of the list.

        Returns:
            bool: True if the cursor moved
        """
        if not self._items or self._cursor == 0:
            return False
        self._cursor -= 1
        return True

    def cursor_down(self):
        if not self._items or self._cursor >= len(self._items) - 1:
            return False
        self._cursor += 1
        return True

    def set_cursor(self, index):
        """
        Returns:
            bool: True if index was within range and the cursor was moved there
        """
        if not isinstance(index, int) or not 0 <= index < len(self._items):
            return False
        self._cursor = index
        return True

    def __len__(self):
        return len(self._items)


class CompositionSession:
    '''
    Buffer and candidates of one focused input context.
    '''

    def __init__(self):
        self.buffer = CompositionBuffer()
        self.candidates = CandidateList()

    def is_composing(self):
        return not self.buffer.is_empty()

    def has_candidates(self):
        return not self.candidates.is_empty()

    def clear(self):
        self.buffer.clear()
        self.candidates.clear()
