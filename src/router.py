#!/usr/bin/env python3
"""
router.py - Key classification and dispatch

================================================================================
DISPATCH PRIORITY
================================================================================

Every key event is classified into exactly one action; the first rule that
matches wins:

    1. PASS_THROUGH      release events, Control/Alt combinations
    2. IMMEDIATE_COMMIT  . , ? and digits: commit the composition (if any),
                         then transliterate and commit the symbol itself
    3. NAVIGATE_UP/DOWN  Up/Down while candidates are shown
    4. COMMIT            Return, KP_Enter, space, Tab (configurable)
    5. CANCEL            Escape
    6. BACKSPACE         BackSpace
    7. APPEND            any other printable ASCII key
    8. IGNORE            everything else

Whether an action consumes the event depends on the state:

    action            Idle (buffer empty)     Composing
    ---------------   ---------------------   ------------------------
    PASS_THROUGH      not consumed            not consumed
    IMMEDIATE_COMMIT  consumed                consumed
    NAVIGATE_*        (only with candidates)  consumed
    COMMIT            not consumed            consumed
    CANCEL            not consumed            consumed
    BACKSPACE         not consumed            consumed
    APPEND            consumed                consumed
    IGNORE            not consumed            not consumed

================================================================================
"""

from enum import Enum
import logging

import keysyms

logger = logging.getLogger(__name__)

IMMEDIATE_COMMIT_KEYVALS = frozenset(
    [keysyms.period, keysyms.comma, keysyms.question] +
    list(range(keysyms.KEY_0, keysyms.KEY_9 + 1)))

COMMIT_KEYVALS = frozenset([keysyms.Return, keysyms.KP_Enter, keysyms.space])


class KeyAction(Enum):
    PASS_THROUGH = 'pass_through'
    IMMEDIATE_COMMIT = 'immediate_commit'
    NAVIGATE_UP = 'navigate_up'
    NAVIGATE_DOWN = 'navigate_down'
    COMMIT = 'commit'
    CANCEL = 'cancel'
    BACKSPACE = 'backspace'
    APPEND = 'append'
    IGNORE = 'ignore'


def classify_key(keyval, modifiers, has_candidates, commit_on_tab=True):
    """
    Classify a key event.

    Args:
        keyval: The keysym delivered by the host
        modifiers: Modifier state (keysyms.*_MASK bits)
        has_candidates: Whether the candidate list is currently shown
        commit_on_tab: Whether Tab belongs to the commit keys

    Returns:
        KeyAction
    """
    if modifiers & keysyms.RELEASE_MASK:
        return KeyAction.PASS_THROUGH
    if modifiers & (keysyms.CONTROL_MASK | keysyms.MOD1_MASK):
        return KeyAction.PASS_THROUGH
    if keyval in IMMEDIATE_COMMIT_KEYVALS:
        return KeyAction.IMMEDIATE_COMMIT
    if has_candidates:
        if keyval == keysyms.Up:
            return KeyAction.NAVIGATE_UP
        if keyval == keysyms.Down:
            return KeyAction.NAVIGATE_DOWN
    if keyval in COMMIT_KEYVALS or (commit_on_tab and keyval == keysyms.Tab):
        return KeyAction.COMMIT
    if keyval == keysyms.Escape:
        return KeyAction.CANCEL
    if keyval == keysyms.BackSpace:
        return KeyAction.BACKSPACE
    if keysyms.is_printable(keyval):
        return KeyAction.APPEND
    return KeyAction.IGNORE


class KeyEventRouter:
    """
    Applies classified key events to a composition session.

    Args:
        session: CompositionSession
        provider: CandidateProvider
        coordinator: CommitCoordinator for the same session
        host: CompositionHost receiving preedit/candidate updates
        commit_on_tab: Whether Tab commits the composition
    """

    def __init__(self, session, provider, coordinator, host, commit_on_tab=True):
        self._session = session
        self._provider = provider
        self._coordinator = coordinator
        self._host = host
        self._commit_on_tab = commit_on_tab

    def route(self, keyval, keycode, modifiers):
        '''
        Returns True if the event was consumed.
        '''
        session = self._session
        action = classify_key(keyval, modifiers, session.has_candidates(), self._commit_on_tab)
        logger.debug(f'route(keyval={keysyms.keyval_name(keyval)}, keycode={keycode}, '
                     f'modifiers={modifiers:#x}) -> {action.name}')

        if action == KeyAction.IMMEDIATE_COMMIT:
            if session.is_composing():
                self._coordinator.commit_best()
            self._coordinator.commit_symbol(chr(keyval))
            return True
        if action == KeyAction.NAVIGATE_UP:
            session.candidates.cursor_up()
            self._show_candidates()
            return True
        if action == KeyAction.NAVIGATE_DOWN:
            session.candidates.cursor_down()
            self._show_candidates()
            return True
        if action == KeyAction.COMMIT:
            if not session.is_composing():
                return False
            self._coordinator.commit_best()
            return True
        if action == KeyAction.CANCEL:
            if not session.is_composing():
                return False
            self.cancel()
            return True
        if action == KeyAction.BACKSPACE:
            if not session.buffer.backspace():
                return False
            self.refresh()
            return True
        if action == KeyAction.APPEND:
            if not session.buffer.append(keysyms.keyval_to_char(keyval)):
                return False
            self.refresh()
            return True
        # PASS_THROUGH and IGNORE
        return False

    def refresh(self):
        """
        Bring preedit and candidate UI in line with the buffer.

        An empty buffer hides both. Otherwise the preedit shows the buffer and
        the candidate list is re-queried; an empty result hides the list but
        keeps the preedit.
        """
        session = self._session
        text = session.buffer.text
        if not text:
            self._coordinator.clear()
            return
        self._host.update_preedit(text)
        candidates = self._provider.refresh(text)
        if candidates:
            session.candidates.set(candidates)
            self._show_candidates()
        else:
            session.candidates.clear()
            self._host.hide_candidates()

    def cancel(self):
        '''
        Discard the composition without committing or notifying the backend.
        '''
        logger.debug(f'cancel(): discarding "{self._session.buffer.text}"')
        self._coordinator.clear()

    def _show_candidates(self):
        candidates = self._session.candidates
        self._host.update_candidates(candidates.items, candidates.cursor)
