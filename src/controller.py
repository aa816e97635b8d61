"""
controller.py - The composition controller behind each input context

The host framework (IBus, or the console simulator) sees one object with
three callbacks: process_key(), candidate_clicked() and teardown(). Everything
the controller wants the host to display goes through a CompositionHost.
"""

import logging

from candidates import CandidateProvider, DEFAULT_MAX_CANDIDATES
from commit import CommitCoordinator
from composition import CompositionSession
from router import KeyEventRouter

logger = logging.getLogger(__name__)


class CompositionHost:
    """
    Output surface of the controller. Implemented by the IBus engine and by
    the console simulator.
    """

    def update_preedit(self, text):
        raise NotImplementedError

    def hide_preedit(self):
        raise NotImplementedError

    def update_candidates(self, candidates, cursor):
        raise NotImplementedError

    def hide_candidates(self):
        raise NotImplementedError

    def commit(self, text):
        raise NotImplementedError


class CompositionController:
    """
    Owns one CompositionSession and wires buffer, candidate lookup, commit
    logic and key routing together.

    Args:
        host: CompositionHost
        backend: The shared SuggestionBackend (None if unavailable)
        max_candidates: Cap on the number of shown candidates
        commit_on_tab: Whether Tab commits the composition
    """

    def __init__(self, host, backend, max_candidates=DEFAULT_MAX_CANDIDATES, commit_on_tab=True):
        self._host = host
        self.session = CompositionSession()
        self._provider = CandidateProvider(backend, max_candidates)
        self._coordinator = CommitCoordinator(self.session, self._provider, backend, host)
        self._router = KeyEventRouter(self.session, self._provider, self._coordinator, host, commit_on_tab)

    def process_key(self, keyval, keycode, modifiers):
        return self._router.route(keyval, keycode, modifiers)

    def candidate_clicked(self, index):
        """
        Commit the candidate at the given (absolute) index.

        Returns:
            str or None: The committed string. Clicks outside the shown list
                         are ignored.
        """
        if not self.session.candidates.set_cursor(index):
            logger.debug(f'candidate_clicked({index}) ignored; {len(self.session.candidates)} candidate(s) shown')
            return None
        return self._coordinator.commit_best()

    def cancel(self):
        if not self.session.is_composing():
            return False
        self._router.cancel()
        return True

    def teardown(self):
        '''
        Drop any pending composition; called when the input context goes away.
        Nothing is committed and the backend is not notified.
        '''
        if self.session.is_composing():
            logger.debug(f'teardown(): dropping "{self.session.buffer.text}"')
        self.session.clear()
