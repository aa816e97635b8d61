"""
commit.py - Finalizing a composition

The coordinator decides which string goes to the host, reports the
(original buffer, committed string) pair back to the backend, and resets the
session. The original buffer is captured before anything is cleared so the
feedback always refers to the exact input that produced the commit.
"""

import logging

logger = logging.getLogger(__name__)


class CommitCoordinator:
    """
    Args:
        session: The CompositionSession being committed
        provider: CandidateProvider used for the fallback lookup
        backend: SuggestionBackend receiving confirm_word() feedback (may be None)
        host: CompositionHost receiving the commit and the UI updates
    """

    def __init__(self, session, provider, backend, host):
        self._session = session
        self._provider = provider
        self._backend = backend
        self._host = host

    def resolve(self):
        """
        Pick the string that a commit of the current buffer would emit.

        Resolution order:
            1. the candidate under the cursor, if candidates are shown
            2. entry 0 of a fresh lookup of the buffer
            3. None
        """
        session = self._session
        if session.has_candidates():
            return session.candidates.current()
        return self._provider.first(session.buffer.text)

    def commit_best(self):
        """
        Commit the best candidate for the current buffer.

        The session is cleared and both preedit and candidate UI are hidden
        whether or not a string could be resolved. Nothing is committed and no
        feedback is sent when resolution fails.

        Returns:
            str or None: The committed string
        """
        session = self._session
        if session.buffer.is_empty():
            return None
        original = session.buffer.text
        text = self.resolve()
        if text:
            logger.debug(f'commit_best(): "{original}" -> "{text}"')
            self._host.commit(text)
            self._confirm(original, text)
        else:
            logger.debug(f'commit_best(): nothing to commit for "{original}"')
            text = None
        self.clear()
        return text

    def commit_symbol(self, symbol):
        '''
        Transliterate a single punctuation/digit character and commit it.
        No feedback is sent for symbols.
        '''
        text = self._provider.first(symbol)
        if text:
            logger.debug(f'commit_symbol("{symbol}") -> "{text}"')
            self._host.commit(text)
        return text

    def clear(self):
        self._session.clear()
        self._host.hide_preedit()
        self._host.hide_candidates()

    def _confirm(self, original, chosen):
        if self._backend is None:
            return
        try:
            self._backend.confirm_word(original, chosen)
        except Exception as e:
            logger.error(f'confirm_word("{original}", "{chosen}") failed: {e}')
