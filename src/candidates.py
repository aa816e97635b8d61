"""
candidates.py - Candidate lookup on top of the suggestion backend

The backend answers get_suggestions(prefix) with an ordered list of
Devanagari strings. Native backends hand that list over as JSON text, so
every response goes through decode_suggestions() before it reaches the
composition state: whatever comes back, the caller receives a clean list of
strings (possibly empty) and never an exception.
"""

import logging

import orjson

logger = logging.getLogger(__name__)

DEFAULT_MAX_CANDIDATES = 10


def decode_suggestions(response):
    """
    Decode a backend response into an ordered list of candidate strings.

    Args:
        response: One of
                  - list/tuple of candidates
                  - JSON text (str or bytes) encoding such a list
                  - None (backend unavailable)

    Returns:
        list: The string entries of the response in backend order.
              Non-string and empty entries are skipped individually.
              Anything that is not a list yields [].
    """
    if response is None:
        return []
    if isinstance(response, (str, bytes, bytearray)):
        try:
            response = orjson.loads(response)
        except orjson.JSONDecodeError as e:
            logger.warning(f'decode_suggestions(): malformed JSON response: {e}')
            return []
    if not isinstance(response, (list, tuple)):
        logger.warning(f'decode_suggestions(): expected a list, got {type(response).__name__}')
        return []
    candidates = []
    for entry in response:
        if isinstance(entry, str) and entry:
            candidates.append(entry)
        else:
            logger.debug(f'decode_suggestions(): skipping entry {entry!r}')
    return candidates


class CandidateProvider:
    """
    Wraps backend queries and normalizes their responses.

    Args:
        backend: The SuggestionBackend to query. None means the backend is
                 unavailable; every query then yields no candidates.
        max_candidates: Upper bound on the length of a refreshed list
    """

    def __init__(self, backend, max_candidates=DEFAULT_MAX_CANDIDATES):
        self._backend = backend
        self._max_candidates = max_candidates

    @property
    def max_candidates(self):
        return self._max_candidates

    def query(self, text):
        '''
        Issues one get_suggestions() call and returns the decoded response
        (not capped). Backend failures are logged and yield [].
        '''
        if not text:
            return []
        if self._backend is None:
            logger.debug(f'query("{text}"): no backend')
            return []
        try:
            response = self._backend.get_suggestions(text)
        except Exception as e:
            logger.error(f'get_suggestions("{text}") failed: {e}')
            return []
        return decode_suggestions(response)

    def refresh(self, buffer):
        """
        Look up the candidates for the current buffer.

        Args:
            buffer: The composition buffer text

        Returns:
            list: At most max_candidates strings, in backend order.
                  An empty buffer yields [] without querying the backend.
        """
        if not buffer:
            return []
        candidates = self.query(buffer)[:self._max_candidates]
        logger.debug(f'refresh("{buffer}") -> {candidates}')
        return candidates

    def first(self, text):
        """
        Single-shot lookup used for symbols and for commits without a shown
        candidate list.

        Returns:
            str or None: Entry 0 of the response, if any
        """
        candidates = self.query(text)
        if candidates:
            return candidates[0]
        return None
