"""
lifecycle.py - Reference-counted ownership of the shared suggestion backend

IBus creates one engine instance per input context, but all of them share a
single backend. The backend is built and initialized when the first session
starts, and destroyed when the last session ends:

    sessions  0 ──start──► 1 ──start──► 2 ──end──► 1 ──end──► 0
    backend      init()                                 destroy()
"""

import logging
import threading

logger = logging.getLogger(__name__)


class SessionLifecycle:
    """
    Args:
        backend_factory: Callable returning a new SuggestionBackend. It is
                         invoked on every 0 -> 1 transition.
    """

    def __init__(self, backend_factory):
        self._backend_factory = backend_factory
        self._backend = None
        self._count = 0
        # IBus serializes events, this only matters for multi-threaded hosts
        self._lock = threading.Lock()

    @property
    def backend(self):
        '''
        The shared backend, or None when no session is open.
        '''
        with self._lock:
            return self._backend

    @property
    def session_count(self):
        with self._lock:
            return self._count

    def on_session_start(self):
        """
        Register a new session.

        Returns:
            The shared backend (None if it could not be created)
        """
        with self._lock:
            self._count += 1
            if self._count == 1:
                self._backend = self._create_backend()
            logger.debug(f'on_session_start(): {self._count} open session(s)')
            return self._backend

    def on_session_end(self):
        '''
        Unregister a session. An end without a matching start is ignored.
        '''
        with self._lock:
            if self._count == 0:
                logger.warning('on_session_end() called without an open session; ignoring')
                return
            self._count -= 1
            logger.debug(f'on_session_end(): {self._count} open session(s)')
            if self._count == 0:
                self._destroy_backend()

    def _create_backend(self):
        try:
            backend = self._backend_factory()
            backend.init()
        except Exception as e:
            logger.error(f'Failed to initialize the suggestion backend: {e}')
            return None
        logger.info(f'Suggestion backend initialized: {type(backend).__name__}')
        return backend

    def _destroy_backend(self):
        backend = self._backend
        self._backend = None
        if backend is None:
            return
        try:
            backend.destroy()
        except Exception as e:
            logger.error(f'Failed to destroy the suggestion backend: {e}')
            return
        logger.info('Suggestion backend destroyed')
