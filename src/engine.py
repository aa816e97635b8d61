from backend import DictionaryBackend, NativeBackend, DEFAULT_LIBRARY_NAME, DEFAULT_SUGGESTION_COUNT
from controller import CompositionController, CompositionHost
from lifecycle import SessionLifecycle
import util

import logging

import gi
gi.require_version('IBus', '1.0')
from gi.repository import IBus
# http://lazka.github.io/pgi-docs/IBus-1.0/classes/Engine.html

logger = logging.getLogger(__name__)

NAME_TO_ORIENTATION = {
    'vertical': IBus.Orientation.VERTICAL,
    'horizontal': IBus.Orientation.HORIZONTAL,
    'system': IBus.Orientation.SYSTEM,
}

# shared by every engine instance of this process
_lifecycle = None


def create_backend(config):
    """
    Build the backend selected by the configuration.

    Args:
        config: Configuration dictionary (see util.DEFAULT_CONFIG)

    Returns:
        SuggestionBackend (not yet initialized)
    """
    name = config.get('backend', 'native')
    if name == 'dictionary':
        return DictionaryBackend(
            dictionary_files=util.get_dictionary_files(config),
            user_dictionary_path=util.get_user_dictionary_path(),
            suggestion_count=config.get('suggestion_count', DEFAULT_SUGGESTION_COUNT))
    if name != 'native':
        logger.warning(f'Unknown backend "{name}"; using the native backend')
    return NativeBackend(config.get('library_path') or DEFAULT_LIBRARY_NAME)


def get_lifecycle():
    global _lifecycle
    if _lifecycle is None:
        _lifecycle = SessionLifecycle(lambda: create_backend(util.get_config_data()[0]))
    return _lifecycle


class EngineHost(CompositionHost):
    '''
    Renders the controller output through the IBus engine.
    '''

    def __init__(self, engine, lookup_table):
        self._engine = engine
        self._lookup_table = lookup_table

    def update_preedit(self, text):
        # cursor at the end of the preedit
        self._engine.update_preedit_text(IBus.Text.new_from_string(text), len(text), True)

    def hide_preedit(self):
        self._engine.hide_preedit_text()

    def update_candidates(self, candidates, cursor):
        self._lookup_table.clear()
        for candidate in candidates:
            self._lookup_table.append_candidate(IBus.Text.new_from_string(candidate))
        self._lookup_table.set_cursor_pos(cursor)
        self._engine.update_lookup_table(self._lookup_table, True)

    def hide_candidates(self):
        self._lookup_table.clear()
        self._engine.hide_lookup_table()

    def commit(self, text):
        self._engine.commit_text(IBus.Text.new_from_string(text))


class EngineNepaliSmart(IBus.Engine):
    '''
    One instance per input context. Key events and candidate clicks are
    forwarded to a CompositionController; the backend is shared through the
    process-wide SessionLifecycle.
    '''
    __gtype_name__ = 'EngineNepaliSmart'

    def __init__(self):
        super().__init__()
        self._load_configs()

        self._lookup_table = IBus.LookupTable.new(self._config['max_candidates'], 0, True, False)
        self._lookup_table.set_orientation(NAME_TO_ORIENTATION[self._config['lookup_table_orientation']])

        self._lifecycle = get_lifecycle()
        backend = self._lifecycle.on_session_start()
        self._session_open = True
        self._controller = CompositionController(
            EngineHost(self, self._lookup_table),
            backend,
            max_candidates=self._config['max_candidates'],
            commit_on_tab=self._config['commit_on_tab'])
        logger.debug('Engine init -- done')

    def _load_configs(self):
        '''
        This function loads the config JSON file and applies the logging level.
        The logging level value would be set to WARNING, if it's absent in the config JSON.
        '''
        self._config, warnings = util.get_config_data()
        level = util.get_logging_level(self._config)
        logger.info(f'logging_level: {level}')
        logging.getLogger().setLevel(util.NAME_TO_LOGGING_LEVEL[level])
        if warnings:
            logger.debug('config.json loaded with warnings')

    def do_process_key_event(self, keyval, keycode, state):
        return self._controller.process_key(keyval, keycode, state)

    def do_candidate_clicked(self, index, button, state):
        # index is relative to the page currently shown
        page_size = self._lookup_table.get_page_size()
        page_start = (self._lookup_table.get_cursor_pos() // page_size) * page_size
        logger.debug(f'candidate_clicked({index}, {button}, {state})')
        self._controller.candidate_clicked(page_start + index)

    def do_destroy(self):
        if self._session_open:
            self._session_open = False
            self._controller.teardown()
            self._lifecycle.on_session_end()
        IBus.Engine.do_destroy(self)
