#!/usr/bin/env python3
"""
simulator.py - Drive the composition controller from a terminal

================================================================================
OVERVIEW
================================================================================

This tool runs the same CompositionController that the IBus engine uses, but
with a console host: every effect that IBus would render is printed as one
line on stdout. It is meant for trying out backends and dictionaries without
restarting the IBus daemon.

================================================================================
INPUT
================================================================================

stdin is read line by line; each line holds whitespace-separated tokens:

    Return, KP_Enter, space, Tab,      a named key
    Escape, BackSpace, Up, Down
    click:N                            click candidate N (0-based)
    ctrl+X, alt+X                      X pressed with Control / Alt
    anything else                      typed character by character

Example:

    $ echo "kam Return . namaste Down space" | python simulator.py -b dictionary -D words.json

================================================================================
OUTPUT
================================================================================

    UPDATE_PREEDIT_TEXT <text>
    HIDE_PREEDIT_TEXT
    UPDATE_LOOKUP_TABLE <cursor> <candidate|candidate|...>
    HIDE_LOOKUP_TABLE
    COMMIT_TEXT <text>
    PASS <key>                         key not consumed (the host would handle it)

================================================================================
"""

import argparse
import logging
import sys

from backend import DictionaryBackend, NativeBackend, DEFAULT_LIBRARY_NAME, DEFAULT_SUGGESTION_COUNT
from candidates import DEFAULT_MAX_CANDIDATES
from controller import CompositionController, CompositionHost
from lifecycle import SessionLifecycle
import keysyms

logger = logging.getLogger(__name__)

MODIFIER_PREFIXES = {
    'ctrl+': keysyms.CONTROL_MASK,
    'alt+': keysyms.MOD1_MASK,
}


class ConsoleHost(CompositionHost):
    '''
    Prints host effects, one per line.
    '''

    def __init__(self, out):
        self._out = out

    def _emit(self, line):
        print(line, file=self._out)

    def update_preedit(self, text):
        self._emit(f'UPDATE_PREEDIT_TEXT {text}')

    def hide_preedit(self):
        self._emit('HIDE_PREEDIT_TEXT')

    def update_candidates(self, candidates, cursor):
        self._emit(f'UPDATE_LOOKUP_TABLE {cursor} ' + '|'.join(candidates))

    def hide_candidates(self):
        self._emit('HIDE_LOOKUP_TABLE')

    def commit(self, text):
        self._emit(f'COMMIT_TEXT {text}')


def _keyval_for(name):
    if name in keysyms.NAME_TO_KEYVAL:
        return keysyms.NAME_TO_KEYVAL[name]
    if len(name) == 1:
        return ord(name)
    raise ValueError(f'unknown key "{name}"')


def parse_token(token):
    """
    Translate one input token into events.

    Returns:
        list: ('key', keyval, modifiers) and ('click', index) tuples

    Raises:
        ValueError: For a malformed click or modifier token
    """
    if token in keysyms.NAME_TO_KEYVAL:
        return [('key', keysyms.NAME_TO_KEYVAL[token], 0)]
    if token.startswith('click:'):
        return [('click', int(token[len('click:'):]))]
    for prefix, mask in MODIFIER_PREFIXES.items():
        if token.startswith(prefix) and len(token) > len(prefix):
            return [('key', _keyval_for(token[len(prefix):]), mask)]
    events = []
    for c in token:
        modifiers = keysyms.SHIFT_MASK if c.isupper() else 0
        events.append(('key', ord(c), modifiers))
    return events


def run(lines, backend, out, max_candidates=DEFAULT_MAX_CANDIDATES, commit_on_tab=True):
    """
    Feed every token of lines through one composition session.

    Args:
        lines: Iterable of input lines
        backend: SuggestionBackend (initialized and destroyed here)
        out: Text stream receiving the host effects
    """
    lifecycle = SessionLifecycle(lambda: backend)
    controller = CompositionController(ConsoleHost(out), lifecycle.on_session_start(),
                                       max_candidates=max_candidates, commit_on_tab=commit_on_tab)
    try:
        for line in lines:
            for token in line.split():
                try:
                    events = parse_token(token)
                except ValueError as e:
                    logger.warning(f'Ignoring token "{token}": {e}')
                    continue
                for event in events:
                    if event[0] == 'click':
                        controller.candidate_clicked(event[1])
                        continue
                    _, keyval, modifiers = event
                    if not controller.process_key(keyval, 0, modifiers):
                        print(f'PASS {keysyms.keyval_name(keyval)}', file=out)
    finally:
        controller.teardown()
        lifecycle.on_session_end()


def setup_logging(verbose=False):
    """Configure logging based on verbosity level."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format='%(asctime)s %(levelname)-8s %(message)s',
        datefmt='%H:%M:%S',
        stream=sys.stderr
    )


def build_backend(args):
    if args.backend == 'native':
        return NativeBackend(args.library)
    return DictionaryBackend(
        dictionary_files=args.dictionary,
        user_dictionary_path=args.user_dictionary,
        suggestion_count=args.suggestion_count)


def main(argv=None):
    """Main entry point for the simulator."""
    parser = argparse.ArgumentParser(
        description="Drive the Nepali Smart composition controller from stdin",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Use JSON dictionaries
  echo "kam Return" | python simulator.py -b dictionary -D words.json

  # Use the compiled suggestion engine
  python simulator.py -b native -l ./libnepali_smart_ime.so
"""
    )
    parser.add_argument('-b', '--backend', choices=['native', 'dictionary'], default='dictionary',
                        help='Suggestion backend (default: dictionary)')
    parser.add_argument('-l', '--library', default=DEFAULT_LIBRARY_NAME,
                        help=f'Shared library of the native backend (default: {DEFAULT_LIBRARY_NAME})')
    parser.add_argument('-D', '--dictionary', action='append', default=[],
                        help='JSON dictionary for the dictionary backend (repeatable)')
    parser.add_argument('-u', '--user-dictionary', default=None,
                        help='Load and save learned words here (dictionary backend)')
    parser.add_argument('-n', '--suggestion-count', type=int, default=DEFAULT_SUGGESTION_COUNT,
                        help=f'Suggestions per query (default: {DEFAULT_SUGGESTION_COUNT})')
    parser.add_argument('-m', '--max-candidates', type=int, default=DEFAULT_MAX_CANDIDATES,
                        help=f'Maximum candidates shown (default: {DEFAULT_MAX_CANDIDATES})')
    parser.add_argument('--no-tab-commit', action='store_true',
                        help='Do not commit on Tab')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable verbose output')

    args = parser.parse_args(argv)
    if args.max_candidates < 1:
        parser.error('--max-candidates must be at least 1')
    if args.suggestion_count < 1:
        parser.error('--suggestion-count must be at least 1')

    setup_logging(args.verbose)

    run(sys.stdin, build_backend(args), sys.stdout,
        max_candidates=args.max_candidates, commit_on_tab=not args.no_tab_commit)
    return 0


if __name__ == "__main__":
    sys.exit(main())
