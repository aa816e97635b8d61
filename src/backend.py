#!/usr/bin/env python3
"""
backend.py - Suggestion backends

================================================================================
OVERVIEW
================================================================================

The composition controller treats the suggestion engine as an opaque
service with four calls:

    init()                          once, when the first session starts
    destroy()                       once, when the last session ends
    get_suggestions(prefix)         romanized prefix -> ordered candidates
    confirm_word(original, chosen)  feedback after a commit

Two implementations are provided:

    NativeBackend       binds the compiled suggestion engine
                        (libnepali_smart_ime.so) through its C ABI. Its
                        suggestions arrive as a JSON array string.

    DictionaryBackend   pure-Python lookup over JSON dictionaries of the form
                        {"roman": {"देवनागरी": count, ...}, ...}, followed by
                        rule-based transliterations; learned confirmations
                        are written to user_dictionary.json.

================================================================================
"""

import bisect
import ctypes
import logging
import os

import orjson

from converter import RomanizationEngine, SYMBOLS

logger = logging.getLogger(__name__)

DEFAULT_LIBRARY_NAME = 'libnepali_smart_ime.so'
DEFAULT_SUGGESTION_COUNT = 8


class SuggestionBackend:
    '''
    Interface of a suggestion engine.
    '''

    def init(self):
        pass

    def destroy(self):
        pass

    def get_suggestions(self, prefix):
        raise NotImplementedError

    def confirm_word(self, original, chosen):
        pass


class NativeBackend(SuggestionBackend):
    """
    Suggestion engine loaded from a shared library.

    The library exports:
        void  nepali_ime_engine_init(void)
        void  nepali_ime_engine_destroy(void)
        char *nepali_ime_get_suggestions(const char *prefix)   (JSON array)
        void  nepali_ime_confirm_word(const char *roman, const char *nepali)
        void  nepali_ime_free_string(char *s)

    If the library cannot be loaded the backend stays unavailable: queries
    return None (no candidates) and feedback is dropped.
    """

    def __init__(self, library_path=DEFAULT_LIBRARY_NAME):
        self._library_path = library_path
        self._lib = None

    def is_available(self):
        return self._lib is not None

    def init(self):
        try:
            lib = ctypes.CDLL(self._library_path)
            lib.nepali_ime_engine_init.argtypes = []
            lib.nepali_ime_engine_init.restype = None
            lib.nepali_ime_engine_destroy.argtypes = []
            lib.nepali_ime_engine_destroy.restype = None
            # c_void_p keeps the raw pointer so that it can be handed back to free_string
            lib.nepali_ime_get_suggestions.argtypes = [ctypes.c_char_p]
            lib.nepali_ime_get_suggestions.restype = ctypes.c_void_p
            lib.nepali_ime_confirm_word.argtypes = [ctypes.c_char_p, ctypes.c_char_p]
            lib.nepali_ime_confirm_word.restype = None
            lib.nepali_ime_free_string.argtypes = [ctypes.c_void_p]
            lib.nepali_ime_free_string.restype = None
        except (OSError, AttributeError) as e:
            logger.error(f'Could not load the suggestion engine {self._library_path}: {e}')
            return
        lib.nepali_ime_engine_init()
        self._lib = lib
        logger.info(f'Suggestion engine loaded: {self._library_path}')

    def destroy(self):
        if self._lib is None:
            return
        self._lib.nepali_ime_engine_destroy()
        self._lib = None

    def get_suggestions(self, prefix):
        '''
        Returns the raw JSON bytes produced by the library, or None.
        '''
        if self._lib is None:
            return None
        ptr = self._lib.nepali_ime_get_suggestions(prefix.encode('utf-8'))
        if not ptr:
            return None
        try:
            return ctypes.string_at(ptr)
        finally:
            self._lib.nepali_ime_free_string(ptr)

    def confirm_word(self, original, chosen):
        if self._lib is None or not original or not chosen:
            return
        self._lib.nepali_ime_confirm_word(original.encode('utf-8'), chosen.encode('utf-8'))


class DictionaryBackend(SuggestionBackend):
    """
    Prefix lookup over JSON dictionaries.

    Ordering of the suggestions for a prefix:
        1. candidates whose reading equals the prefix, by descending count
        2. candidates of longer readings starting with the prefix, by
           descending count (each surface listed once)
        3. rule-based transliterations (converter.RomanizationEngine), so
           that words missing from the dictionaries can still be typed.
           The primary transliteration always keeps a slot.

    Args:
        dictionary_files: Paths of JSON dictionaries, loaded in order
        user_dictionary_path: Where learned confirmations are loaded from and
                              saved to (None disables persistence)
        suggestion_count: Maximum number of suggestions per query
    """

    def __init__(self, dictionary_files=None, user_dictionary_path=None,
                 suggestion_count=DEFAULT_SUGGESTION_COUNT):
        self._dictionary_files = list(dictionary_files or [])
        self._user_dictionary_path = user_dictionary_path
        self._suggestion_count = suggestion_count
        self._dictionary = {}   # {reading: {surface: count}}
        self._readings = []     # sorted keys of _dictionary
        self._learned = {}      # {reading: {surface: count}}, persisted on destroy()
        self._romanizer = RomanizationEngine()

    def init(self):
        self._dictionary = {}
        self._readings = []
        self._learned = {}
        for path in self._dictionary_files:
            self._merge(self._load(path))
        if self._user_dictionary_path and os.path.exists(self._user_dictionary_path):
            learned = self._load(self._user_dictionary_path)
            for reading, surfaces in learned.items():
                for surface, count in surfaces.items():
                    self._learned.setdefault(reading, {})[surface] = count
                    self._add(reading, surface, count)
        self._readings = sorted(self._dictionary)
        logger.info(f'DictionaryBackend initialized with {len(self._readings)} readings')

    def destroy(self):
        if self._user_dictionary_path and self._learned:
            self._save_learned()
        self._dictionary = {}
        self._readings = []
        self._learned = {}

    def get_suggestions(self, prefix):
        if not prefix:
            return []
        if prefix not in self._dictionary and prefix in SYMBOLS:
            return [SYMBOLS[prefix]]

        count = self._suggestion_count
        suggestions = self._lookup(prefix)
        literal = self._romanizer.generate_candidates(prefix)
        if literal and literal[0] not in suggestions and len(suggestions) >= count > 1:
            suggestions = suggestions[:count - 1]
        seen = set(suggestions)
        suggestions += [text for text in literal if text not in seen]
        return suggestions[:count]

    def _lookup(self, prefix):
        exact = sorted(self._dictionary.get(prefix, {}).items(), key=lambda x: x[1], reverse=True)
        seen = set(surface for surface, _ in exact)

        longer = {}
        start = bisect.bisect_right(self._readings, prefix)
        for reading in self._readings[start:]:
            if not reading.startswith(prefix):
                break
            for surface, count in self._dictionary[reading].items():
                if surface in seen:
                    continue
                if count > longer.get(surface, float('-inf')):
                    longer[surface] = count
        ranked = exact + sorted(longer.items(), key=lambda x: x[1], reverse=True)
        return [surface for surface, _ in ranked]

    def confirm_word(self, original, chosen):
        if not original or not chosen:
            return
        learned = self._learned.setdefault(original, {})
        learned[chosen] = learned.get(chosen, 0) + 1
        self._add(original, chosen, 1)
        logger.debug(f'confirm_word("{original}", "{chosen}")')

    def _add(self, reading, surface, count):
        if reading not in self._dictionary:
            self._dictionary[reading] = {}
            bisect.insort(self._readings, reading)
        surfaces = self._dictionary[reading]
        surfaces[surface] = surfaces.get(surface, 0) + count

    def _merge(self, data):
        # duplicates across dictionaries keep the higher count
        for reading, surfaces in data.items():
            entry = self._dictionary.setdefault(reading, {})
            for surface, count in surfaces.items():
                if count > entry.get(surface, float('-inf')):
                    entry[surface] = count

    def _load(self, path):
        """
        Load one dictionary file.

        Returns:
            dict: {reading: {surface: count}}; malformed entries are skipped
                  and an unreadable file yields {}
        """
        if not os.path.exists(path):
            logger.warning(f'Dictionary file not found: {path}')
            return {}
        try:
            with open(path, 'rb') as f:
                data = orjson.loads(f.read())
        except orjson.JSONDecodeError as e:
            logger.error(f'Failed to parse dictionary JSON: {path} - {e}')
            return {}
        except OSError as e:
            logger.error(f'Failed to load dictionary: {path} - {e}')
            return {}
        if not isinstance(data, dict):
            logger.warning(f'Invalid dictionary format (expected dict): {path}')
            return {}
        result = {}
        for reading, surfaces in data.items():
            if not reading or not isinstance(surfaces, dict):
                continue
            for surface, count in surfaces.items():
                if not surface:
                    continue
                # bool is an int subclass; a bare entry counts as 1
                if not isinstance(count, (int, float)) or isinstance(count, bool):
                    count = 1
                result.setdefault(reading, {})[surface] = count
        logger.info(f'Loaded dictionary: {path} ({len(result)} readings)')
        return result

    def _save_learned(self):
        path = self._user_dictionary_path
        try:
            directory = os.path.dirname(path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(path, 'wb') as f:
                f.write(orjson.dumps(self._learned, option=orjson.OPT_INDENT_2))
        except OSError as e:
            logger.error(f'Failed to save the user dictionary {path}: {e}')
            return
        logger.info(f'User dictionary saved: {path}')
