#!/usr/bin/env python3
"""
converter.py - Rule-based romanized Nepali to Devanagari transliteration

================================================================================
OVERVIEW
================================================================================

The input is scanned left to right, always taking the longest token found in
the tables below. A consonant is written with a halanta (virama) attached,
which is then resolved by what follows:

    consonant + vowel sign token    halanta replaced by the sign    k + i   -> कि
    consonant + 'a'                 halanta dropped (inherent a)    k + a   -> क
    consonant + consonant           conjunct, halanta kept          s + t   -> स्त्
    end of input                    halanta dropped                 kam     -> कम

Example: "namaste" -> न (n a) म (m a) स्ते (s t e) -> "नमस्ते"

At the start of a syllable (word start or after a vowel) vowels are written
as full (independent) vowels: "aama" -> "आम".

================================================================================
CANDIDATES
================================================================================

generate_candidates() returns the primary transliteration first, followed by
spellings for the usual short/long vowel confusions of romanized typing:

    last 'a'  -> 'aa'     (kam   -> kaam  : कम, काम)
    last 'i'  -> 'ee'     (din   -> deen  : दिन, दीन)
    last 'u'  -> 'oo'     (phul  -> phool : फुल, फूल)

================================================================================
"""

HALANTA = '्'

CONSONANTS = {
    'k': 'क', 'kh': 'ख', 'g': 'ग', 'gh': 'घ', 'ng': 'ङ',
    'ch': 'च', 'c': 'च', 'chh': 'छ', 'x': 'छ', 'j': 'ज', 'z': 'ज', 'jh': 'झ',
    'T': 'ट', 'Th': 'ठ', 'D': 'ड', 'Dh': 'ढ', 'N': 'ण',
    't': 'त', 'th': 'थ', 'd': 'द', 'dh': 'ध', 'n': 'न',
    'p': 'प', 'ph': 'फ', 'f': 'फ', 'b': 'ब', 'bh': 'भ',
    'm': 'म', 'y': 'य', 'r': 'र', 'l': 'ल', 'w': 'व', 'v': 'व',
    's': 'स', 'sh': 'श', 'S': 'ष', 'h': 'ह',
    'ksh': 'क्ष', 'tr': 'त्र', 'gy': 'ज्ञ',
}

# complete syllables; nothing attaches to them
SYLLABLES = {
    'shree': 'श्री',
    'shri': 'श्री',
}

VOWELS = {
    'a': 'अ', 'aa': 'आ', 'A': 'आ', 'i': 'इ', 'ee': 'ई', 'I': 'ई',
    'u': 'उ', 'oo': 'ऊ', 'U': 'ऊ', 'e': 'ए', 'ai': 'ऐ',
    'o': 'ओ', 'au': 'औ', 'ri': 'ऋ', 'R': 'ऋ',
    'aM': 'अं', 'aH': 'अः',
}

VOWEL_SIGNS = {
    'aa': 'ा', 'A': 'ा', 'i': 'ि', 'ee': 'ी', 'I': 'ी',
    'u': 'ु', 'oo': 'ू', 'U': 'ू', 'e': 'े', 'ai': 'ै',
    'o': 'ो', 'au': 'ौ', 'ri': 'ृ', 'R': 'ृ',
}

# anusvara, visarga, chandrabindu
MODIFIERS = {
    'M': 'ं',
    'H': 'ः',
    '~': 'ँ',
}

SYMBOLS = {
    '.': '।', '|': '।', '..': '।।', '||': '।।',
    '?': '?', '!': '!', ',': ',', ';': ';',
    '(': '(', ')': ')', '-': '-', '_': '_',
    'OM': 'ॐ', "'": 'ऽ',
    '0': '०', '1': '१', '2': '२', '3': '३', '4': '४',
    '5': '५', '6': '६', '7': '७', '8': '८', '9': '९',
}

# lookup order for tokens of equal length
TABLES = (
    ('symbol', SYMBOLS),
    ('syllable', SYLLABLES),
    ('vowel', VOWELS),
    ('consonant', CONSONANTS),
    ('modifier', MODIFIERS),
)

MAX_TOKEN_LENGTH = max(len(token) for _, table in TABLES for token in table)


def _longest(text, table):
    for length in range(min(len(text), MAX_TOKEN_LENGTH), 0, -1):
        if text[:length] in table:
            return text[:length]
    return None


def _match(text):
    '''
    Returns (kind, token, devanagari) for the longest token at the start of
    text, or None.
    '''
    for length in range(min(len(text), MAX_TOKEN_LENGTH), 0, -1):
        token = text[:length]
        for kind, table in TABLES:
            if token in table:
                return kind, token, table[token]
    return None


class RomanizationEngine:
    """
    Stateless transliterator. One instance can be shared freely.
    """

    def transliterate(self, roman):
        """
        Transliterate romanized text into Devanagari.

        Characters that are not in any table are copied as they are.

        Args:
            roman: Romanized input (ASCII)

        Returns:
            str: The Devanagari text ('' for empty input)
        """
        if roman in SYMBOLS:
            return SYMBOLS[roman]
        result = ''
        after_consonant = False
        i = 0
        while i < len(roman):
            rest = roman[i:]
            if after_consonant:
                sign = _longest(rest, VOWEL_SIGNS)
                if sign is not None:
                    result = result[:-1] + VOWEL_SIGNS[sign]
                    after_consonant = False
                    i += len(sign)
                    continue
                if rest[0] == 'a':
                    # inherent vowel
                    result = result[:-1]
                    after_consonant = False
                    i += 1
                    continue
            match = _match(rest)
            if match is None:
                kind, token, text = None, rest[0], rest[0]
            else:
                kind, token, text = match
            if after_consonant and kind != 'consonant':
                result = result[:-1]
            if kind == 'consonant':
                result += text + HALANTA
                after_consonant = True
            else:
                result += text
                after_consonant = False
            i += len(token)
        if after_consonant:
            result = result[:-1]
        return result

    def generate_candidates(self, roman):
        """
        Returns:
            list: The primary transliteration followed by the vowel length
                  variants, without duplicates
        """
        if not roman:
            return []
        if roman in SYMBOLS:
            return [SYMBOLS[roman]]
        candidates = []
        for spelling in [roman] + self._variants(roman):
            text = self.transliterate(spelling)
            if text and text not in candidates:
                candidates.append(text)
        return candidates

    def _variants(self, roman):
        variants = []
        pos = roman.rfind('a')
        if pos != -1 and (pos == 0 or roman[pos - 1] != 'a'):
            variants.append(roman[:pos + 1] + 'a' + roman[pos + 1:])
        for short, long_, guard in (('i', 'ee', 'e'), ('u', 'oo', 'o')):
            pos = roman.rfind(short)
            if pos != -1 and (pos == 0 or roman[pos - 1] != guard):
                variants.append(roman[:pos] + long_ + roman[pos + 1:])
        return variants
