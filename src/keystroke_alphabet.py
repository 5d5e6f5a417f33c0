#!/usr/bin/env python3
# keystroke_alphabet.py - Ordered keystroke alphabet for code map generation
#
# The alphabet fixes the order in which final keystrokes are tried when a
# requested code is already taken. Indices wrap around, so incrementing past
# the last key continues from the first one.

import logging

logger = logging.getLogger(__name__)


# Lower/upper case pairs first, then the punctuation keys on the right hand.
# 大文字・小文字の組、続いて右手の記号キー。
ORDERED_KEYS = 'aAbBcCdDeEfFgGhHiIjJkKlLmMnNoOpPqQrRsStTuUvVwWxXyYzZ;:,<.>/?'


class KeystrokeAlphabet:
    """
    Ordered set of keystrokes with cyclic index arithmetic.
    巡回インデックス演算付きの順序付きキー集合。

    Args:
        keys: String of distinct keystroke characters, in probing order.
              探索順に並べた重複のないキー文字列。

    Raises:
        ValueError: If a key appears more than once.
    """

    def __init__(self, keys=ORDERED_KEYS):
        if len(set(keys)) != len(keys):
            raise ValueError(f'Keystroke alphabet contains duplicate keys: {keys}')
        self.keys = keys
        self._key_to_number = {key: number for number, key in enumerate(keys)}

    @classmethod
    def for_layout(cls, layout):
        """
        Build the alphabet for a keyboard layout, applying its key substitutions.
        キーボード配列の置換を適用したアルファベットを作る。
        """
        keys = ORDERED_KEYS
        for original, replacement in layout.key_substitutions.items():
            keys = keys.replace(original, replacement, 1)
        logger.debug(f'Keystroke alphabet for layout "{layout.name}": {keys}')
        return cls(keys)

    def __len__(self):
        return len(self.keys)

    def __contains__(self, key):
        return key in self._key_to_number

    def __iter__(self):
        return iter(self.keys)

    def index_of(self, key):
        """Return the position of ``key``; raises KeyError for unknown keys."""
        return self._key_to_number[key]

    def char_at(self, number):
        # Any integer is valid; negative numbers count from the end.
        return self.keys[number % len(self.keys)]

    def increment(self, key, amount=1):
        """
        Shift a single key by ``amount`` positions, wrapping around the end.
        一文字のキーを amount 分ずらす（末尾で先頭に戻る）。
        """
        return self.char_at(self.index_of(key) + amount)
