#!/usr/bin/env python3
# keyboard_layout.py - Physical keyboard layout knowledge (US / JIS)
#
# The code map needs three facts about the user's keyboard:
#   - which keys exist (JIS has '+' where US has ':' in the alphabet),
#   - what a key produces with Shift held (for the "long vowel" codes),
#   - which key introduces full-width symbols.

import logging

logger = logging.getLogger(__name__)


US = 'us'
JPN = 'jpn'

SHIFTED_KEYS = {
    US: {
        '1': '!', '2': '@', '3': '#', '4': '$', '5': '%',
        '6': '^', '7': '&', '8': '*', '9': '(', '0': ')',
        '-': '_', '=': '+', '[': '{', ']': '}', '\\': '|',
        ';': ':', "'": '"', ',': '<', '.': '>', '/': '?', '`': '~',
    },
    # JIS keyboards have no shifted character on the 0 key.
    JPN: {
        '1': '!', '2': '"', '3': '#', '4': '$', '5': '%',
        '6': '&', '7': "'", '8': '(', '9': ')',
        '-': '=', '^': '~', '\\': '|', '@': '`', '[': '{', ']': '}',
        ';': '+', ':': '*', ',': '<', '.': '>', '/': '?',
    },
}

KEY_SUBSTITUTIONS = {
    US: {},
    JPN: {':': '+'},
}

# Prefix key for full-width symbols: 【＇】 on US keyboards, 【：】 on JIS.
FULL_WIDTH_PREFIXES = {
    US: "'",
    JPN: ':',
}


class KeyboardLayout:
    """
    Keyboard layout queried by the code map at construction time.
    コードマップ構築時に参照されるキーボード配列。

    Args:
        name: 'us' or 'jpn'.

    Raises:
        ValueError: If the layout name is unknown.
    """

    def __init__(self, name=US):
        if name not in SHIFTED_KEYS:
            raise ValueError(f'Unknown keyboard layout: "{name}" (expected one of {sorted(SHIFTED_KEYS)})')
        self.name = name
        self._shifted_keys = SHIFTED_KEYS[name]

    def __repr__(self):
        return f'KeyboardLayout({self.name!r})'

    def is_layout(self, name):
        return self.name == name

    @property
    def key_substitutions(self):
        return dict(KEY_SUBSTITUTIONS[self.name])

    @property
    def full_width_prefix(self):
        return FULL_WIDTH_PREFIXES[self.name]

    def shift_last_char(self, text):
        """
        Replace the last character of ``text`` with its Shift counterpart.
        最後の文字をシフトを押した時の文字に置き換える。

        Letters become upper case. Characters without a shifted
        counterpart on this layout are left as they are.
        """
        if not text:
            return text
        last = text[-1]
        if last.isascii() and last.isalpha():
            shifted = last.upper()
        else:
            shifted = self._shifted_keys.get(last, last)
        return text[:-1] + shifted


def keyboard_layout(configured_name, locale):
    """
    Return True if the configured layout is ``locale`` (e.g. 'jpn').
    設定された配列が locale かどうかを返す。
    """
    return KeyboardLayout(configured_name).is_layout(locale)
