#!/usr/bin/env python3
# autogenerate.py - Derivation rules for autogenerated codes (自動生成コード)
#
# Once the hand-written base codes are finalized, most of the table can be
# derived mechanically: contracted kana (きゃ), kana preceded by a common
# mnemonic kana (っ, い, あ ...), CapsLock/katakana duplicates and full-width
# symbols.

"""
Autogeneration Rules

Each derivation function takes a snapshot of the code table (code -> value)
and yields (code, value) candidates. The functions never touch a CodeMap;
CodeMap.register_autogenerated_codes() writes the candidates through
write_code(), which silently drops the ones whose slot is already taken.

Passes, in the order they are applied:
- contraction:  ki -> き  gives  k7 -> きゃ, k8 -> きゅ, k9 -> きょ
                and the shifted digits  k& -> きゃう ...
- mnemonic:     di -> い  gives  2di -> いい, 1di -> っい ...
- case:         ka -> か  gives  KA -> カ ; kanji keep their value
- full_width:   '! -> ！ ... '~ -> ～
"""

import logging

logger = logging.getLogger(__name__)


# ============================================================================
# Pass names
# ============================================================================

CONTRACTION = 'contraction'
MNEMONIC = 'mnemonic'
CASE = 'case'
FULL_WIDTH = 'full_width'

PASSES = (CONTRACTION, MNEMONIC, CASE, FULL_WIDTH)


# ============================================================================
# Rule tables
# ============================================================================

# Second key of the 2-key kana codes that can take a contraction (ki, shi ...)
CONTRACTION_TRIGGER_KEY = 'i'

CONTRACTION_SUFFIXES = {
    '7': 'ゃ',
    '8': 'ゅ',
    '9': 'ょ',
}

# Appended to the contracted kana when the digit is typed with Shift (きゃう)
ELONGATION_VOWEL = 'う'

# 数字による省略：数字を２文字コードの前に付けてかなを効率良く入力する
MNEMONIC_PREFIXES = {
    '1': 'っ',
    '2': 'い',
    '3': 'あ',
    '4': 'う',
    '5': 'え',
    '6': 'お',
    '0': 'ん',
}

# Removed from a mnemonic code; the kana conversion tables of Google Japanese
# Input cannot hold these codes as they are.
MNEMONIC_STRIPPED_KEY = ';'

FIRST_HIRAGANA = 'ぁ'
LAST_HIRAGANA = 'ゖ'
FIRST_KATAKANA = 'ァ'
LAST_KATAKANA = 'ヶ'
KATAKANA_OFFSET = ord(FIRST_KATAKANA) - ord(FIRST_HIRAGANA)

FULL_WIDTH_OFFSET = 0xfee0
FIRST_SYMBOL = '!'
LAST_SYMBOL = '~'

_SWAP_ASCII_CASE = str.maketrans(
    'abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ',
    'ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz')


# ============================================================================
# Character helpers
# ============================================================================

def is_hiragana(text):
    """True if ``text`` is non-empty and consists of hiragana (ぁ-ゖ) only."""
    return bool(text) and all(FIRST_HIRAGANA <= c <= LAST_HIRAGANA for c in text)


def has_katakana(text):
    return any(FIRST_KATAKANA <= c <= LAST_KATAKANA for c in text)


def hiragana_to_katakana(text):
    return ''.join(
        chr(ord(c) + KATAKANA_OFFSET) if FIRST_HIRAGANA <= c <= LAST_HIRAGANA else c
        for c in text)


def swap_key_case(code):
    """Swap the case of ASCII letters; other keys are left unchanged."""
    return code.translate(_SWAP_ASCII_CASE)


def to_full_width(c):
    return chr(ord(c) + FULL_WIDTH_OFFSET)


# ============================================================================
# Derivation passes
# ============================================================================

def derive_contractions(codes, layout):
    """
    Derive contracted kana (拗音) from 2-key codes ending with the trigger key.
    トリガーキーで終わる２打鍵コードから拗音のコードを導出する。

    The trigger key is replaced by a digit: if "ki" types き, "k7" types きゃ.
    With the digit shifted ("k&" on US keyboards) the long vowel う follows.

    Args:
        codes: Snapshot mapping code -> value.
        layout: KeyboardLayout providing shift_last_char().

    Yields:
        (code, value) candidates.
    """
    for code in sorted(codes):
        if len(code) != 2 or code[1] != CONTRACTION_TRIGGER_KEY:
            continue
        kana = codes[code]
        # Hiragana only: katakana CapsLock duplicates must not feed this pass on a rerun
        if len(kana) != 1 or not is_hiragana(kana):
            continue
        first_key = code[0]
        for digit, small_kana in CONTRACTION_SUFFIXES.items():
            yield first_key + digit, kana + small_kana
            yield first_key + layout.shift_last_char(digit), kana + small_kana + ELONGATION_VOWEL


def derive_mnemonic_prefixes(codes):
    """
    Derive 3-key codes that type a mnemonic kana followed by a 2-key kana code.
    ２文字コードの前に数字を入れてかなを効率良く入力できるようにする。

    Only codes typing hiragana qualify; kanji cannot be abbreviated by digits.
    """
    for code in sorted(codes):
        if len(code) != 2:
            continue
        value = codes[code]
        if not is_hiragana(value):
            continue
        for digit, kana in MNEMONIC_PREFIXES.items():
            new_code = (digit + code).replace(MNEMONIC_STRIPPED_KEY, '', 1)
            yield new_code, kana + value


def derive_case_duplicates(codes, allow_kanji_in_caps=True, allow_katakana_in_caps=True):
    """
    Derive CapsLock codes: the same keys with the case of letters swapped.
    カタカナのコードをひらがなのコードから自動生成する。

    Hiragana in the value become katakana, so typing with CapsLock on gives
    katakana. Values without kana (kanji, symbols) are duplicated unchanged
    so kanji can still be typed while CapsLock is on.
    """
    for code in sorted(codes):
        value = hiragana_to_katakana(codes[code])
        if has_katakana(value):
            if not allow_katakana_in_caps:
                continue
        elif not allow_kanji_in_caps:
            continue
        yield swap_key_case(code), value


def derive_full_width_symbols(layout):
    """
    Derive codes for full-width symbols: prefix key + the ASCII symbol.
    全角文字を【＇】（英語キーボード）か【：】で入力できるようにする。
    """
    prefix = layout.full_width_prefix
    for number in range(ord(FIRST_SYMBOL), ord(LAST_SYMBOL) + 1):
        half_width = chr(number)
        yield prefix + half_width, to_full_width(half_width)
