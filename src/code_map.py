#!/usr/bin/env python3
"""
code_map.py - Code map builder for direct (漢直-style) input tables
直接入力（漢直風）テーブル用のコードマップ構築

================================================================================
WHAT IS A CODE MAP? / コードマップとは？
================================================================================

A code map assigns short keystroke sequences ("codes", 2-3 keys) to the text
they type: a kana, a run of kana, or a kanji.

コードマップは短い打鍵列（「コード」、2〜3打鍵）に、それが入力する
文字列（かな、かなの並び、漢字）を割り当てる。

    "df"  → "あ"
    "di"  → "い"
    "2di" → "いい"     (autogenerated / 自動生成)

The finished map is consumed by an input method (which needs to know whether
a partially typed sequence can still become a code) or exported as a table.

完成したマップは入力メソッド（途中まで打った打鍵列がまだコードになり得るか
知る必要がある）に使われるか、テーブルとして出力される。

================================================================================
REGISTRATION AND CONFLICTS / 登録と衝突
================================================================================

Base codes are registered by hand. When the requested code is already taken,
the binding is NOT rejected: it is put on a worklist and resolved later.

手動で基本コードを登録する。要求したコードが既に使われていても拒否せず、
後で解決するために保留リストへ入れる。

    register("abc", "亜")   → "abc" = 亜
    register("abc", "以")   → deferred / 保留
    lookup(...)             → resolve: "abc" taken → try "abC" → free!
                                        "abC" = 以

Resolution tries every final key once, in alphabet order starting from the
requested one, wrapping around the end of the alphabet:

解決では、要求された最後のキーから始めてアルファベット順に（末尾で先頭に
戻りながら）全ての最後のキーを一度ずつ試す:

    abc → abC → abd → abD → ... → ab? → aba → abA → abb → abB
     │                                                     │
     └──────────────── every key tried once ───────────────┘

If no final key is free, the base vocabulary is too crowded for that prefix
and the whole generation run is aborted (NoFreeCodeError).

空きがなければ、その２打鍵に対して基本語彙が多すぎるので、生成全体を
中止する（NoFreeCodeError）。

Pending bindings are resolved in sorted (code, value) order, never in
registration order, so the result does not depend on the order in which
the base codes were registered.

保留は登録順ではなく (コード, 値) の順で解決されるため、結果は登録順に
依存しない。

================================================================================
PREFIXES / プレフィックス
================================================================================

Every time a code is written, all of its strict prefixes become "live":

コードが書き込まれる度に、その全ての真のプレフィックスが「有効」になる:

    write "2di" → prefixes "2", "2d"

An input method uses is_code_prefix() to decide whether to keep waiting for
more keys.

入力メソッドは is_code_prefix() で次の打鍵を待つかどうかを判断する。

================================================================================
"""

import collections
import logging

import autogenerate
from keyboard_layout import KeyboardLayout
from keystroke_alphabet import KeystrokeAlphabet

logger = logging.getLogger(__name__)

# Origin of codes written by register() / write_code() directly.
REGISTERED = 'registered'

# Deferred bindings; tuple ordering (code, then value) is the resolution order.
PendingCode = collections.namedtuple('PendingCode', ['code', 'value'])


class CodeMapError(Exception):
    """Base class for errors raised while building a code map."""


class NoFreeCodeError(CodeMapError):
    """Raised when a deferred binding cannot be placed under its 2-key prefix."""


class InvalidCodeError(CodeMapError, ValueError):
    """Raised when register() gets a malformed code or value."""


class CodeMap:
    """
    Table of code → value bindings with deferred conflict resolution.
    遅延衝突解決付きのコード → 値の表。

    ============================================================================
    OVERVIEW / 概要
    ============================================================================

    The map owns three pieces of state:
    マップは３つの状態を持つ:

        _codes          : code → value, never overwritten once read
                          コード → 値（読まれた後は上書きされない）
        _code_prefixes  : every strict prefix of every code
                          全コードの真のプレフィックス
        _register_later : PendingCode entries waiting for resolution
                          解決待ちの PendingCode

    write_code() is the only method that adds codes and prefixes. register()
    may also rebind a code it wrote itself, as long as no read has seen it yet.
    Every read (lookup, reverse_mapping, items, len, in) first resolves the
    pending bindings.

    コードとプレフィックスを追加するのは write_code() だけ。register() は
    自分で書いたコードを、まだ読まれていなければ別の値に付け替えることがある。
    全ての読み出しは先に保留を解決する。

    ============================================================================
    USAGE EXAMPLE / 使用例
    ============================================================================

        >>> code_map = CodeMap()
        >>> code_map.register('df', 'あ')
        >>> code_map.register('di', 'い')
        >>> code_map.lookup('df')
        'あ'
        >>> code_map.is_code_prefix('d')
        True
        >>> written = code_map.register_autogenerated_codes()
        >>> code_map.lookup('2di')
        'いい'

    ============================================================================
    ATTRIBUTES / 属性
    ============================================================================

    layout : KeyboardLayout
        Keyboard layout the table is generated for.
        テーブルの対象キーボード配列。

    alphabet : KeystrokeAlphabet
        Keys tried, in order, when resolving conflicts.
        衝突解決で順に試すキー。

    ============================================================================
    """

    def __init__(self, layout=None):
        """
        Args:
            layout: KeyboardLayout; defaults to the US layout.
                    キーボード配列。省略時はUS配列。
        """
        self.layout = layout if layout is not None else KeyboardLayout()
        self.alphabet = KeystrokeAlphabet.for_layout(self.layout)
        self._codes = {}
        self._code_prefixes = set()
        self._register_later = []
        # code → REGISTERED or the autogeneration pass that wrote it
        self._origins = {}
        # codes written by register() that no read has observed yet
        self._provisional = set()

    def write_code(self, code, value, origin=REGISTERED):
        """
        Bind ``code`` to ``value`` unless the code is already taken.
        コードが未使用の場合のみ code に value を割り当てる。

        Args:
            code: Keystroke sequence.
            value: Text typed by the code.
            origin: Which path wrote the code (REGISTERED or a pass name).

        Returns:
            bool: True if written, False if the code was already taken
                  (the table is left unchanged).
        """
        if code in self._codes:
            return False
        self._codes[code] = value
        self._origins[code] = origin
        for end in range(len(code) - 1, 0, -1):
            self._code_prefixes.add(code[:end])
        return True

    def is_code_prefix(self, prefix):
        """
        Check whether ``prefix`` can be extended into a code.
        prefix を延長してコードにできるかチェック。
        """
        return prefix in self._code_prefixes

    def register(self, code, *values):
        """
        Register ``code`` for each of ``values``; conflicts are deferred.
        各値に対して code を登録する。衝突は保留される。

        A value whose code is taken is resolved on the next read by trying
        the other final keys under the same 2-key prefix.

        Codes written here stay provisional until the next read: when two
        registrations ask for the same code, the smaller value keeps it and
        the other one is deferred, whichever was registered first.

        登録したコードは次の読み出しまで仮のもの。同じコードに２つの登録が
        あれば、登録順に関係なく小さい方の値がコードを取り、他方は保留される。

        Raises:
            InvalidCodeError: If the code is empty or longer than 3 keys,
                              or a value is not a non-empty string.
        """
        if not isinstance(code, str) or not 1 <= len(code) <= 3:
            raise InvalidCodeError(f'Code must be 1 to 3 keys: {code!r}')
        for value in values:
            if not isinstance(value, str) or not value:
                raise InvalidCodeError(f'Value for code "{code}" must be a non-empty string: {value!r}')
            if self.write_code(code, value):
                self._provisional.add(code)
                continue
            holder = self._codes[code]
            if code in self._provisional and value < holder:
                self._codes[code] = value
                value = holder
            logger.debug(f'Code "{code}" is taken by "{self._codes[code]}"; deferring "{value}"')
            self._register_later.append(PendingCode(code, value))

    @property
    def pending_count(self):
        """Number of deferred bindings waiting for resolution."""
        return len(self._register_later)

    def resolve_pending(self):
        """
        Place every deferred binding, in sorted (code, value) order.
        保留された全ての割り当てを (コード, 値) の順に配置する。

        Raises:
            NoFreeCodeError: If a binding finds no free final key.
        """
        self._provisional.clear()
        if not self._register_later:
            return
        pending = sorted(self._register_later)
        self._register_later = []
        logger.debug(f'Resolving {len(pending)} deferred code(s)')
        for entry in pending:
            self._register_finding_empty(entry)

    def _register_finding_empty(self, entry):
        code, value = entry
        if len(code) != 3 or code[2] not in self.alphabet:
            message = f'No free codes for "{value}": "{code}" cannot be moved to another final key'
            logger.error(message)
            raise NoFreeCodeError(message)
        first_two_keys = code[:2]
        last_key = code[2]
        for _ in range(len(self.alphabet)):
            if self.write_code(first_two_keys + last_key, value):
                if last_key != code[2]:
                    logger.debug(f'"{value}": "{code}" was taken, using "{first_two_keys + last_key}"')
                return
            last_key = self.alphabet.increment(last_key)
        message = f'No free codes starting with "{first_two_keys}" (needed for "{value}")'
        logger.error(message)
        raise NoFreeCodeError(message)

    def lookup(self, code):
        """Return the value typed by ``code``, or None."""
        self.resolve_pending()
        return self._codes.get(code)

    def reverse_mapping(self):
        """
        Return a value → code mapping.
        値 → コードの対応を返す。

        When several codes type the same value, the shortest one is kept
        (the alphabetically smallest among equally short codes).
        """
        self.resolve_pending()
        by_value = {}
        for code in sorted(self._codes, key=lambda c: (len(c), c)):
            by_value.setdefault(self._codes[code], code)
        return by_value

    def items(self):
        """Return all (code, value) pairs sorted by code."""
        self.resolve_pending()
        return sorted(self._codes.items())

    def origin(self, code):
        self.resolve_pending()
        return self._origins.get(code)

    def __len__(self):
        self.resolve_pending()
        return len(self._codes)

    def __contains__(self, code):
        self.resolve_pending()
        return code in self._codes

    def register_autogenerated_codes(self, allow_kanji_in_caps=True, allow_katakana_in_caps=True):
        """
        Derive additional codes from the finalized table.
        確定したテーブルから追加のコードを自動生成する。

        Passes run in the order of autogenerate.PASSES. Each pass reads a
        snapshot taken when it starts, leaving out codes written by the same
        pass, so calling this twice with the same options adds nothing the
        second time. Taken slots are skipped silently.

        Args:
            allow_kanji_in_caps: Duplicate non-kana codes for CapsLock.
                                 CAPSLOCKがオンでも漢字を入力できるようにする。
            allow_katakana_in_caps: Generate katakana codes for CapsLock.
                                    CAPSLOCKでカタカナを入力できるようにする。

        Returns:
            dict: pass name → number of codes written.
        """
        self.resolve_pending()
        derivations = {
            autogenerate.CONTRACTION:
                lambda codes: autogenerate.derive_contractions(codes, self.layout),
            autogenerate.MNEMONIC:
                autogenerate.derive_mnemonic_prefixes,
            autogenerate.CASE:
                lambda codes: autogenerate.derive_case_duplicates(
                    codes, allow_kanji_in_caps, allow_katakana_in_caps),
            autogenerate.FULL_WIDTH:
                lambda codes: autogenerate.derive_full_width_symbols(self.layout),
        }
        written = {}
        for pass_name in autogenerate.PASSES:
            snapshot = {code: value for code, value in self._codes.items()
                        if self._origins[code] != pass_name}
            count = 0
            for code, value in derivations[pass_name](snapshot):
                if self.write_code(code, value, origin=pass_name):
                    count += 1
            written[pass_name] = count
            logger.info(f'Autogenerated {count} code(s) in pass "{pass_name}"')
        return written
