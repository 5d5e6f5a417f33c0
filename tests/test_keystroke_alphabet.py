#!/usr/bin/env python3
# tests/test_keystroke_alphabet.py - Unit tests for keystroke_alphabet.py

import pytest
import os
import sys

# Add src directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from keystroke_alphabet import KeystrokeAlphabet, ORDERED_KEYS
from keyboard_layout import KeyboardLayout


class TestKeystrokeAlphabet:
    """Test suite for index arithmetic on the alphabet"""

    def test_default_keys(self):
        """Test that the default alphabet holds every key once"""
        alphabet = KeystrokeAlphabet()

        assert len(alphabet) == 60
        assert len(set(alphabet)) == 60
        assert alphabet.keys == ORDERED_KEYS

    def test_index_of(self):
        """Test the position of a few keys"""
        alphabet = KeystrokeAlphabet()

        assert alphabet.index_of('a') == 0
        assert alphabet.index_of('A') == 1
        assert alphabet.index_of('b') == 2
        assert alphabet.index_of(';') == 52
        assert alphabet.index_of('?') == 59

    def test_index_of_unknown_key(self):
        """Test that keys outside the alphabet raise KeyError"""
        alphabet = KeystrokeAlphabet()

        with pytest.raises(KeyError):
            alphabet.index_of('1')

    @pytest.mark.parametrize('number, expected', [
        (0, 'a'),
        (59, '?'),
        (60, 'a'),
        (121, 'A'),
        (-1, '?'),
    ])
    def test_char_at_wraps(self, number, expected):
        """Test that any integer maps into the alphabet"""
        alphabet = KeystrokeAlphabet()

        assert alphabet.char_at(number) == expected

    def test_increment(self):
        """Test incrementing within and past the end of the alphabet"""
        alphabet = KeystrokeAlphabet()

        assert alphabet.increment('c') == 'C'
        assert alphabet.increment('C') == 'd'
        assert alphabet.increment('?') == 'a'
        assert alphabet.increment('a', -1) == '?'
        assert alphabet.increment('a', 60) == 'a'

    def test_full_cycle_visits_every_key(self):
        """Test that len(alphabet) increments visit each key exactly once"""
        alphabet = KeystrokeAlphabet()
        key = 'x'
        visited = []
        for _ in range(len(alphabet)):
            visited.append(key)
            key = alphabet.increment(key)

        assert sorted(visited) == sorted(ORDERED_KEYS)
        assert key == 'x'

    def test_duplicate_keys_rejected(self):
        """Test that an ordering with a repeated key is rejected"""
        with pytest.raises(ValueError):
            KeystrokeAlphabet('abca')


class TestForLayout:
    """Test suite for KeystrokeAlphabet.for_layout()"""

    def test_us_layout_keeps_colon(self):
        alphabet = KeystrokeAlphabet.for_layout(KeyboardLayout('us'))

        assert alphabet.keys == ORDERED_KEYS

    def test_jpn_layout_replaces_colon(self):
        """Test that ':' is replaced by '+' at the same position"""
        alphabet = KeystrokeAlphabet.for_layout(KeyboardLayout('jpn'))

        assert ':' not in alphabet
        assert alphabet.index_of('+') == 53
        assert alphabet.increment(';') == '+'
        assert len(alphabet) == 60
