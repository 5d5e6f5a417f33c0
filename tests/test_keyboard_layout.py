#!/usr/bin/env python3
# tests/test_keyboard_layout.py - Unit tests for keyboard_layout.py

import pytest
import os
import sys

# Add src directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from keyboard_layout import KeyboardLayout, keyboard_layout


class TestKeyboardLayout:
    """Test suite for KeyboardLayout"""

    def test_default_is_us(self):
        layout = KeyboardLayout()

        assert layout.name == 'us'
        assert layout.is_layout('us') is True
        assert layout.is_layout('jpn') is False

    def test_unknown_layout_rejected(self):
        with pytest.raises(ValueError):
            KeyboardLayout('dvorak')

    @pytest.mark.parametrize('name, text, expected', [
        ('us', '7', '&'),
        ('us', '8', '*'),
        ('us', '9', '('),
        ('us', 'k7', 'k&'),
        ('jpn', '7', "'"),
        ('jpn', '8', '('),
        ('jpn', '9', ')'),
        ('jpn', ';', '+'),
        ('us', 'a', 'A'),
    ])
    def test_shift_last_char(self, name, text, expected):
        """Test the shifted counterpart of the last character"""
        assert KeyboardLayout(name).shift_last_char(text) == expected

    def test_shift_without_counterpart(self):
        """Test that characters without a shifted key are unchanged"""
        layout = KeyboardLayout('jpn')

        assert layout.shift_last_char('0') == '0'
        assert layout.shift_last_char('') == ''

    def test_key_substitutions(self):
        assert KeyboardLayout('us').key_substitutions == {}
        assert KeyboardLayout('jpn').key_substitutions == {':': '+'}

    def test_full_width_prefix(self):
        assert KeyboardLayout('us').full_width_prefix == "'"
        assert KeyboardLayout('jpn').full_width_prefix == ':'


class TestKeyboardLayoutQuery:
    """Test suite for the keyboard_layout() query"""

    def test_query(self):
        assert keyboard_layout('jpn', 'jpn') is True
        assert keyboard_layout('us', 'jpn') is False
