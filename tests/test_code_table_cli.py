#!/usr/bin/env python3
# tests/test_code_table_cli.py - Unit tests for code_table_cli.py

import pytest
import json
import os
import sys

# Add src directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

import code_table_cli


@pytest.fixture
def base_codes(tmp_path):
    path = tmp_path / 'base_codes.tsv'
    path.write_text('# sample\ndf\tあ\ndi\tい\n', encoding='utf-8')
    return str(path)


@pytest.fixture
def config_path(tmp_path):
    """Config file passed with --config so the user config directory is not touched"""
    path = tmp_path / 'config.json'
    path.write_text(json.dumps({'keyboard_layout': 'us'}), encoding='utf-8')
    return str(path)


class TestBuildCommand:
    """Test suite for the build command"""

    def test_build_to_stdout(self, base_codes, config_path, capsys):
        result = code_table_cli.main(['-c', config_path, 'build', base_codes, '--no-autogenerate'])

        assert result == 0
        assert capsys.readouterr().out == 'df\tあ\ndi\tい\n'

    def test_build_json_to_file(self, base_codes, config_path, tmp_path):
        output = tmp_path / 'table.json'

        result = code_table_cli.main(['-c', config_path, 'build', base_codes,
                                      '-f', 'json', '-o', str(output)])

        assert result == 0
        layout = json.loads(output.read_text(encoding='utf-8'))
        assert layout['2']['di'] == 'いい'
        assert layout["'"]['!'] == '！'

    def test_build_jpn_layout(self, base_codes, config_path, capsys):
        result = code_table_cli.main(['-c', config_path, 'build', base_codes, '--layout', 'jpn'])

        assert result == 0
        lines = capsys.readouterr().out.splitlines()
        assert ':!\t！' in lines
        assert "'!\t！" not in lines

    def test_build_without_caps(self, base_codes, config_path, capsys):
        result = code_table_cli.main(['-c', config_path, 'build', base_codes,
                                      '--no-katakana-in-caps', '--no-kanji-in-caps'])

        assert result == 0
        codes = [line.split('\t')[0] for line in capsys.readouterr().out.splitlines()]
        assert 'DF' not in codes
        assert '2di' in codes

    def test_missing_base_codes(self, config_path, tmp_path):
        result = code_table_cli.main(['-c', config_path, 'build', str(tmp_path / 'missing.tsv')])

        assert result == 1

    def test_exhausted_codes_fail(self, tmp_path, config_path):
        path = tmp_path / 'conflicts.tsv'
        path.write_text('ab\t一\nab\t二\n', encoding='utf-8')

        result = code_table_cli.main(['-c', config_path, 'build', str(path)])

        assert result == 1


class TestConfigFile:
    """Test suite for problems in the file passed with --config"""

    def test_broken_json_uses_defaults(self, base_codes, tmp_path, capsys):
        path = tmp_path / 'broken.json'
        path.write_text('{broken', encoding='utf-8')

        result = code_table_cli.main(['-c', str(path), 'build', base_codes])

        assert result == 0
        lines = capsys.readouterr().out.splitlines()
        assert '2di\tいい' in lines
        assert "'!\t！" in lines

    def test_mistyped_values_use_defaults(self, base_codes, tmp_path, capsys):
        path = tmp_path / 'mistyped.json'
        path.write_text(json.dumps({'keyboard_layout': 'dvorak', 'autogenerate': 'no'}), encoding='utf-8')

        result = code_table_cli.main(['-c', str(path), 'build', base_codes])

        assert result == 0
        lines = capsys.readouterr().out.splitlines()
        assert '2di\tいい' in lines
        assert "'!\t！" in lines

    def test_not_an_object_uses_defaults(self, base_codes, tmp_path, capsys):
        path = tmp_path / 'list.json'
        path.write_text('["jpn"]', encoding='utf-8')

        result = code_table_cli.main(['-c', str(path), 'build', base_codes, '--no-autogenerate'])

        assert result == 0
        assert capsys.readouterr().out == 'df\tあ\ndi\tい\n'

    def test_missing_config_file(self, base_codes, tmp_path):
        result = code_table_cli.main(['-c', str(tmp_path / 'missing.json'), 'build', base_codes])

        assert result == 1


class TestLookupCommand:
    """Test suite for the lookup command"""

    def test_lookup(self, base_codes, config_path, capsys):
        result = code_table_cli.main(['-c', config_path, 'lookup', base_codes, 'df', '2di', 'd', 'zz'])

        assert result == 0
        assert capsys.readouterr().out.splitlines() == [
            'df\tあ',
            '2di\tいい',
            'd\t(none)\tprefix',
            'zz\t(none)',
        ]


class TestStatsCommand:
    """Test suite for the stats command"""

    def test_stats(self, base_codes, config_path, capsys):
        result = code_table_cli.main(['-c', config_path, 'stats', base_codes])

        out = capsys.readouterr().out
        assert result == 0
        assert 'Registrations:    2' in out
        assert 'Deferred:         0' in out
        assert 'Total codes:      222' in out


class TestMain:
    """Test suite for argument handling"""

    def test_no_command(self, capsys):
        assert code_table_cli.main([]) == 1

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as excinfo:
            code_table_cli.main(['--version'])

        assert excinfo.value.code == 0
        assert '0.1.0' in capsys.readouterr().out
