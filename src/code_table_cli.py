#!/usr/bin/env python3
"""
code_table_cli.py - Command-line interface for building code tables
コードテーブル生成のコマンドラインインターフェース

================================================================================
OVERVIEW / 概要
================================================================================

This CLI reads hand-written base codes, resolves their conflicts, derives the
autogenerated codes and writes the finished table.

このCLIは手書きの基本コードを読み込み、衝突を解決し、自動生成コードを
導出して、完成したテーブルを書き出す。

================================================================================
USAGE / 使用方法
================================================================================

    # Build the table and print it as TSV
    # テーブルを生成してTSVで表示
    python code_table_cli.py build base_codes.tsv

    # Build for a JIS keyboard, as nested JSON
    # JISキーボード用にネストしたJSONで生成
    python code_table_cli.py build base_codes.tsv --layout jpn -f json -o table.json

    # Look up codes
    # コードを調べる
    python code_table_cli.py lookup base_codes.tsv df 2di

    # Show table statistics
    # テーブルの統計を表示
    python code_table_cli.py stats base_codes.tsv

================================================================================
"""

import argparse
import collections
import json
import logging
import os
import sys

# Add src directory to path if needed
src_dir = os.path.dirname(os.path.abspath(__file__))
if src_dir not in sys.path:
    sys.path.insert(0, src_dir)

import util
from code_map import CodeMap, CodeMapError
from keyboard_layout import KeyboardLayout, SHIFTED_KEYS

logger = logging.getLogger(__name__)


def setup_logging(verbose=False):
    """Configure logging based on verbosity level."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s %(levelname)-8s %(message)s',
        datefmt='%H:%M:%S'
    )


def load_config(args):
    """
    Load the configuration and apply command-line overrides.
    設定を読み込み、コマンドラインの指定で上書きする。
    """
    if args.config:
        try:
            with open(args.config, encoding='utf-8') as f:
                config_data = json.load(f)
        except json.decoder.JSONDecodeError as e:
            logger.error(f'Error loading the config file {args.config}')
            logger.error(e)
            logger.error('Using the default configuration ..')
            config_data = {}
        if not isinstance(config_data, dict):
            logger.error(f'{args.config} is not a JSON object. Using the default configuration ..')
            config_data = {}
        config, _ = util.validate_config_data(config_data, args.config)
    else:
        config, _ = util.get_config_data()

    if getattr(args, 'layout', None):
        config['keyboard_layout'] = args.layout
    if getattr(args, 'no_autogenerate', False):
        config['autogenerate'] = False
    if getattr(args, 'no_kanji_in_caps', False):
        config['allow_kanji_in_caps'] = False
    if getattr(args, 'no_katakana_in_caps', False):
        config['allow_katakana_in_caps'] = False
    if getattr(args, 'format', None):
        config['output_format'] = args.format
    return config


def cmd_build(args):
    """
    Build the code table and export it.
    コードテーブルを生成して出力。
    """
    if not os.path.exists(args.base_codes):
        print(f"ERROR: Base code file not found: {args.base_codes}")
        return 1

    config = load_config(args)
    registrations = util.load_base_codes(args.base_codes)
    code_map = util.build_code_map(registrations, config)

    if args.output:
        util.export_code_table(code_map, args.output, config['output_format'])
    else:
        sys.stdout.write(util.format_code_table(code_map, config['output_format']))
    return 0


def cmd_lookup(args):
    """
    Print the value of each code and whether more keys can follow it.
    各コードの値と、続けて打鍵できるかを表示。
    """
    if not os.path.exists(args.base_codes):
        print(f"ERROR: Base code file not found: {args.base_codes}")
        return 1

    config = load_config(args)
    code_map = util.build_code_map(util.load_base_codes(args.base_codes), config)

    for code in args.codes:
        value = code_map.lookup(code)
        prefix = 'prefix' if code_map.is_code_prefix(code) else ''
        print(f"{code}\t{value if value is not None else '(none)'}\t{prefix}".rstrip('\t'))
    return 0


def cmd_stats(args):
    """
    Show statistics for a generated code table.
    生成したコードテーブルの統計を表示。
    """
    if not os.path.exists(args.base_codes):
        print(f"ERROR: Base code file not found: {args.base_codes}")
        return 1

    config = load_config(args)
    registrations = util.load_base_codes(args.base_codes)

    code_map = CodeMap(KeyboardLayout(config['keyboard_layout']))
    for code, values in registrations:
        code_map.register(code, *values)
    registered_values = sum(len(values) for _, values in registrations)
    deferred = code_map.pending_count
    base_count = len(code_map)

    written = {}
    if config['autogenerate']:
        written = code_map.register_autogenerated_codes(
            allow_kanji_in_caps=config['allow_kanji_in_caps'],
            allow_katakana_in_caps=config['allow_katakana_in_caps'])

    by_length = collections.Counter(len(code) for code, _ in code_map.items())

    print("=" * 60)
    print("Code Table Statistics")
    print("=" * 60)
    print()
    print(f"File:             {args.base_codes}")
    print(f"Keyboard layout:  {config['keyboard_layout']}")
    print(f"Registrations:    {registered_values:,}")
    print(f"Deferred:         {deferred:,}")
    print(f"Base codes:       {base_count:,}")
    for pass_name, count in written.items():
        print(f"  {pass_name + ':':<16}{count:,}")
    print(f"Total codes:      {len(code_map):,}")
    for length in sorted(by_length):
        print(f"  {length}-key codes:    {by_length[length]:,}")
    print()
    return 0


def main(argv=None):
    """Main entry point for CLI."""
    parser = argparse.ArgumentParser(
        description="Code table generation CLI for direct kana/kanji input",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Build and print the table
  python code_table_cli.py build base_codes.tsv

  # Build for a JIS keyboard without CapsLock kanji
  python code_table_cli.py build base_codes.tsv --layout jpn --no-kanji-in-caps -o table.tsv

  # Look up codes
  python code_table_cli.py lookup base_codes.tsv df 2di

Base code files contain one registration per line: code<TAB>value[<TAB>value...]
"""
    )

    parser.add_argument('--version', action='version',
                        version=f'%(prog)s {util.get_version()}')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable verbose output')
    parser.add_argument('-c', '--config',
                        help='Path to a config JSON file (default: ~/.config/pskk-codegen/config.json)')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # Build command
    build_parser = subparsers.add_parser('build', help='Build and export the code table')
    build_parser.add_argument('base_codes', help='Path to base code file')
    build_parser.add_argument('-o', '--output', help='Output path (default: stdout)')
    build_parser.add_argument('-f', '--format', choices=util.OUTPUT_FORMATS,
                              help='Output format (default: from config)')
    build_parser.add_argument('--layout', choices=sorted(SHIFTED_KEYS),
                              help='Keyboard layout (default: from config)')
    build_parser.add_argument('--no-autogenerate', action='store_true',
                              help='Do not derive autogenerated codes')
    build_parser.add_argument('--no-kanji-in-caps', action='store_true',
                              help='Do not duplicate kanji codes for CapsLock')
    build_parser.add_argument('--no-katakana-in-caps', action='store_true',
                              help='Do not generate katakana codes for CapsLock')

    # Lookup command
    lookup_parser = subparsers.add_parser('lookup', help='Look up codes in the generated table')
    lookup_parser.add_argument('base_codes', help='Path to base code file')
    lookup_parser.add_argument('codes', nargs='+', help='Codes to look up')
    lookup_parser.add_argument('--layout', choices=sorted(SHIFTED_KEYS),
                               help='Keyboard layout (default: from config)')

    # Stats command
    stats_parser = subparsers.add_parser('stats', help='Show code table statistics')
    stats_parser.add_argument('base_codes', help='Path to base code file')
    stats_parser.add_argument('--layout', choices=sorted(SHIFTED_KEYS),
                              help='Keyboard layout (default: from config)')

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    setup_logging(args.verbose)

    try:
        if args.command == 'build':
            return cmd_build(args)
        elif args.command == 'lookup':
            return cmd_lookup(args)
        elif args.command == 'stats':
            return cmd_stats(args)
    except CodeMapError as e:
        logger.error(f'Code table generation failed: {e}')
        return 1
    except OSError as e:
        logger.error(e)
        return 1
    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
