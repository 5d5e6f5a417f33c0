import copy
import json
import os
from gi.repository import GLib
import logging

from code_map import CodeMap
from keyboard_layout import KeyboardLayout, SHIFTED_KEYS, keyboard_layout

logger = logging.getLogger(__name__)


DEFAULT_CONFIG = {
    "keyboard_layout": "us",
    "base_codes": "base_codes.tsv",
    "autogenerate": True,
    "allow_kanji_in_caps": True,
    "allow_katakana_in_caps": True,
    "output_format": "tsv",
}

OUTPUT_FORMATS = ('tsv', 'json')


def get_package_name():
    '''
    returns 'pskk-codegen'
    '''
    return 'pskk-codegen'


def get_version():
    return '0.1.0'


def get_user_config_dir():
    '''
    Return the path to the config directory under $HOME.
    Typically, it would be $HOME/.config/pskk-codegen
    '''
    return os.path.join(GLib.get_user_config_dir(), get_package_name())


def get_default_config_data():
    return copy.deepcopy(DEFAULT_CONFIG)


def get_config_data():
    '''
    This function is to load the config JSON file from the HOME/.config/pskk-codegen
    When the file is not present (e.g., on the first run), the default
    configuration is written there.

    Returns:
        tuple: (config_data, warnings_string) where warnings_string is empty if no warnings
    '''
    configfile_path = os.path.join(get_user_config_dir(), 'config.json')
    default_config = get_default_config_data()
    warnings = ""

    if(not os.path.exists(configfile_path)):
        warning_msg = f'config.json is not found under {get_user_config_dir()} . Writing the default config.json ..'
        logger.warning(warning_msg)
        warnings = warning_msg
        save_config_data(default_config)
        return(default_config, warnings)
    try:
        with open(configfile_path, encoding='utf-8') as f:
            config_data = json.load(f)
    except json.decoder.JSONDecodeError as e:
        logger.error(f'Error loading the config.json under {get_user_config_dir()}')
        logger.error(e)
        logger.error('Using (but not writing) the default configuration ..')
        return default_config, warnings
    if not isinstance(config_data, dict):
        logger.error(f'config.json under {get_user_config_dir()} is not a JSON object. Using the default configuration ..')
        return default_config, warnings

    return validate_config_data(config_data, f'config.json under {get_user_config_dir()}')


def validate_config_data(config_data, source='config.json'):
    '''
    Fill in missing keys and replace values of the wrong type or unknown
    choices with the defaults.
    足りないキー、型の違う値、未知の選択肢をデフォルト値で置き換える。

    Args:
        config_data: dict loaded from a config JSON file (modified in place)
        source: where the data came from, used in the warnings

    Returns:
        tuple: (config_data, warnings_string) where warnings_string is empty if no warnings
    '''
    default_config = get_default_config_data()
    warnings = ""

    for k in default_config:
        if k not in config_data:
            warning_msg = f'The key "{k}" was not found in {source} . Copying the default key-value'
            logger.warning(warning_msg)
            warnings += ("\n" if warnings else "") + warning_msg
            config_data[k] = default_config[k]
        if type(config_data[k]) != type(default_config[k]):
            warning_msg = f'Type mismatch found for the key "{k}" between {source} and the default configuration. Replacing the value of this key with the default value'
            logger.warning(warning_msg)
            warnings += ("\n" if warnings else "") + warning_msg
            config_data[k] = default_config[k]

    # Values that are strings but not one of the known choices
    layout_name = config_data["keyboard_layout"]
    if not any(keyboard_layout(known, layout_name) for known in SHIFTED_KEYS):
        warning_msg = f'Unknown keyboard_layout "{layout_name}" in {source}. Using "{default_config["keyboard_layout"]}"'
        logger.warning(warning_msg)
        warnings += ("\n" if warnings else "") + warning_msg
        config_data["keyboard_layout"] = default_config["keyboard_layout"]
    if config_data["output_format"] not in OUTPUT_FORMATS:
        warning_msg = f'Unknown output_format "{config_data["output_format"]}" in {source}. Using "{default_config["output_format"]}"'
        logger.warning(warning_msg)
        warnings += ("\n" if warnings else "") + warning_msg
        config_data["output_format"] = default_config["output_format"]

    return config_data, warnings


def save_config_data(config_data):
    '''
    Save config data to the user config directory.

    Args:
        config_data: Dictionary containing configuration data to save

    Returns:
        bool: True if save was successful, False otherwise
    '''
    configfile_path = os.path.join(get_user_config_dir(), 'config.json')

    try:
        # Ensure the config directory exists
        os.makedirs(get_user_config_dir(), exist_ok=True)

        with open(configfile_path, 'w', encoding='utf-8') as f:
            json.dump(config_data, f, ensure_ascii=False, indent=2)

        logger.info(f'Configuration saved successfully to {configfile_path}')
        return True
    except OSError as e:
        logger.error(f'Error saving config.json to {configfile_path}')
        logger.error(e)
        return False


def get_base_codes_path(config):
    '''
    Return the path of the base code file named in the config.
    A relative path is taken relative to the user config directory.
    '''
    base_codes = config['base_codes']
    if os.path.isabs(base_codes):
        return base_codes
    return os.path.join(get_user_config_dir(), base_codes)


def parse_base_codes_line(line):
    """
    Parse a single line from a base code file.

    Format:
        code<TAB>value[<TAB>value...]

    Lines that are empty or start with '#' carry no registration.

    Args:
        line: A line from the base code file

    Returns:
        tuple: (code, [values]) or None if the line has no registration

    Example:
        "ka\\tか" -> ("ka", ["か"])
        "kan\\t漢\\t官" -> ("kan", ["漢", "官"])
    """
    line = line.rstrip('\r\n')
    if not line.strip() or line.startswith('#'):
        return None
    fields = line.split('\t')
    code = fields[0].strip()
    values = [value for value in fields[1:] if value]
    if not code or not values:
        return None
    return code, values


def load_base_codes(path):
    """
    Read all registrations from a base code file (UTF-8).

    Returns:
        list: (code, [values]) tuples in file order
    """
    registrations = []
    with open(path, encoding='utf-8') as f:
        for line_number, line in enumerate(f, 1):
            parsed = parse_base_codes_line(line)
            if parsed is None:
                if line.strip() and not line.startswith('#'):
                    logger.warning(f'{path}:{line_number}: skipping line without code and value: {line.rstrip()!r}')
                continue
            registrations.append(parsed)
    logger.info(f'Loaded {len(registrations)} registration(s) from {path}')
    return registrations


def build_code_map(registrations, config=None):
    """
    Build a CodeMap from base registrations according to the config.

    Args:
        registrations: Iterable of (code, [values]) tuples
        config: Configuration dictionary. If None, the defaults are used.

    Returns:
        CodeMap: Resolved (and, if configured, autogenerated) code map

    Raises:
        code_map.CodeMapError: If the base codes cannot be placed
    """
    if config is None:
        config = get_default_config_data()
    code_map = CodeMap(KeyboardLayout(config['keyboard_layout']))
    for code, values in registrations:
        code_map.register(code, *values)
    code_map.resolve_pending()
    if config['autogenerate']:
        code_map.register_autogenerated_codes(
            allow_kanji_in_caps=config['allow_kanji_in_caps'],
            allow_katakana_in_caps=config['allow_katakana_in_caps'])
    return code_map


def code_table_as_layout(code_map):
    """
    Convert the code map into a nested dict: first key -> remaining keys -> value.

    This is the shape of the kanchoku layout JSON files:
        {"j": {"k": "日", "kl": "..."}, ...}
    """
    layout = {}
    for code, value in code_map.items():
        layout.setdefault(code[0], {})[code[1:]] = value
    return layout


def format_code_table(code_map, output_format='tsv'):
    if output_format == 'tsv':
        return ''.join(f'{code}\t{value}\n' for code, value in code_map.items())
    if output_format == 'json':
        return json.dumps(code_table_as_layout(code_map), ensure_ascii=False, indent=2) + '\n'
    raise ValueError(f'Unknown output format: "{output_format}" (expected one of {OUTPUT_FORMATS})')


def export_code_table(code_map, path, output_format='tsv'):
    """
    Write the code table to ``path`` as TSV (code<TAB>value) or nested JSON.

    Raises:
        ValueError: If the output format is unknown
    """
    text = format_code_table(code_map, output_format)
    with open(path, 'w', encoding='utf-8') as f:
        f.write(text)
    logger.info(f'Exported {len(code_map)} code(s) to {path} ({output_format})')
