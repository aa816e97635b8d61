import codecs
import copy
import json
import os
from gi.repository import GLib
import logging

logger = logging.getLogger(__name__)

NAME_TO_LOGGING_LEVEL = {
    'DEBUG': logging.DEBUG,
    'INFO': logging.INFO,
    'WARNING': logging.WARNING,
    'ERROR': logging.ERROR,
    'CRITICAL': logging.CRITICAL,
}

LOOKUP_TABLE_ORIENTATIONS = ('vertical', 'horizontal', 'system')

# IBus.LookupTable.new() aborts on page sizes above 16
MAX_LOOKUP_TABLE_PAGE_SIZE = 16

# The user config.json is validated against these keys and value types.
DEFAULT_CONFIG = {
    "logging_level": "WARNING",
    "max_candidates": 10,
    "commit_on_tab": True,
    "backend": "native",
    "library_path": "libnepali_smart_ime.so",
    "suggestion_count": 8,
    "dictionaries": [],
    "lookup_table_orientation": "vertical",
}


def get_package_name():
    '''
    returns 'ibus-nepali-smart'
    '''
    return 'ibus-nepali-smart'


def get_version():
    return '0.1.0'


def get_datadir():
    '''
    Return the path to the data directory under user-independent (central)
    location (= not under the HOME)
    '''
    return os.path.join('/usr/local/share', get_package_name())


def get_localedir():
    return '/usr/local/share/locale'


def get_user_config_dir():
    '''
    Return the path to the config directory under $HOME.
    Typically, it would be $HOME/.config/ibus-nepali-smart
    '''
    return os.path.join(GLib.get_user_config_dir(), get_package_name())


def get_default_config_data():
    return copy.deepcopy(DEFAULT_CONFIG)


def get_config_data():
    '''
    This function is to load the config JSON file from the HOME/.config/ibus-nepali-smart
    When the file is not present (e.g., after initial installation), the default
    config is written there.

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
        with codecs.open(configfile_path, encoding='utf-8') as f:
            config_data = json.load(f)
    except (json.decoder.JSONDecodeError, UnicodeDecodeError) as e:
        logger.error(f'Error loading the config.json under {get_user_config_dir()}')
        logger.error(e)
        logger.error('Using (but not writing) the default config ..')
        return get_default_config_data(), warnings
    if not isinstance(config_data, dict):
        logger.error(f'The config.json under {get_user_config_dir()} is not a JSON object. Using the default config ..')
        return get_default_config_data(), warnings

    for k in default_config:
        if k not in config_data:
            warning_msg = f'The key "{k}" was not found in the config.json under {get_user_config_dir()} . Copying the default key-value'
            logger.warning(warning_msg)
            warnings += ("\n" if warnings else "") + warning_msg
            config_data[k] = default_config[k]
        if type(config_data[k]) != type(default_config[k]):
            warning_msg = f'Type mismatch found for the key "{k}" between config.json under {get_user_config_dir()} and default config. Replacing the value of this key with the default value'
            logger.warning(warning_msg)
            warnings += ("\n" if warnings else "") + warning_msg
            config_data[k] = default_config[k]

    if config_data["max_candidates"] < 1:
        warning_msg = f'"max_candidates" must be at least 1 (got {config_data["max_candidates"]}). Using {default_config["max_candidates"]}'
        logger.warning(warning_msg)
        warnings += ("\n" if warnings else "") + warning_msg
        config_data["max_candidates"] = default_config["max_candidates"]
    elif config_data["max_candidates"] > MAX_LOOKUP_TABLE_PAGE_SIZE:
        warning_msg = f'"max_candidates" must be at most {MAX_LOOKUP_TABLE_PAGE_SIZE} (got {config_data["max_candidates"]}). Using {MAX_LOOKUP_TABLE_PAGE_SIZE}'
        logger.warning(warning_msg)
        warnings += ("\n" if warnings else "") + warning_msg
        config_data["max_candidates"] = MAX_LOOKUP_TABLE_PAGE_SIZE

    if config_data["suggestion_count"] < 1:
        warning_msg = f'"suggestion_count" must be at least 1 (got {config_data["suggestion_count"]}). Using {default_config["suggestion_count"]}'
        logger.warning(warning_msg)
        warnings += ("\n" if warnings else "") + warning_msg
        config_data["suggestion_count"] = default_config["suggestion_count"]

    if config_data["lookup_table_orientation"] not in LOOKUP_TABLE_ORIENTATIONS:
        warning_msg = f'"lookup_table_orientation" must be one of {LOOKUP_TABLE_ORIENTATIONS}. Using "{default_config["lookup_table_orientation"]}"'
        logger.warning(warning_msg)
        warnings += ("\n" if warnings else "") + warning_msg
        config_data["lookup_table_orientation"] = default_config["lookup_table_orientation"]

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


def get_logging_level(config):
    '''
    Returns the name of the logging level set in the config.
    When the value is not present (or incorrect), WARNING is used.
    '''
    level = config.get('logging_level', 'WARNING')
    if(level not in NAME_TO_LOGGING_LEVEL):
        logger.warning(f'Specified logging level {level} is not recognized. Using the default WARNING level.')
        level = 'WARNING'
    return level


def get_user_dictionary_path():
    """
    Return the path of the dictionary that stores confirmed words.
    Typically: $HOME/.config/ibus-nepali-smart/user_dictionary.json
    """
    return os.path.join(get_user_config_dir(), 'user_dictionary.json')


def get_dictionary_files(config):
    """
    Obtain the list of JSON dictionary file paths used by the dictionary backend.

    The returned list contains:
    1. system_dictionary.json under the data directory
    2. the files listed under "dictionaries" in config.json; relative paths
       are resolved against the user config directory

    Returns:
        list: Absolute paths of the files that exist.
    """
    dictionary_files = []

    system_dict_path = os.path.join(get_datadir(), 'system_dictionary.json')
    if os.path.exists(system_dict_path):
        dictionary_files.append(system_dict_path)
        logger.debug(f'Found system dictionary: {system_dict_path}')
    else:
        logger.debug(f'System dictionary not found: {system_dict_path}')

    for name in config.get('dictionaries', []):
        if not isinstance(name, str) or not name:
            logger.warning(f'Ignoring invalid dictionary entry: {name!r}')
            continue
        path = os.path.join(get_user_config_dir(), os.path.expanduser(name))
        if os.path.exists(path):
            dictionary_files.append(path)
            logger.debug(f'Found dictionary: {path}')
        else:
            logger.warning(f'Dictionary not found: {path}')

    logger.info(f'Dictionary files to use: {len(dictionary_files)} file(s)')
    return dictionary_files
