"""
Manage runtime settings.

"""

import copy
import json
import os
import shutil
import warnings
from typing import List, Union

__author__ = "The atomdesc developers"
__date__ = "2026-10-19"

DEFAULT = {
    "compute": {
        "n_threads": None,
        "use_native_system": False,
    },
}

PATHS = [
    '.',
    os.path.join(os.path.expanduser("~"), ".config", "atomdesc")
]


def config_file_path():
    """
    Search for configuration file and return path if found.

    """
    config_file = None
    for p in PATHS:
        path = os.path.join(p, "config.json")
        if os.path.exists(path):
            config_file = path
            break
    return config_file


def valid_setting(setting):
    """
    Check if a given setting actually exists.

    """
    return setting in DEFAULT


def read_config(config_file=None):
    """
    Search for configuration file and read if found.

    Sections of the file are merged into the defaults, so that a file
    only needs to contain the keys it changes.

    """
    config_dict = copy.deepcopy(DEFAULT)
    if config_file is None:
        config_file = config_file_path()
    if config_file is not None:
        with open(config_file) as fp:
            for setting, value in json.load(fp).items():
                if isinstance(config_dict.get(setting), dict):
                    config_dict[setting].update(value)
                else:
                    config_dict[setting] = value
    return config_dict


def write_config(config_dict, config_file=None, replace=False):
    """
    Write settings to a configuration file.

    Args:
      config_dict (dict): dict with settings
      config_file (str): (optional) path to a configuration file
      replace (bool): if True, replace existing configuration file

    """
    config_dict = dict(config_dict)
    for setting in list(config_dict.keys()):
        if not valid_setting(setting):
            config_dict.pop(setting)
            warnings.warn("unknown setting '{}' ignored".format(setting))
    if config_file is None:
        config_file = config_file_path()
    if config_file is None:
        os.makedirs(PATHS[-1], exist_ok=True)
        config_file = os.path.join(PATHS[-1], "config.json")
    elif os.path.exists(config_file):
        shutil.copy2(config_file, config_file + ".bak")
        if not replace:
            config_dict_orig = read_config(config_file)
            config_dict_orig.update(config_dict)
            config_dict = config_dict_orig
    with open(config_file, "w") as fp:
        json.dump(config_dict, fp)


def read(settings: Union[str, List[str]], config_file: os.PathLike = None):
    """
    Args:
      settings: one or more settings to read
      config_file: path to the config file

    Returns:
      If `settings` is a string, return only the result for this setting.
      If `settings` is a list, return list of results.

    """
    if hasattr(settings, 'lower'):
        settings = [settings]
        return_single = True
    else:
        return_single = False

    config_dict = read_config(config_file)

    result = []
    for setting in settings:
        if setting not in config_dict:
            raise KeyError('Not a valid setting: {}'.format(setting))
        result.append(config_dict[setting])

    if return_single:
        return result[0]
    else:
        return result


def default_threads(config_file=None):
    """
    Number of threads used to fill descriptors for several systems.

    """
    n_threads = read("compute", config_file)["n_threads"]
    if n_threads is None:
        n_threads = os.cpu_count() or 1
    return max(1, int(n_threads))
