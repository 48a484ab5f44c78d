"""
Client configuration.

The configuration is read from a YAML file, by default ``config.yaml`` in the
application directory (e.g. ``~/.config/printerface`` on Linux)::

    host: octopi.local
    port: 80
    apikey: 0123456789ABCDEF
    timeout: 10
"""

__license__ = "GNU Affero General Public License http://www.gnu.org/licenses/agpl.html"
__copyright__ = "Copyright (C) 2024 The Printerface Project - Released under terms of the AGPLv3 License"

import logging
import os
from typing import Any, Dict, Hashable, Optional, TextIO, Union

import click
from pydantic import ValidationError

from printerface.connection import DEFAULT_TIMEOUT
from printerface.exceptions import ConfigurationError
from printerface.schema import BaseModel

APP_NAME = "printerface"
CONFIG_FILENAME = "config.yaml"

_logger = logging.getLogger(__name__)


class ClientSettings(BaseModel):
    host: str = "127.0.0.1"
    port: int = 5000
    apikey: Optional[str] = None
    https: bool = False
    httpuser: Optional[str] = None
    httppass: Optional[str] = None
    prefix: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT


def default_config_path() -> str:
    return os.path.join(click.get_app_dir(APP_NAME), CONFIG_FILENAME)


def load_from_file(
    file: TextIO = None, path: str = None
) -> Union[Dict[Hashable, Any], list, None]:
    """
    Safely loads yaml data from the given source. Either a path or a file must
    be passed in.
    """
    if path is not None:
        assert file is None
        with open(path, encoding="utf-8-sig") as f:
            return load_from_file(file=f)

    assert file is not None, "this function requires an input file"

    import yaml

    try:
        from yaml import CSafeLoader as SafeLoader
    except ImportError:
        from yaml import SafeLoader

    return yaml.load(file, Loader=SafeLoader)


def load_settings(path=None, **overrides) -> ClientSettings:
    """
    Loads the client settings from ``path``, or from the default config file if
    no path is given.

    A missing default config file yields the defaults, a missing explicit one
    is an error. ``overrides`` that are not ``None`` take precedence over the
    file's values.

    Raises:
        ConfigurationError: the file can't be read or contains invalid settings
    """
    import yaml

    explicit = path is not None
    if path is None:
        path = default_config_path()

    data = {}
    if explicit or os.path.isfile(path):
        try:
            data = load_from_file(path=path)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Could not read config file {path}", cause=e) from e
        _logger.debug(f"Loaded configuration from {path}")

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} does not contain a mapping")

    data = dict(data)
    data.update({key: value for key, value in overrides.items() if value is not None})

    try:
        return ClientSettings.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration in {path}", cause=e) from e
