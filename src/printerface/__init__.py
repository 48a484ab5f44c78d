__license__ = "GNU Affero General Public License http://www.gnu.org/licenses/agpl.html"
__copyright__ = "Copyright (C) 2024 The Printerface Project - Released under terms of the AGPLv3 License"

__version__ = "0.3.0"


def init_logging(verbosity=0, default_config=None):
    """Sets up logging."""

    import logging.config

    if default_config is None:
        default_config = {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "simple": {
                    "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "level": "DEBUG",
                    "formatter": "simple",
                    "stream": "ext://sys.stderr",
                },
            },
            "loggers": {
                "printerface": {"level": "WARNING"},
            },
            "root": {"level": "WARNING", "handlers": ["console"]},
        }

    if verbosity > 0:
        default_config["loggers"]["printerface"]["level"] = "DEBUG"
    if verbosity > 1:
        default_config["root"]["level"] = "DEBUG"

    logging.config.dictConfig(default_config)
    return default_config
