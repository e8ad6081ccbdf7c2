"""
Loads the use-cdn configuration file.

The configuration is a Python file defining a module-level ``config``, so that
file entries can be callables computing a path from the resolved version::

    config = [
        {"package": "bootstrap", "version": "3", "files": ["dist/js/bootstrap.js"]},
        {"package": "jquery", "version": "latest", "files": [lambda v: "jquery.js"]},
    ]
"""

import importlib.util
import logging
from pathlib import Path

from use_cdn.exceptions import ConfigurationError
from use_cdn.models.config import UseCDNConfig

log = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "use_cdn_conf.py"


class ConfigLoader:
    """Handles loading and validation of the configuration file."""

    def __init__(self, config_file_path: Path | str | None = None):
        self.config_file_path = Path(config_file_path or DEFAULT_CONFIG_FILE).resolve()

    def load(self) -> UseCDNConfig:
        """
        Executes the configuration file and validates its ``config``. The file
        is read from disk on every call.

        Raises:
            ConfigurationError: If the file is missing, fails to execute, does
            not define ``config``, or does not validate.
        """
        if not self.config_file_path.is_file():
            raise ConfigurationError(
                f"Configuration file not found at '{self.config_file_path}'."
            )

        module_spec = importlib.util.spec_from_file_location(
            "_use_cdn_conf", self.config_file_path
        )
        if module_spec is None or module_spec.loader is None:
            raise ConfigurationError(
                f"Cannot load '{self.config_file_path}' as a Python file."
            )

        module = importlib.util.module_from_spec(module_spec)
        try:
            module_spec.loader.exec_module(module)
        except Exception as e:
            raise ConfigurationError(
                f"Error executing configuration file '{self.config_file_path}': {e}"
            ) from e

        if not hasattr(module, "config"):
            raise ConfigurationError(
                f"Configuration file '{self.config_file_path}' does not define "
                "'config'."
            )

        log.debug(f"Loaded configuration from {self.config_file_path}")
        return UseCDNConfig.from_raw(module.config)
