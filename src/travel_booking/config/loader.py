"""Config loader for YAML configuration files."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from travel_booking.config.models import BookingSettings
from travel_booking.core.errors import ConfigError


class ConfigLoader:
    """Load BookingSettings from YAML files."""

    @staticmethod
    def load(path: Path | str) -> BookingSettings:
        """Load configuration from YAML.

        Args:
            path: Path to a YAML file, or to a directory holding booking.yaml,
                config.yaml or any number of *.yaml files to merge

        Returns:
            Parsed BookingSettings instance

        Raises:
            FileNotFoundError: If no configuration file is found
            yaml.YAMLError: If a file is not valid YAML
            ConfigError: If the content does not match the settings schema
        """
        config_path = Path(path)

        data: dict[str, Any] = {}

        if config_path.is_dir():
            yaml_file = config_path / "booking.yaml"
            if not yaml_file.exists():
                yaml_file = config_path / "config.yaml"

            if yaml_file.exists():
                data = ConfigLoader._read(yaml_file)
            else:
                files = sorted(config_path.glob("*.yaml"))
                if not files:
                    raise FileNotFoundError(f"No config files found in {config_path}")

                for fpath in files:
                    chunk = ConfigLoader._read(fpath)
                    for key, value in chunk.items():
                        # Nested sections merge, everything else is overwritten
                        if isinstance(value, dict) and isinstance(data.get(key), dict):
                            data[key].update(value)
                        else:
                            data[key] = value
        else:
            if not config_path.exists():
                raise FileNotFoundError(f"Config file not found: {config_path}")
            data = ConfigLoader._read(config_path)

        try:
            return BookingSettings.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration in {config_path}: {e}") from e

    @staticmethod
    def _read(path: Path) -> dict[str, Any]:
        with open(path, encoding="utf-8") as f:
            content = yaml.safe_load(f) or {}
        if not isinstance(content, dict):
            raise ConfigError(f"Expected a mapping at the top of {path}")
        return content
