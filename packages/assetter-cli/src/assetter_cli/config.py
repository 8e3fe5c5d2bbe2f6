"""Option loading shared by the CLI commands.

Options come from, in increasing precedence: defaults, an assetter.yaml
file (``--config`` or one found in the working directory), and the
command line flags that were actually given.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from assetter_core.options import TranspileOptions


def find_config(config_path: str | Path | None) -> Path | None:
    """Return the config file to load, or None when there is none.

    An explicit path is returned as is, even if missing, so the caller
    reports it.
    """
    from assetter_core.options import CONFIG_FILE_NAME

    if config_path is not None:
        return Path(config_path)
    default = Path(CONFIG_FILE_NAME)
    return default if default.is_file() else None


def load_options(config_path: str | Path | None = None, **overrides: Any) -> TranspileOptions:
    """Build TranspileOptions from the config file and CLI overrides.

    Overrides whose value is None were not given on the command line and
    are ignored.

    Raises:
        FileNotFoundError: If an explicit config file does not exist.
        ConfigurationError: If the config file is invalid.
        pydantic.ValidationError: If a command line value is invalid.
    """
    from assetter_core.options import TranspileOptions

    given = {key: value for key, value in overrides.items() if value is not None}
    path = find_config(config_path)
    if path is None:
        return TranspileOptions(**given)
    return TranspileOptions.from_yaml(path, **given)
