"""Locations of the client configuration file.

The active file is, in order: the file named by ``DPE_CLIENTS_PATH``, a
``clients.yaml`` in the platform's user config directory, or the copy bundled
with the package.
"""

import os
import shutil
from pathlib import Path
from typing import Tuple

import platformdirs

from .logging import LogEvent, log_error, log_info

APP_NAME = "delivery-pricing-engine"
ENV_CLIENTS_PATH = "DPE_CLIENTS_PATH"
CLIENTS_FILENAME = "clients.yaml"


def get_package_config_dir() -> Path:
    """Directory holding the bundled ``clients.yaml``."""
    return Path(__file__).parent / "config"


def get_user_config_dir() -> Path:
    """Per-user directory for an editable ``clients.yaml``."""
    return Path(platformdirs.user_config_dir(APP_NAME))


def install_user_clients_file() -> Tuple[Path, bool]:
    """Seed the user config directory with the bundled clients file.

    An existing user file is never overwritten.

    Returns:
        Tuple of (user file path, whether it was created)

    Raises:
        OSError: If the directory or file cannot be written
    """
    target = get_user_config_dir() / CLIENTS_FILENAME
    if target.exists():
        return target, False
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(get_package_config_dir() / CLIENTS_FILENAME, target)
    except OSError as e:
        log_error(LogEvent.CONFIG_LOAD, f"Could not create {target}: {e}", path=str(target))
        raise
    log_info(LogEvent.CONFIG_LOAD, f"Created {target} from the bundled clients file", path=str(target))
    return target, True


def get_clients_config_path() -> str:
    """Resolve the client configuration file currently in effect.

    A ``DPE_CLIENTS_PATH`` that does not name an existing file is ignored.
    """
    env_path = os.environ.get(ENV_CLIENTS_PATH)
    if env_path and Path(env_path).is_file():
        return env_path

    user_path = get_user_config_dir() / CLIENTS_FILENAME
    if user_path.is_file():
        return str(user_path)

    return str(get_package_config_dir() / CLIENTS_FILENAME)
