"""Environment handed to external commands.

Extra variables registered here are merged over the process environment for
every command the runner executes. A ``.env`` file can seed them.
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import dotenv_values


_EXTRA_ENV: dict[str, str] = {}


def add_env(key: str, value: str) -> None:
    """Register an extra environment variable for external commands."""
    _EXTRA_ENV[key] = value


def clear_env() -> None:
    """Forget every registered extra variable."""
    _EXTRA_ENV.clear()


def get_env() -> dict[str, str]:
    """Return the process environment merged with the registered extras."""
    env = dict(os.environ)
    env.update(_EXTRA_ENV)
    return env


def get_env_var(name: str) -> Optional[str]:
    """Look up a single variable, extras taking precedence."""
    return get_env().get(name)


def load_env_file(path: Path) -> int:
    """Register every variable defined in a dotenv file.

    Args:
        path: Path to the ``.env`` file. A missing file is ignored.

    Returns:
        Number of variables registered.
    """
    if not path.exists():
        return 0

    count = 0
    for key, value in dotenv_values(path).items():
        if value is None:
            continue
        add_env(key, value)
        count += 1
    return count
