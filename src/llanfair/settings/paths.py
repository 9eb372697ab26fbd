"""Locations of the global and run-scoped settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from llanfair.constants import HOME_ENV_VAR, RUNS_DIR_NAME
from llanfair.utils.file import require_directory


@dataclass(frozen=True)
class SettingsPaths:
    """Directories backing the two settings tiers.

    The global tier lives in the application home directory and survives
    across sessions. The local tier belongs to the current run.
    """

    global_dir: Path
    run_dir: Path

    @classmethod
    def from_base_dir(cls, base_dir: Path) -> SettingsPaths:
        """Create paths from the application home directory."""
        return cls(global_dir=base_dir, run_dir=base_dir / RUNS_DIR_NAME)

    @classmethod
    def from_env(cls) -> SettingsPaths:
        """Create paths from LLANFAIR_HOME, or the current directory.

        Environment variables are also read from a .env file if present.

        Raises:
            FileNotFoundError: If LLANFAIR_HOME points to a missing directory
        """
        load_dotenv()
        env_home = os.environ.get(HOME_ENV_VAR)
        if env_home:
            return cls.from_base_dir(require_directory(Path(env_home), HOME_ENV_VAR))
        return cls.from_base_dir(Path.cwd())
