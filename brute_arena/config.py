"""Simulator defaults read from the environment.

`Settings` holds the turn cap, level-up choice count, daily fight allowance,
game data override, archive directory and log level. A `.env` file next to
the process is honoured through python-dotenv. `Settings().validate()`
returns human-readable problem strings, so a CLI can print them and exit.
"""
from typing import Optional, List
import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Minimal settings holder.

    Every simulator entry point takes explicit arguments; these values are
    only the defaults used when a caller passes None.
    """

    # Fight simulation
    FIGHT_MAX_TURNS: int = int(os.getenv("FIGHT_MAX_TURNS", "100"))
    SIMULATION_CONCURRENCY: int = int(os.getenv("SIMULATION_CONCURRENCY", "4"))

    # Leveling
    LEVEL_UP_CHOICES: int = int(os.getenv("LEVEL_UP_CHOICES", "2"))

    # Daily fight allowance (read by brute rules, never by the simulator)
    FIGHTS_PER_DAY: int = int(os.getenv("FIGHTS_PER_DAY", "6"))
    EVENT_FIGHTS_PER_DAY: int = int(os.getenv("EVENT_FIGHTS_PER_DAY", "10"))

    # Static game data override (YAML). When unset the packaged table is used.
    GAME_DATA_PATH: Optional[str] = os.getenv("GAME_DATA_PATH") or None

    # Fight archive + logging
    FIGHT_LOG_DIR: str = os.getenv("FIGHT_LOG_DIR", "data")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    def validate(self, required: Optional[List[str]] = None) -> List[str]:
        """Validate settings.

        Args:
            required: list of attribute names that must be set (e.g.
                ["GAME_DATA_PATH"]). Numeric limits are always checked.

        Returns:
            A list of problem descriptions (empty if everything is fine).
        """
        problems: List[str] = []
        for name in required or []:
            val = getattr(self, name, None)
            if val is None or (isinstance(val, str) and not val.strip()):
                problems.append(name)

        if self.FIGHT_MAX_TURNS < 1:
            problems.append("FIGHT_MAX_TURNS must be >= 1")
        if self.LEVEL_UP_CHOICES < 1:
            problems.append("LEVEL_UP_CHOICES must be >= 1")
        if self.SIMULATION_CONCURRENCY < 1:
            problems.append("SIMULATION_CONCURRENCY must be >= 1")
        if self.GAME_DATA_PATH and not os.path.exists(self.GAME_DATA_PATH):
            problems.append(f"GAME_DATA_PATH does not exist: {self.GAME_DATA_PATH}")

        return problems
