"""Session context and local persistence of the last used CPF.

The active CPF is carried explicitly in a WatchlistSession handed to the
controller. The CLI remembers the last CPF between runs in a small YAML
file under a fixed key.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

from dailyb3.exceptions import ConfigurationError
from dailyb3.utils.cpf import normalize_cpf, validate_cpf
from dailyb3.utils.dates import DEFAULT_TIMEZONE

logger = logging.getLogger(__name__)

CPF_SESSION_KEY = "dailyb3-cpf"


@dataclass
class WatchlistSession:
    """
    Session context for one CPF holder.

    Attributes:
        cpf: Active CPF, digits only (formatting is stripped)
        timezone: Timezone used for calendar-day comparisons
    """

    cpf: str
    timezone: str = DEFAULT_TIMEZONE

    def __post_init__(self) -> None:
        self.cpf = normalize_cpf(self.cpf)

    @property
    def is_valid(self) -> bool:
        return validate_cpf(self.cpf)


class SessionConfig:
    """Last-used CPF, persisted to ``~/.dailyb3/session.yaml``."""

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else self.get_default_path()

    @classmethod
    def get_default_path(cls) -> Path:
        """Default session file path (~/.dailyb3/session.yaml)."""
        return Path.home() / ".dailyb3" / "session.yaml"

    def _read(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            with open(self.path) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in session file: {e}") from e
        return data if isinstance(data, dict) else {}

    def load_cpf(self) -> Optional[str]:
        """
        Restore the last used CPF.

        Returns:
            The stored CPF, or None if nothing was saved
        """
        cpf = self._read().get(CPF_SESSION_KEY)
        if cpf:
            logger.debug(f"Restored CPF from {self.path}")
            return str(cpf)
        return None

    def save_cpf(self, cpf: str) -> None:
        """
        Persist the CPF as the last used one.

        Raises:
            ConfigurationError: If the file cannot be written
        """
        data = self._read()
        data[CPF_SESSION_KEY] = cpf

        self.path.parent.mkdir(parents=True, exist_ok=True)
        try:
            with open(self.path, "w") as f:
                yaml.safe_dump(data, f, default_flow_style=False)
        except OSError as e:
            raise ConfigurationError(f"Failed to save session: {e}") from e
        logger.info(f"Session CPF saved to {self.path}")
