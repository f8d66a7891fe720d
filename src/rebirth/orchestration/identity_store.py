"""
Durable process identity record.

The supervisor that owns the running program writes its own PID here so a
peer in another execution context (the host, when the program runs in a
container) can address it with signals. Last write wins; there is no locking
because only the owning instance ever writes.
"""

import logging
from pathlib import Path

from ..models.runtime import parse_pid
from ..validation import IdentityCorruptError, IdentityError, IdentityNotFoundError

logger = logging.getLogger(__name__)


class IdentityStore:
    """Single-value PID record stored at a fixed path."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def write(self, pid: int) -> None:
        """Overwrite the record with ``pid``."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(f"{pid}")
        logger.debug(f"Wrote PID {pid} to {self.path}")

    def read(self) -> int:
        """
        Read the recorded PID.

        Raises:
            IdentityNotFoundError: If no record exists
            IdentityCorruptError: If the record is not a decimal PID
            IdentityError: If the record cannot be read
        """
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            raise IdentityNotFoundError(f"no PID record at {self.path}") from None
        except OSError as e:
            raise IdentityError(f"cannot read PID record at {self.path}: {e}") from e

        try:
            content = raw.decode("ascii")
        except UnicodeDecodeError:
            raise IdentityCorruptError(f"PID record at {self.path} is not a valid PID: {raw!r}") from None

        pid = parse_pid(content)
        if pid is None:
            raise IdentityCorruptError(f"PID record at {self.path} is not a valid PID: {content!r}")
        return pid

    def exists(self) -> bool:
        return self.path.is_file()

    def clear(self) -> None:
        """Remove the record; a missing record is fine."""
        try:
            self.path.unlink()
            logger.debug(f"Removed PID record {self.path}")
        except FileNotFoundError:
            pass
