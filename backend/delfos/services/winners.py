import logging
import os
import threading
from typing import Optional

from delfos.errors import StorageError
from delfos.services.files import atomic_write


# Child of the app logger ("delfos"), so it shares Flask's handler
logger = logging.getLogger(__name__)

WINNER_FILE = 'winner_count.txt'


class WinnerLedger:
    """Process-wide count of winners, persisted as a decimal in one file.

    ``increment`` holds a single lock across read, add and write so
    concurrent winners are never lost. The file is always replaced whole,
    so ``read`` sees either the old or the new value.
    """

    def __init__(self, data_dir: Optional[str] = None):
        self.data_dir = data_dir
        self._lock = threading.Lock()

    def init_app(self, app) -> None:
        self.data_dir = app.config.get('DATA_DIR') or 'data'

    @property
    def path(self) -> str:
        return os.path.join(self.data_dir or 'data', WINNER_FILE)

    def read(self) -> int:
        try:
            with open(self.path, encoding='ascii') as fh:
                raw = fh.read().strip()
        except FileNotFoundError:
            return 0
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageError(f"Failed to read winner count file: {exc}") from exc
        if not raw:
            return 0
        if not raw.isdigit():
            raise StorageError(f"Invalid winner count format in file: {raw!r}")
        return int(raw)

    def increment(self, user_email: Optional[str] = None, session_id: Optional[str] = None) -> int:
        with self._lock:
            count = self.read() + 1
            self._write(count)
        if user_email:
            logger.info(f"[winner] new winner #{count}: {user_email} (session: {session_id})")
        else:
            logger.info(f"[winner] new winner #{count} recorded")
        return count

    def reset(self) -> None:
        with self._lock:
            self._write(0)
        logger.info("[winner] count reset to 0")

    def _write(self, count: int) -> None:
        try:
            os.makedirs(self.data_dir or 'data', exist_ok=True)
            atomic_write(self.path, str(count))
        except OSError as exc:
            raise StorageError(f"Failed to write winner count file: {exc}") from exc
