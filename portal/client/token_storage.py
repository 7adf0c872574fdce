"""
Durable storage for the session token.

Only the token survives a restart; who the user is gets re-derived from it
by asking the backend.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from portal.core.config import TOKEN_FILE

logger = logging.getLogger(__name__)


class FileTokenStorage:
    def __init__(self, path: Path | str = TOKEN_FILE) -> None:
        self.path = Path(path)

    def load(self) -> Optional[str]:
        try:
            token = self.path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError):
            logger.warning("could not read token file %s", self.path, exc_info=True)
            return None
        return token or None

    def save(self, token: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(token, encoding="utf-8")
        os.chmod(self.path, 0o600)

    def clear(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
        except OSError:
            logger.warning("could not remove token file %s", self.path, exc_info=True)


class MemoryTokenStorage:
    def __init__(self, token: Optional[str] = None) -> None:
        self.token = token

    def load(self) -> Optional[str]:
        return self.token

    def save(self, token: str) -> None:
        self.token = token

    def clear(self) -> None:
        self.token = None
