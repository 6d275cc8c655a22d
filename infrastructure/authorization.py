"""Folder permission check standing in for photo-library authorization."""

from __future__ import annotations

import os
from pathlib import Path

from loguru import logger

from core.models import AuthorizationStatus


class FolderAuthorizationService:
    """Maps filesystem permissions of a photo folder to an access level.

    Read and write access is full authorization; read-only access is limited
    (photos can be reviewed but a commit would fail); a missing folder is
    restricted; anything else is denied.
    """

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root)

    async def status(self) -> AuthorizationStatus:
        if not self._root.is_dir():
            return AuthorizationStatus.RESTRICTED
        if not os.access(self._root, os.R_OK | os.X_OK):
            return AuthorizationStatus.DENIED
        if os.access(self._root, os.W_OK):
            return AuthorizationStatus.AUTHORIZED
        return AuthorizationStatus.LIMITED

    async def request_authorization(self) -> AuthorizationStatus:
        """Folders cannot prompt; the current permissions are the answer."""
        status = await self.status()
        logger.info("Folder access for {}: {}", self._root, status.value)
        return status
