"""Access control list — allowed / revoked Telegram users and the bot owner."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from couchpotato_bot.errors import (
    AlreadyAuthorized,
    Banned,
    OwnerProtected,
    PersistenceFailure,
    UserNotFound,
    WrongPassword,
)
from couchpotato_bot.models.acl import AccessList
from couchpotato_bot.models.telegram import TelegramUser

logger = logging.getLogger(__name__)


class AccessControlStore:
    """Owns the allowed / revoked user lists and writes them to a JSON file.

    Every mutation rewrites the whole file before returning.  If the write
    fails the in-memory lists are left as they were and
    :class:`PersistenceFailure` is raised, so memory and disk never disagree.

    An id is in at most one of the two lists at any time.
    """

    def __init__(
        self,
        path: Path,
        password: str,
        configured_owner: int | None = None,
    ) -> None:
        self._path = Path(path)
        self._password = password
        self._configured_owner = configured_owner
        self._acl = AccessList()

    # ── Loading ──────────────────────────────────────────

    def load(self) -> None:
        """Read the ACL file; a missing file means an empty list."""
        if not self._path.exists():
            logger.info("No access control list at %s, starting empty", self._path)
            self._acl = AccessList()
            return
        try:
            self._acl = AccessList.model_validate_json(self._path.read_text("utf-8"))
        except (OSError, ValidationError) as exc:
            raise PersistenceFailure(
                f"could not read access control list {self._path}: {exc}"
            ) from exc
        logger.info(
            "Loaded access control list: %d allowed, %d revoked",
            len(self._acl.allowed_users),
            len(self._acl.revoked_users),
        )

    # ── Queries ──────────────────────────────────────────

    @property
    def allowed_users(self) -> tuple[TelegramUser, ...]:
        return tuple(self._acl.allowed_users)

    @property
    def revoked_users(self) -> tuple[TelegramUser, ...]:
        return tuple(self._acl.revoked_users)

    @property
    def owner_id(self) -> int | None:
        """The configured owner, else the one claimed by the first ``/auth``."""
        if self._configured_owner is not None:
            return self._configured_owner
        return self._acl.owner

    def is_allowed(self, user_id: int) -> bool:
        return any(user.id == user_id for user in self._acl.allowed_users)

    def is_revoked(self, user_id: int) -> bool:
        return any(user.id == user_id for user in self._acl.revoked_users)

    def is_owner(self, user_id: int) -> bool:
        return self.owner_id is not None and self.owner_id == user_id

    def has_access(self, user_id: int) -> bool:
        """Allowed users and the owner may use the bot; revoked users may not."""
        if self.is_revoked(user_id):
            return False
        return self.is_allowed(user_id) or self.is_owner(user_id)

    # ── Mutations ────────────────────────────────────────

    def authorize(self, user: TelegramUser, password: str) -> bool:
        """Add *user* to the allowed list if *password* is the shared secret.

        Returns ``True`` when this user just claimed ownership of the bot,
        which happens once: on the first successful authorization while no
        owner exists.
        """
        if self.is_allowed(user.id):
            raise AlreadyAuthorized()
        if self.is_revoked(user.id):
            raise Banned()
        if not self._password or password != self._password:
            raise WrongPassword()

        claims_owner = self.owner_id is None and not self._acl.allowed_users
        updated = self._acl.model_copy(
            update={
                "allowed_users": [*self._acl.allowed_users, user],
                "owner": user.id if claims_owner else self._acl.owner,
            }
        )
        self._commit(updated)
        logger.info("user: %s, message: authorized (owner claimed: %s)", user.id, claims_owner)
        return claims_owner

    def revoke(self, user_id: int) -> TelegramUser:
        """Move *user_id* from the allowed list to the revoked list."""
        if self.is_owner(user_id):
            raise OwnerProtected()
        target = self._find(self._acl.allowed_users, user_id)
        updated = self._acl.model_copy(
            update={
                "allowed_users": [u for u in self._acl.allowed_users if u.id != user_id],
                "revoked_users": [*self._acl.revoked_users, target],
            }
        )
        self._commit(updated)
        logger.info("user: %s, message: access revoked", user_id)
        return target

    def unrevoke(self, user_id: int) -> TelegramUser:
        """Move *user_id* from the revoked list back to the allowed list."""
        target = self._find(self._acl.revoked_users, user_id)
        updated = self._acl.model_copy(
            update={
                "allowed_users": [*self._acl.allowed_users, target],
                "revoked_users": [u for u in self._acl.revoked_users if u.id != user_id],
            }
        )
        self._commit(updated)
        logger.info("user: %s, message: access restored", user_id)
        return target

    # ── Private helpers ──────────────────────────────────

    @staticmethod
    def _find(users: list[TelegramUser], user_id: int) -> TelegramUser:
        for user in users:
            if user.id == user_id:
                return user
        raise UserNotFound()

    def _commit(self, updated: AccessList) -> None:
        """Write *updated* to disk, then make it the in-memory list."""
        try:
            self._write(updated)
        except OSError as exc:
            logger.critical("Failed to write access control list %s: %s", self._path, exc)
            raise PersistenceFailure(
                f"could not write access control list {self._path}: {exc}"
            ) from exc
        self._acl = updated
        logger.info("The access control list was updated")

    def _write(self, acl: AccessList) -> None:
        directory = self._path.parent
        directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=directory, prefix=".acl-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(acl.model_dump_json(indent=2))
            os.replace(tmp_name, self._path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise
