"""
API key management for Project Pulse.

Bearer keys resolve to a user, and the user's role decides visibility.

Key Format:
  - User-visible: pulse_<32-char-hex>
  - Storage: SHA-256 hash only (never plaintext)

Example:
    manager = KeyManager(store)
    key, key_info = manager.create_key(user.id, "dashboard", expires_in_days=90)
    print(f"Your API key (save this): {key}")

    identity = manager.validate_key(key)
"""

import hashlib
import logging
import secrets
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from pulse.access import Identity
from pulse.models import Role
from pulse.store import StateStore, now_iso

log = logging.getLogger(__name__)

API_KEYS_SCHEMA = """
CREATE TABLE IF NOT EXISTS api_keys (
    id TEXT PRIMARY KEY,
    key_hash TEXT NOT NULL UNIQUE,
    user_id TEXT NOT NULL REFERENCES users(id),
    name TEXT NOT NULL,
    created_at TEXT NOT NULL,
    expires_at TEXT,
    last_used_at TEXT,
    is_active INTEGER NOT NULL DEFAULT 1
);
CREATE INDEX IF NOT EXISTS idx_api_keys_user ON api_keys(user_id);
"""


@dataclass
class KeyInfo:
    """Metadata about an API key (never includes the hash or key itself)."""

    id: str
    user_id: str
    name: str
    created_at: str
    expires_at: str | None
    last_used_at: str | None
    is_active: bool

    def is_expired(self) -> bool:
        if not self.expires_at:
            return False
        return datetime.now(UTC) >= datetime.fromisoformat(self.expires_at)


class KeyManager:
    """Manages API key lifecycle: creation, validation, revocation."""

    PREFIX = "pulse_"
    KEY_LENGTH = 32  # Hex characters (128 bits of entropy)

    def __init__(self, store: StateStore):
        self.store = store
        self._ensure_schema()

    def _ensure_schema(self) -> None:
        self.store.execute_script(API_KEYS_SCHEMA)

    @staticmethod
    def _generate_key() -> str:
        return f"{KeyManager.PREFIX}{secrets.token_hex(KeyManager.KEY_LENGTH // 2)}"

    @staticmethod
    def _hash_key(key: str) -> str:
        """Hash a key using SHA-256 (one-way, not reversible)."""
        return hashlib.sha256(key.encode()).hexdigest()

    def create_key(
        self, user_id: str, name: str, expires_in_days: int | None = None
    ) -> tuple[str, KeyInfo]:
        """
        Create a new API key for a user.

        Returns:
            (key, key_info); the plaintext key is only returned here.

        Raises:
            ValueError: empty name, bad expiry or unknown user
        """
        if not name or not name.strip():
            raise ValueError("name cannot be empty")
        if expires_in_days is not None and expires_in_days <= 0:
            raise ValueError("expires_in_days must be > 0")
        if self.store.get_user(user_id) is None:
            raise ValueError(f"Unknown user: {user_id}")

        key = self._generate_key()
        key_info = KeyInfo(
            id=f"key_{secrets.token_hex(8)}",
            user_id=user_id,
            name=name.strip(),
            created_at=now_iso(),
            expires_at=(
                (datetime.now(UTC) + timedelta(days=expires_in_days)).isoformat()
                if expires_in_days
                else None
            ),
            last_used_at=None,
            is_active=True,
        )
        self.store.insert(
            "api_keys",
            {
                "id": key_info.id,
                "key_hash": self._hash_key(key),
                "user_id": user_id,
                "name": key_info.name,
                "created_at": key_info.created_at,
                "expires_at": key_info.expires_at,
                "is_active": 1,
            },
        )
        log.info(f"Created API key: {key_info.id} (user={user_id}, name={key_info.name})")
        return key, key_info

    def validate_key(self, key: str | None) -> Identity | None:
        """
        Resolve a key to the identity of its user.

        Returns None for unknown, inactive or expired keys. Store failures
        propagate as StoreError.
        """
        if not key or not key.startswith(self.PREFIX):
            return None

        rows = self.store.query(
            """
            SELECT k.id, k.user_id, k.name, k.created_at, k.expires_at, k.last_used_at,
                   k.is_active, u.role, u.name AS user_name
            FROM api_keys k JOIN users u ON u.id = k.user_id
            WHERE k.key_hash = ?
            """,
            [self._hash_key(key)],
        )
        if not rows:
            return None
        row = rows[0]

        key_info = KeyInfo(
            id=row["id"],
            user_id=row["user_id"],
            name=row["name"],
            created_at=row["created_at"],
            expires_at=row["expires_at"],
            last_used_at=row["last_used_at"],
            is_active=bool(row["is_active"]),
        )
        if not key_info.is_active:
            log.debug(f"Key {key_info.id} is inactive")
            return None
        if key_info.is_expired():
            log.debug(f"Key {key_info.id} is expired")
            return None

        self.store.update("api_keys", key_info.id, {"last_used_at": now_iso()})
        return Identity(user_id=row["user_id"], role=Role(row["role"]), name=row["user_name"])

    def revoke_key(self, key_id: str) -> bool:
        """Deactivate a key. Returns False if not found."""
        revoked = self.store.update("api_keys", key_id, {"is_active": 0})
        if revoked:
            log.info(f"Revoked API key: {key_id}")
        else:
            log.warning(f"Key not found: {key_id}")
        return revoked

    def list_keys(self, user_id: str | None = None, active_only: bool = False) -> list[KeyInfo]:
        where = []
        params = []
        if user_id is not None:
            where.append("user_id = ?")
            params.append(user_id)
        if active_only:
            where.append("is_active = 1")
        sql = "SELECT id, user_id, name, created_at, expires_at, last_used_at, is_active FROM api_keys"
        if where:
            sql += " WHERE " + " AND ".join(where)
        sql += " ORDER BY created_at"
        return [
            KeyInfo(**{**row, "is_active": bool(row["is_active"])})
            for row in self.store.query(sql, params)
        ]
