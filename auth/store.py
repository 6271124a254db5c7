"""
用戶存儲
- UserStore: 認證流程依賴的最小接口 (查找 / 創建 / 唯一性檢查)
- InMemoryUserStore: 進程內存儲，主要用於測試
- JsonUserStore: 持久化到 users.json，寫入前備份並通過臨時文件原子替換
"""

from __future__ import annotations

import json
import logging
import os
import shutil
import threading
import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, FrozenSet, List, Optional, Protocol, Union

from auth.credentials import hash_password
from auth.errors import DuplicateUserError

logger = logging.getLogger(__name__)

DEFAULT_ROLES: FrozenSet[str] = frozenset({"USER"})


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class Identity:
    """登錄用戶的身份，只讀"""
    username: str
    roles: FrozenSet[str] = frozenset()
    id: str = ""
    email: str = ""
    full_name: str = ""
    enabled: bool = True
    created_at: str = ""
    updated_at: str = ""


@dataclass
class UserRecord:
    username: str
    email: str
    full_name: str
    password_hash: str
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    roles: List[str] = field(default_factory=lambda: sorted(DEFAULT_ROLES))
    enabled: bool = True
    created_at: str = field(default_factory=_utcnow)
    updated_at: str = field(default_factory=_utcnow)

    def identity(self) -> Identity:
        return Identity(
            username=self.username,
            roles=frozenset(self.roles),
            id=self.id,
            email=self.email,
            full_name=self.full_name,
            enabled=self.enabled,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_dict(cls, data: Dict) -> "UserRecord":
        roles = data.get("roles")
        return cls(
            username=str(data["username"]),
            email=str(data.get("email", "")),
            full_name=str(data.get("full_name", "")),
            password_hash=str(data.get("password_hash", "")),
            id=str(data.get("id") or uuid.uuid4().hex),
            roles=[r for r in roles if isinstance(r, str)] if isinstance(roles, list) else sorted(DEFAULT_ROLES),
            enabled=bool(data.get("enabled", True)),
            created_at=str(data.get("created_at") or _utcnow()),
            updated_at=str(data.get("updated_at") or _utcnow()),
        )


class UserStore(Protocol):
    def find_by_username(self, username: str) -> Optional[UserRecord]: ...

    def exists_by_username(self, username: str) -> bool: ...

    def exists_by_email(self, email: str) -> bool: ...

    def create(self, username: str, email: str, full_name: str, password: str) -> Identity: ...


class InMemoryUserStore:
    def __init__(self):
        self._users: Dict[str, UserRecord] = {}
        self._lock = threading.Lock()

    def find_by_username(self, username: str) -> Optional[UserRecord]:
        if not username:
            return None
        return self._users.get(username)

    def exists_by_username(self, username: str) -> bool:
        return username in self._users

    def exists_by_email(self, email: str) -> bool:
        wanted = (email or "").lower()
        return any(u.email.lower() == wanted for u in list(self._users.values()))

    def create(self, username: str, email: str, full_name: str, password: str) -> Identity:
        # 哈希很慢，放在鎖外面
        record = UserRecord(
            username=username,
            email=email,
            full_name=full_name,
            password_hash=hash_password(password),
        )
        with self._lock:
            self._check_unique(username, email)
            self._users[username] = record
        return record.identity()

    def _check_unique(self, username: str, email: str) -> None:
        if self.exists_by_username(username):
            raise DuplicateUserError("username", username)
        if self.exists_by_email(email):
            raise DuplicateUserError("email", email)

    def all(self) -> List[UserRecord]:
        return list(self._users.values())


class JsonUserStore(InMemoryUserStore):
    """
    以 JSON 文件持久化的用戶存儲。
    文件格式: {"users": [{...UserRecord...}]}
    """

    def __init__(self, path: Union[str, Path]):
        super().__init__()
        self.path = Path(path)
        self.load()

    def load(self) -> None:
        if not self.path.exists():
            logger.info(f"用戶文件 {self.path} 不存在，使用空用戶列表")
            return
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        users = data.get("users", []) if isinstance(data, dict) else []
        loaded: Dict[str, UserRecord] = {}
        for u in users:
            if isinstance(u, dict) and u.get("username"):
                record = UserRecord.from_dict(u)
                loaded[record.username] = record
        self._users = loaded
        logger.debug(f"從 {self.path} 加載了 {len(loaded)} 個用戶")

    def create(self, username: str, email: str, full_name: str, password: str) -> Identity:
        record = UserRecord(
            username=username,
            email=email,
            full_name=full_name,
            password_hash=hash_password(password),
        )
        with self._lock:
            self._check_unique(username, email)
            self._users[username] = record
            try:
                self._save()
            except OSError:
                del self._users[username]
                raise
        logger.info(f"用戶 {username} 已保存到 {self.path}")
        return record.identity()

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if self.path.exists():
            bak = str(self.path) + ".bak"
            try:
                shutil.copy2(self.path, bak)
            except OSError as e:
                logger.warning("Failed to create backup %s: %s", bak, e)

        payload = {"users": [asdict(u) for u in self._users.values()]}
        tmp = str(self.path) + ".tmp"
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=2)
            f.write("\n")
        os.replace(tmp, self.path)
