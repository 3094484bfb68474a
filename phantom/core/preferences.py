"""偏好设置存储

偏好设置以 `phantom.<key>` 的形式保存在 git 全局配置中。
底层存储通过 KeyValueStore 注入，测试中可替换为 InMemoryStore。
"""

from typing import List, Optional, Protocol, Tuple

from phantom.core.data_structures import PREFERENCE_KEYS, Preferences
from phantom.core.exceptions import UnknownPreference, ValidationFailure
from phantom.core.git_client import GitClient
from phantom.core.logger import get_logger

logger = get_logger("preferences")

PREFIX = "phantom."


class KeyValueStore(Protocol):
    """偏好设置的底层存储能力"""

    def list_entries(self) -> str:
        """返回所有 phantom.* 条目，格式同 `git config --null --get-regexp`"""
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def unset(self, key: str) -> bool:
        ...


class GitConfigStore:
    """基于 `git config --global` 的存储"""

    def __init__(self, git_client: Optional[GitClient] = None, scope: str = "global"):
        self.git_client = git_client or GitClient()
        self.scope = scope

    def list_entries(self) -> str:
        return self.git_client.config_get_regexp(r"^phantom\.", scope=self.scope)

    def set(self, key: str, value: str) -> None:
        self.git_client.config_set(key, value, scope=self.scope)

    def unset(self, key: str) -> bool:
        return self.git_client.config_unset(key, scope=self.scope)


class InMemoryStore:
    """内存存储，保留写入顺序，行为与 git 配置文件一致（同名键可重复出现）"""

    def __init__(self, entries: Optional[List[Tuple[str, str]]] = None):
        self.entries: List[Tuple[str, str]] = list(entries or [])

    def list_entries(self) -> str:
        return "".join(
            f"{key}\n{value}\0" for key, value in self.entries if key.startswith(PREFIX)
        )

    def set(self, key: str, value: str) -> None:
        # git config <key> <value> 替换唯一的已有值
        self.entries = [(k, v) for k, v in self.entries if k != key]
        self.entries.append((key, value))

    def unset(self, key: str) -> bool:
        before = len(self.entries)
        self.entries = [(k, v) for k, v in self.entries if k != key]
        return len(self.entries) != before


def parse_entries(raw: str) -> Preferences:
    """解析 NUL 分隔的 `key\\nvalue` 记录

    只保留已知键；同一个键出现多次时以最后一次为准。
    """
    preferences = Preferences()
    if not raw:
        return preferences

    for record in raw.split("\0"):
        if not record:
            continue
        full_key, _, value = record.partition("\n")
        # git 配置的节名与键名不区分大小写，输出统一为小写
        if not full_key.lower().startswith(PREFIX):
            continue
        candidate = full_key[len(PREFIX):]
        key = _canonical_key(candidate)
        if key is None:
            logger.debug("Ignoring unknown preference", key=full_key)
            continue
        setattr(preferences, key, value)

    return preferences


def _canonical_key(candidate: str) -> Optional[str]:
    for key in PREFERENCE_KEYS:
        if key.lower() == candidate.lower():
            return key
    return None


def normalize_key(key: str) -> str:
    """接受 `editor` 与 `phantom.editor` 两种写法，返回规范键名

    Raises:
        UnknownPreference: 键不在支持列表中
    """
    candidate = key[len(PREFIX):] if key.startswith(PREFIX) else key
    canonical = _canonical_key(candidate)
    if canonical is None:
        raise UnknownPreference(
            f"Unknown preference '{key}'. Supported keys: {', '.join(PREFERENCE_KEYS)}"
        )
    return canonical


class PreferencesStore:
    """偏好设置读写"""

    def __init__(self, store: Optional[KeyValueStore] = None):
        self.store = store if store is not None else GitConfigStore()

    def load_preferences(self) -> Preferences:
        """读取全部偏好设置；底层没有任何条目时返回空对象"""
        preferences = parse_entries(self.store.list_entries())
        logger.debug("Preferences loaded", keys=list(preferences.to_dict()))
        return preferences

    def get_preference(self, key: str) -> Optional[str]:
        return self.load_preferences().get(normalize_key(key))

    def set_preference(self, key: str, value: str) -> str:
        """写入偏好设置

        Returns:
            规范键名

        Raises:
            UnknownPreference: 键不在支持列表中
            ValidationFailure: value 为空
        """
        canonical = normalize_key(key)
        if not value:
            raise ValidationFailure(f"Preference '{canonical}' requires a value")
        self.store.set(f"{PREFIX}{canonical}", value)
        logger.info("Preference set", key=canonical)
        return canonical

    def remove_preference(self, key: str) -> bool:
        """删除偏好设置，返回是否确实存在"""
        canonical = normalize_key(key)
        removed = self.store.unset(f"{PREFIX}{canonical}")
        logger.info("Preference removed", key=canonical, existed=removed)
        return removed
