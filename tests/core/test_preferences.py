"""偏好设置单元测试"""

import pytest
from unittest.mock import Mock

from phantom.core.exceptions import UnknownPreference, ValidationFailure
from phantom.core.git_client import GitClient, GitResult
from phantom.core.preferences import (
    GitConfigStore,
    InMemoryStore,
    PreferencesStore,
    normalize_key,
    parse_entries,
)


class TestParseEntries:
    """测试 NUL 分隔记录的解析"""

    def test_empty_output(self):
        """测试空输出返回空偏好设置"""
        assert parse_entries("").to_dict() == {}

    def test_last_occurrence_wins(self):
        """测试同名键以最后一次出现为准"""
        raw = "phantom.editor\nvim\0phantom.editor\ncode\0"

        assert parse_entries(raw).to_dict() == {"editor": "code"}

    def test_unknown_keys_ignored(self):
        """测试忽略未知键"""
        raw = "phantom.editor\nvim\0phantom.colour\nblue\0"

        assert parse_entries(raw).to_dict() == {"editor": "vim"}

    def test_lowercased_keys_map_to_canonical(self):
        """测试 git 输出的小写键名映射到规范键名"""
        raw = "phantom.worktreesdirectory\n../trees\0phantom.keepbranch\ntrue\0"

        preferences = parse_entries(raw)

        assert preferences.worktreesDirectory == "../trees"
        assert preferences.keep_branch is True

    def test_values_may_contain_newlines(self):
        """测试值中可以包含换行"""
        raw = "phantom.ai\nclaude\n--model x\0"

        assert parse_entries(raw).ai == "claude\n--model x"


class TestNormalizeKey:
    """测试键名规范化"""

    def test_prefix_accepted(self):
        assert normalize_key("phantom.editor") == "editor"

    def test_case_insensitive(self):
        assert normalize_key("KEEPBRANCH") == "keepBranch"

    def test_unknown_key(self):
        with pytest.raises(UnknownPreference) as exc_info:
            normalize_key("theme")

        assert "Unknown preference 'theme'" in exc_info.value.message


class TestPreferencesStore:
    """测试偏好设置读写"""

    def test_load_from_log_with_repeated_keys(self):
        """测试日志式存储中重复键取最后一次"""
        store = PreferencesStore(InMemoryStore([("phantom.editor", "vim"), ("phantom.editor", "code")]))

        assert store.load_preferences().to_dict() == {"editor": "code"}

    def test_set_then_get(self):
        """测试写入后立即可读"""
        store = PreferencesStore(InMemoryStore())

        assert store.set_preference("editor", "nvim") == "editor"
        assert store.get_preference("editor") == "nvim"

        store.set_preference("phantom.editor", "code")
        assert store.get_preference("editor") == "code"

    def test_get_unset_returns_none(self):
        store = PreferencesStore(InMemoryStore())

        assert store.get_preference("ai") is None

    def test_set_empty_value_rejected(self):
        store = PreferencesStore(InMemoryStore())

        with pytest.raises(ValidationFailure):
            store.set_preference("editor", "")

    def test_set_unknown_key_rejected(self):
        store = PreferencesStore(InMemoryStore())

        with pytest.raises(UnknownPreference):
            store.set_preference("colour", "blue")

    def test_remove(self):
        """测试删除偏好设置"""
        memory = InMemoryStore([("phantom.editor", "vim")])
        store = PreferencesStore(memory)

        assert store.remove_preference("editor") is True
        assert store.get_preference("editor") is None
        assert store.remove_preference("editor") is False


class TestGitConfigStore:
    """测试基于 git config 的存储"""

    def test_list_entries_uses_null_regexp(self):
        client = Mock(spec=GitClient)
        client.config_get_regexp.return_value = "phantom.editor\nvim\0"

        assert GitConfigStore(client).list_entries() == "phantom.editor\nvim\0"
        client.config_get_regexp.assert_called_once_with(r"^phantom\.", scope="global")

    def test_no_matching_keys(self):
        """测试 git config 退出码 1（没有匹配项）"""
        client = GitClient()
        client.execute = Mock(return_value=GitResult(stdout="", stderr="", exit_code=1))

        assert PreferencesStore(GitConfigStore(client)).load_preferences().to_dict() == {}

    def test_round_trip_through_git(self, tmp_path, monkeypatch):
        """测试通过真实 git 全局配置读写"""
        monkeypatch.setenv("HOME", str(tmp_path))
        monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(tmp_path / ".gitconfig"))
        store = PreferencesStore(GitConfigStore(GitClient(tmp_path)))

        store.set_preference("worktreesDirectory", "../trees")
        store.set_preference("editor", "vim")

        preferences = store.load_preferences()
        assert preferences.worktreesDirectory == "../trees"
        assert preferences.editor == "vim"

        assert store.remove_preference("editor") is True
        assert store.get_preference("editor") is None
