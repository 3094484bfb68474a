"""Worktree 路径解析测试"""

from pathlib import Path

import pytest

from phantom.core.data_structures import WorktreeConfig
from phantom.core.exceptions import InvalidWorktreeName
from phantom.core.paths import (
    get_worktrees_directory,
    validate_worktree_name,
    worktree_name_from_path,
    worktree_path,
)

ROOT = Path("/repo")


class TestWorktreesDirectory:
    """测试基础目录计算"""

    def test_default_directory(self):
        assert get_worktrees_directory(ROOT) == ROOT / ".git" / "phantom" / "worktrees"

    def test_relative_override(self):
        assert get_worktrees_directory(ROOT, "../trees") == ROOT / "../trees"

    def test_absolute_override(self):
        assert get_worktrees_directory(ROOT, "/tmp/trees") == Path("/tmp/trees")


class TestValidateName:
    """测试名称校验"""

    @pytest.mark.parametrize("name", ["feature", "fix-123", "v1.2", "my_branch"])
    def test_valid_names(self, name):
        assert validate_worktree_name(name).is_ok

    @pytest.mark.parametrize(
        "name, fragment",
        [
            ("", "cannot be empty"),
            ("   ", "cannot be empty"),
            ("feature/x", "path separators"),
            ("a\\b", "path separators"),
            (".", "consecutive dots"),
            ("..", "consecutive dots"),
            ("a..b", "consecutive dots"),
            ("bad name", "can only contain"),
        ],
    )
    def test_invalid_names(self, name, fragment):
        result = validate_worktree_name(name)

        assert result.is_err
        assert fragment in result.message


class TestWorktreePath:
    """测试 worktree 路径"""

    def test_default_location(self):
        assert worktree_path(ROOT, WorktreeConfig(), "feature") == ROOT / ".git/phantom/worktrees/feature"

    def test_config_directory(self):
        config = WorktreeConfig(worktrees_directory="../trees")

        assert worktree_path(ROOT, config, "feature") == ROOT / "../trees/feature"

    def test_override_beats_config(self):
        config = WorktreeConfig(worktrees_directory="../trees")

        assert worktree_path(ROOT, config, "x", override="/elsewhere") == Path("/elsewhere/x")

    def test_unsafe_name_raises(self):
        with pytest.raises(InvalidWorktreeName):
            worktree_path(ROOT, None, "../escape")

    def test_distinct_names_give_distinct_paths(self):
        """测试不同名称得到不同路径"""
        names = ["a", "b", "a-b", "a.b", "A", "a_b", "ab"]
        paths = {worktree_path(ROOT, WorktreeConfig(), name) for name in names}

        assert len(paths) == len(names)


class TestNameFromPath:
    """测试反向查找"""

    def test_worktree_root(self, tmp_path):
        base = get_worktrees_directory(tmp_path)
        (base / "feature").mkdir(parents=True)

        assert worktree_name_from_path(tmp_path, None, base / "feature") == "feature"

    def test_nested_directory(self, tmp_path):
        nested = get_worktrees_directory(tmp_path) / "feature" / "src" / "pkg"
        nested.mkdir(parents=True)

        assert worktree_name_from_path(tmp_path, None, nested) == "feature"

    def test_outside_base_directory(self, tmp_path):
        assert worktree_name_from_path(tmp_path, None, tmp_path) is None

    def test_base_directory_itself(self, tmp_path):
        base = get_worktrees_directory(tmp_path)
        base.mkdir(parents=True)

        assert worktree_name_from_path(tmp_path, None, base) is None

    def test_custom_directory(self, tmp_path):
        config = WorktreeConfig(worktrees_directory="trees")
        (tmp_path / "trees" / "x").mkdir(parents=True)

        assert worktree_name_from_path(tmp_path, config, tmp_path / "trees" / "x") == "x"
