"""端到端集成测试

测试完整的 phantom 工作流，包括：
- 带 post-create 配置的 worktree 创建
- 列表、定位与命令执行
- 批量删除与分支清理
"""

import json
import subprocess
from pathlib import Path

import pytest
from click.testing import CliRunner

from phantom.cli.main import cli
from phantom.core.git_client import GitClient


class TestEnvironment:
    """测试环境管理工具"""

    def __init__(self, tmp_path: Path):
        self.tmp_path = tmp_path
        self.repo_path = tmp_path / "test_repo"
        self.runner = CliRunner()

    def setup_git_repo(self) -> Path:
        """创建带初始提交和 phantom.config.json 的测试仓库"""
        self.repo_path.mkdir(parents=True, exist_ok=True)
        self.git("init")
        self.git("config", "user.email", "test@example.com")
        self.git("config", "user.name", "Test User")

        (self.repo_path / "README.md").write_text("# Test Repository\n")
        (self.repo_path / "phantom.config.json").write_text(
            '{\n'
            '  "postCreate": {\n'
            '    "copyFiles": [".env"],\n'
            '    "commands": ["echo ready > .phantom-ready"]\n'
            '  }\n'
            '}\n'
        )
        self.git("add", ".")
        self.git("commit", "-m", "Initial commit")

        # .env 不受版本控制，只能通过 copyFiles 带入新 worktree
        (self.repo_path / ".env").write_text("API_KEY=secret\n")
        self.repo_path = self.repo_path.resolve()
        return self.repo_path

    def git(self, *args: str) -> str:
        completed = subprocess.run(
            ["git", *args], cwd=self.repo_path, capture_output=True, text=True, check=True
        )
        return completed.stdout.strip()

    def phantom(self, *args: str):
        return self.runner.invoke(cli, ["--no-color", *args], catch_exceptions=False)


@pytest.fixture
def env(tmp_path, monkeypatch):
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(home / ".gitconfig"))
    monkeypatch.setenv("SHELL", "/bin/sh")
    monkeypatch.delenv("PHANTOM_WORKTREES_DIRECTORY", raising=False)

    environment = TestEnvironment(tmp_path)
    monkeypatch.chdir(environment.setup_git_repo())
    return environment


class TestEndToEndWorkflow:
    """端到端工作流测试"""

    def test_complete_workflow(self, env):
        """测试创建、使用和删除 worktree 的完整流程"""
        result = env.phantom("create", "feature")
        assert result.exit_code == 0, result.output

        path = Path(env.phantom("where", "feature").output.strip())
        assert (path / ".env").read_text() == "API_KEY=secret\n"
        assert (path / ".phantom-ready").exists()

        listed = json.loads(env.phantom("list", "--no-default", "--format", "json").output)
        assert [item["name"] for item in listed] == ["feature"]
        # .phantom-ready 未被跟踪，worktree 不再干净
        assert listed[0]["isClean"] is False

        assert env.phantom("exec", "feature", "git", "add", ".").exit_code == 0
        assert env.phantom("exec", "feature", "git", "commit", "-qm", "setup").exit_code == 0

        result = env.phantom("delete", "feature")
        assert result.exit_code == 0, result.output
        assert not path.exists()
        assert len(GitClient(env.repo_path).list_worktrees()) == 1

    def test_multiple_worktrees(self, env):
        for name in ("one", "two", "three"):
            assert env.phantom("create", name).exit_code == 0

        names = env.phantom("list", "--no-default", "--names").output.split()
        assert sorted(names) == ["one", "three", "two"]

        result = env.phantom("delete", "one", "two", "three", "--force")
        assert result.exit_code == 0
        assert env.phantom("list", "--no-default").output.strip() == "No worktrees found"
        assert env.git("branch", "--list", "one") == ""

    def test_error_handling(self, env):
        assert env.phantom("where", "missing").exit_code == 2
        assert env.phantom("create", "../escape").exit_code == 3
        assert env.phantom("attach", "no-such-branch").exit_code == 2
