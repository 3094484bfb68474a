"""CLI 测试公共 fixture"""

import subprocess

import pytest
from click.testing import CliRunner

from phantom.cli.main import cli


@pytest.fixture
def git_repo(tmp_path, monkeypatch):
    """创建临时 git 仓库并切换到其中，隔离全局 git 配置"""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(home / ".gitconfig"))
    monkeypatch.delenv("PHANTOM_WORKTREES_DIRECTORY", raising=False)

    repo_path = tmp_path / "repo"
    repo_path.mkdir()
    for args in (
        ["init"],
        ["config", "user.email", "test@example.com"],
        ["config", "user.name", "Test User"],
    ):
        subprocess.run(["git", *args], cwd=repo_path, capture_output=True, check=True)
    (repo_path / "README.md").write_text("# Test\n")
    subprocess.run(["git", "add", "."], cwd=repo_path, capture_output=True, check=True)
    subprocess.run(["git", "commit", "-m", "Initial commit"], cwd=repo_path, capture_output=True, check=True)

    repo_path = repo_path.resolve()
    monkeypatch.chdir(repo_path)
    return repo_path


@pytest.fixture
def run():
    """在 CLI 上执行命令"""
    runner = CliRunner()

    def invoke(*args):
        return runner.invoke(cli, ["--no-color", *args], catch_exceptions=False)

    return invoke
