"""phantom create / attach 命令的单元测试"""

import subprocess

from phantom.cli.commands.create import CreateCommand
from phantom.cli.utils import EXIT_NOT_FOUND, EXIT_VALIDATION_ERROR, OutputFormatter


def worktree_dir(repo, name):
    return repo / ".git" / "phantom" / "worktrees" / name


class TestCreateCommand:
    """创建命令测试类"""

    def test_create(self, git_repo, run):
        result = run("create", "feature")

        assert result.exit_code == 0
        assert "Created worktree 'feature'" in result.output
        assert worktree_dir(git_repo, "feature").is_dir()

    def test_create_existing(self, git_repo, run):
        run("create", "feature")

        result = run("create", "feature")

        assert result.exit_code == 1
        assert "Worktree 'feature' already exists" in result.output

    def test_invalid_name(self, git_repo, run):
        result = run("create", "bad/name")

        assert result.exit_code == EXIT_VALIDATION_ERROR
        assert "path separators" in result.output

    def test_copy_file_option(self, git_repo, run):
        (git_repo / ".env").write_text("X=1\n")

        result = run("create", "feature", "--copy-file", ".env", "--copy-file", "nope.txt")

        assert result.exit_code == 0
        assert "Copied .env" in result.output
        assert "Skipped nope.txt" in result.output
        assert (worktree_dir(git_repo, "feature") / ".env").exists()

    def test_post_create_failure_still_succeeds(self, git_repo, run, monkeypatch):
        monkeypatch.setenv("SHELL", "/bin/sh")
        (git_repo / "phantom.config.yaml").write_text("postCreate:\n  commands:\n    - exit 4\n")

        result = run("create", "feature")

        assert result.exit_code == 0
        assert "Command failed with exit code 4: exit 4" in result.output

    def test_exec_option_returns_command_exit_code(self, git_repo, run, monkeypatch):
        monkeypatch.setenv("SHELL", "/bin/sh")

        result = run("create", "feature", "--exec", "touch made.txt; exit 5")

        assert result.exit_code == 5
        assert (worktree_dir(git_repo, "feature") / "made.txt").exists()

    def test_invalid_config(self, git_repo, run):
        (git_repo / "phantom.config.yaml").write_text("postCreate:\n  copyFiles: 1\n")

        result = run("create", "feature")

        assert result.exit_code == EXIT_VALIDATION_ERROR
        assert "postCreate.copyFiles" in result.output

    def test_command_class(self, git_repo):
        assert CreateCommand(git_repo, OutputFormatter()).execute("direct") == 0
        assert worktree_dir(git_repo, "direct").is_dir()


class TestAttachCommand:
    """附加命令测试类"""

    def test_attach_existing_branch(self, git_repo, run):
        subprocess.run(["git", "branch", "review"], cwd=git_repo, check=True)

        result = run("attach", "review")

        assert result.exit_code == 0
        assert "Attached worktree 'review'" in result.output

    def test_attach_missing_branch(self, git_repo, run):
        result = run("attach", "ghost")

        assert result.exit_code == EXIT_NOT_FOUND
        assert "Branch 'ghost' not found" in result.output
