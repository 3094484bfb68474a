"""phantom delete 命令的单元测试"""

import subprocess

from phantom.cli.utils import EXIT_GENERAL_ERROR, EXIT_NOT_FOUND, EXIT_VALIDATION_ERROR


def worktree_dir(repo, name):
    return repo / ".git" / "phantom" / "worktrees" / name


def branch_exists(repo, branch):
    return subprocess.run(
        ["git", "show-ref", "--verify", "--quiet", f"refs/heads/{branch}"], cwd=repo
    ).returncode == 0


class TestDeleteCommand:
    """删除命令测试类"""

    def test_delete(self, git_repo, run):
        run("create", "feature")

        result = run("delete", "feature")

        assert result.exit_code == 0
        assert "Deleted worktree 'feature' and its branch 'feature'" in result.output
        assert not worktree_dir(git_repo, "feature").exists()

    def test_delete_missing(self, git_repo, run):
        result = run("delete", "ghost")

        assert result.exit_code == EXIT_NOT_FOUND
        assert "Worktree 'ghost' not found" in result.output

    def test_repeated_name_reports_both_attempts(self, git_repo, run):
        run("create", "feature")

        result = run("delete", "feature", "feature")

        assert result.exit_code == EXIT_NOT_FOUND
        assert "Deleted worktree 'feature'" in result.output
        assert "Worktree 'feature' not found" in result.output
        assert not worktree_dir(git_repo, "feature").exists()

    def test_dirty_worktree_requires_force(self, git_repo, run):
        run("create", "feature")
        (worktree_dir(git_repo, "feature") / "dirty.txt").write_text("x")

        result = run("delete", "feature")
        assert result.exit_code == EXIT_GENERAL_ERROR
        assert "uncommitted changes" in result.output

        result = run("delete", "feature", "--force")
        assert result.exit_code == 0

    def test_keep_branch_flag(self, git_repo, run):
        run("create", "feature")

        result = run("delete", "feature", "--keep-branch")

        assert result.exit_code == 0
        assert branch_exists(git_repo, "feature")

    def test_keep_branch_preference(self, git_repo, run):
        run("preferences", "set", "keepBranch", "true")
        run("create", "feature")

        assert run("delete", "feature").exit_code == 0
        assert branch_exists(git_repo, "feature")

    def test_batch_reports_each_name(self, git_repo, run):
        run("create", "a")
        run("create", "b")
        (worktree_dir(git_repo, "a") / "dirty.txt").write_text("x")

        result = run("delete", "a", "b")

        assert result.exit_code == EXIT_GENERAL_ERROR
        assert "Worktree 'a' has uncommitted changes" in result.output
        assert "Deleted worktree 'b'" in result.output
        assert worktree_dir(git_repo, "a").exists()
        assert not worktree_dir(git_repo, "b").exists()

    def test_current(self, git_repo, run, monkeypatch):
        run("create", "feature")
        monkeypatch.chdir(worktree_dir(git_repo, "feature"))

        result = run("delete", "--current")

        assert result.exit_code == 0
        assert not worktree_dir(git_repo, "feature").exists()

    def test_current_outside_worktree(self, git_repo, run):
        result = run("delete", "--current")

        assert result.exit_code == EXIT_VALIDATION_ERROR
        assert "Not in a worktree directory" in result.output

    def test_no_names(self, git_repo, run):
        assert run("delete").exit_code == EXIT_VALIDATION_ERROR
