"""Git 操作封装类

提供 git 子命令的统一执行接口。execute() 返回 (stdout, stderr, exit_code)，
非零退出码不会抛出异常，由调用方解释；只有 git 无法启动时才抛出 GitCommandError。
"""

import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from phantom.core.exceptions import GitCommandError, GitOperationFailed
from phantom.core.logger import get_logger


logger = get_logger("git_client")


@dataclass(frozen=True)
class GitResult:
    """一次 git 调用的结果"""
    stdout: str
    stderr: str
    exit_code: int

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


@dataclass
class GitWorktreeEntry:
    """`git worktree list --porcelain` 的一条记录"""
    path: Path
    head: Optional[str] = None
    branch: Optional[str] = None
    is_bare: bool = False
    is_detached: bool = False
    is_locked: bool = False
    is_prunable: bool = False


class GitClient:
    """Git 操作客户端"""

    def __init__(self, repo_path: Optional[Path] = None, git_binary: str = "git"):
        """初始化 GitClient

        Args:
            repo_path: 默认工作目录，默认为当前目录
            git_binary: git 可执行文件
        """
        self.repo_path = Path(repo_path) if repo_path else Path.cwd()
        self.git_binary = git_binary

    def execute(self, args: Sequence[str], cwd: Optional[Path] = None) -> GitResult:
        """运行 git 子命令

        Args:
            args: 子命令及参数（不含 "git"）
            cwd: 工作目录，默认使用 repo_path

        Returns:
            GitResult

        Raises:
            GitCommandError: git 无法启动时抛出
        """
        cwd = cwd or self.repo_path
        cmd = [self.git_binary, *args]

        logger.debug("Running git command", command=" ".join(cmd), cwd=str(cwd))

        try:
            completed = subprocess.run(
                cmd,
                cwd=cwd,
                capture_output=True,
                text=True,
                check=False,
            )
        except (OSError, subprocess.SubprocessError) as e:
            logger.error("Git command error", command=" ".join(cmd), error=str(e))
            raise GitCommandError(f"Failed to execute git command: {e}") from e

        result = GitResult(
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
            exit_code=completed.returncode,
        )
        if result.ok:
            logger.debug("Git command succeeded", output_length=len(result.stdout))
        else:
            logger.debug(
                "Git command returned non-zero",
                command=" ".join(cmd),
                return_code=result.exit_code,
                error=result.stderr.strip(),
            )
        return result

    def run_command(self, args: Sequence[str], cwd: Optional[Path] = None) -> str:
        """运行 git 子命令，失败时抛出异常

        Returns:
            去除首尾空白的 stdout

        Raises:
            GitOperationFailed: 退出码非零时抛出
        """
        result = self.execute(args, cwd=cwd)
        if not result.ok:
            raise GitOperationFailed(" ".join(args[:2]), result.stderr or result.stdout)
        return result.stdout.strip()

    def get_repo_root(self, cwd: Optional[Path] = None) -> Path:
        """获取仓库根路径

        非 bare 仓库返回主工作区根目录；bare 仓库返回其 git 目录。
        在附加 worktree 内调用时同样返回主工作区根目录。
        """
        common_dir = self.run_command(["rev-parse", "--git-common-dir"], cwd=cwd)
        common_path = ((cwd or self.repo_path) / common_dir).resolve()
        is_bare = self.run_command(["rev-parse", "--is-bare-repository"], cwd=cwd) == "true"
        if is_bare or common_path.name != ".git":
            root = common_path
        else:
            root = common_path.parent
        logger.debug("Repository root retrieved", root=str(root), bare=is_bare)
        return root

    def add_worktree(
        self,
        path: Path,
        branch: Optional[str] = None,
        commitish: Optional[str] = None,
        create_branch: bool = True,
    ) -> GitResult:
        """git worktree add

        Args:
            path: worktree 路径
            branch: 分支名；create_branch 为 True 时通过 -b 新建
            commitish: 新分支的起点
            create_branch: 是否新建分支
        """
        args: List[str] = ["worktree", "add", str(path)]
        if create_branch:
            if branch:
                args.extend(["-b", branch])
            if commitish:
                args.append(commitish)
        elif branch:
            args.append(branch)
        return self.execute(args)

    def remove_worktree(self, path: Path, force: bool = False) -> GitResult:
        """git worktree remove [--force] <path>"""
        args = ["worktree", "remove"]
        if force:
            args.append("--force")
        args.append(str(path))
        return self.execute(args)

    def list_worktrees(self) -> List[GitWorktreeEntry]:
        """解析 `git worktree list --porcelain`

        Raises:
            GitOperationFailed: 命令失败时抛出
        """
        output = self.run_command(["worktree", "list", "--porcelain"])
        entries = parse_worktree_porcelain(output)
        logger.debug("Worktree list retrieved", count=len(entries))
        return entries

    def branch_exists(self, branch: str) -> bool:
        """检查本地分支是否存在"""
        result = self.execute(["show-ref", "--verify", "--quiet", f"refs/heads/{branch}"])
        return result.ok

    def delete_branch(self, branch: str, force: bool = True) -> GitResult:
        """git branch -D/-d <branch>"""
        return self.execute(["branch", "-D" if force else "-d", branch])

    def get_status(self, cwd: Path) -> str:
        """git status --porcelain 的输出

        Raises:
            GitOperationFailed: 命令失败时抛出
        """
        result = self.execute(["status", "--porcelain"], cwd=cwd)
        if not result.ok:
            raise GitOperationFailed("status", result.stderr)
        return result.stdout.strip("\n")

    def count_unpushed_commits(self, cwd: Path) -> int:
        """HEAD 领先上游分支的提交数；没有上游时返回 0"""
        upstream = self.execute(
            ["rev-parse", "--abbrev-ref", "--symbolic-full-name", "@{upstream}"], cwd=cwd
        )
        if not upstream.ok:
            return 0

        result = self.execute(["rev-list", "--count", "@{upstream}..HEAD"], cwd=cwd)
        if not result.ok:
            return 0
        try:
            return int(result.stdout.strip() or 0)
        except ValueError:
            logger.debug("Unexpected rev-list output", output=result.stdout)
            return 0

    def config_get_regexp(self, pattern: str, scope: str = "global") -> str:
        """git config --<scope> --null --get-regexp <pattern>

        没有匹配项时（退出码 1）返回空字符串。
        """
        result = self.execute(["config", f"--{scope}", "--null", "--get-regexp", pattern])
        if result.exit_code == 1:
            return ""
        if not result.ok:
            raise GitOperationFailed("config --get-regexp", result.stderr)
        return result.stdout

    def config_set(self, key: str, value: str, scope: str = "global") -> None:
        """git config --<scope> <key> <value>"""
        result = self.execute(["config", f"--{scope}", key, value])
        if not result.ok:
            raise GitOperationFailed("config", result.stderr)

    def config_unset(self, key: str, scope: str = "global") -> bool:
        """git config --<scope> --unset-all <key>

        Returns:
            键存在并被删除返回 True
        """
        result = self.execute(["config", f"--{scope}", "--unset-all", key])
        # 退出码 5 表示键不存在
        if result.exit_code == 5:
            return False
        if not result.ok:
            raise GitOperationFailed("config --unset-all", result.stderr)
        return True


def parse_worktree_porcelain(output: str) -> List[GitWorktreeEntry]:
    """解析 porcelain 格式的 worktree 列表

    记录之间以空行分隔，每条记录以 `worktree <path>` 开头。
    """
    entries: List[GitWorktreeEntry] = []
    current: Optional[GitWorktreeEntry] = None

    for line in output.splitlines():
        if line.startswith("worktree "):
            if current is not None:
                entries.append(current)
            current = GitWorktreeEntry(path=Path(line[len("worktree "):]))
        elif current is None:
            continue
        elif line.startswith("HEAD "):
            current.head = line[len("HEAD "):]
        elif line.startswith("branch "):
            ref = line[len("branch "):]
            current.branch = ref[len("refs/heads/"):] if ref.startswith("refs/heads/") else ref
        elif line == "bare":
            current.is_bare = True
        elif line == "detached":
            current.is_detached = True
        elif line.startswith("locked"):
            current.is_locked = True
        elif line.startswith("prunable"):
            current.is_prunable = True
        elif line == "":
            entries.append(current)
            current = None

    if current is not None:
        entries.append(current)

    return entries
