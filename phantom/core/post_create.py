"""Post-create 执行器

新 worktree 创建后，从主工作区复制配置的文件（支持 glob），
然后在 worktree 中依次执行配置的命令。所有结果都记录在返回值里，不抛出异常。
"""

import shutil
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from phantom.core.data_structures import CommandFailure, PostCreateConfig, PostCreateOutcome
from phantom.core.exceptions import ProcessSpawnError
from phantom.core.logger import get_logger
from phantom.core.process import run_shell_command

logger = get_logger("post_create")

GLOB_CHARS = set("*?[")

CommandRunner = Callable[[str, Path], int]


def is_glob_pattern(pattern: str) -> bool:
    return any(ch in GLOB_CHARS for ch in pattern)


def expand_copy_patterns(source_root: Path, patterns: Iterable[str]) -> List[str]:
    """把 copyFiles 中的条目展开为相对路径列表

    字面存在的文件优先于 glob 解释；glob 只匹配文件并跳过 .git；
    结果按声明顺序去重。没有匹配的非 glob 条目原样保留，由复制阶段记为跳过。
    """
    resolved: List[str] = []
    seen = set()

    for pattern in patterns:
        if not is_glob_pattern(pattern) or (source_root / pattern).is_file():
            matches = [pattern]
        else:
            try:
                matches = sorted(
                    path.relative_to(source_root).as_posix()
                    for path in source_root.glob(pattern)
                    if path.is_file() and ".git" not in path.relative_to(source_root).parts
                )
            except (ValueError, NotImplementedError) as e:
                logger.warning("Invalid copy pattern", pattern=pattern, error=str(e))
                matches = [pattern]
            if not matches:
                logger.debug("Glob pattern matched nothing", pattern=pattern)

        for match in matches:
            if match not in seen:
                seen.add(match)
                resolved.append(match)

    return resolved


def _escapes_root(relative: str) -> bool:
    path = Path(relative)
    return path.is_absolute() or ".." in path.parts


class PostCreateRunner:
    """Post-create 执行器"""

    def __init__(self, source_root: Path, command_runner: Optional[CommandRunner] = None):
        """初始化执行器

        Args:
            source_root: 复制源（主工作区根目录）
            command_runner: 执行单条命令并返回退出码，默认使用用户 shell
        """
        self.source_root = Path(source_root)
        self.command_runner = command_runner or (lambda command, cwd: run_shell_command(command, cwd))

    def copy_files(self, worktree_path: Path, patterns: Iterable[str], outcome: PostCreateOutcome) -> None:
        """复制文件到 worktree，结果写入 outcome"""
        for relative in expand_copy_patterns(self.source_root, patterns):
            source = self.source_root / relative
            target = Path(worktree_path) / relative

            if _escapes_root(relative) or not source.is_file():
                logger.warning("Copy source not found", file=relative, source=str(source))
                outcome.skipped_files.append(relative)
                continue

            try:
                target.parent.mkdir(parents=True, exist_ok=True)
                shutil.copy2(source, target)
            except OSError as e:
                logger.error("Failed to copy file", file=relative, target=str(target), error=str(e))
                if outcome.copy_error is None:
                    outcome.copy_error = f"Failed to copy {relative}: {e}"
                continue

            logger.info("File copied", file=relative, target=str(target))
            outcome.copied_files.append(relative)

    def run_commands(self, worktree_path: Path, commands: Iterable[str], outcome: PostCreateOutcome) -> None:
        """依次执行命令，第一个失败的命令之后不再执行"""
        for command in commands:
            logger.info("Executing post-create command", command=command, cwd=str(worktree_path))
            try:
                exit_code = self.command_runner(command, Path(worktree_path))
            except ProcessSpawnError as e:
                logger.error("Post-create command could not start", command=command, error=e.message)
                outcome.command_error = CommandFailure(command=command, exit_code=127)
                return

            if exit_code != 0:
                logger.warning("Post-create command failed", command=command, exit_code=exit_code)
                outcome.command_error = CommandFailure(command=command, exit_code=exit_code)
                return

            outcome.executed_commands.append(command)

    def run(
        self,
        worktree_path: Path,
        post_create: PostCreateConfig,
        extra_copy_files: Optional[Iterable[str]] = None,
    ) -> PostCreateOutcome:
        """执行 post-create 动作

        Args:
            worktree_path: 目标 worktree
            post_create: 配置的 copyFiles 与 commands
            extra_copy_files: 调用方额外指定的文件，先于配置的文件复制

        Returns:
            PostCreateOutcome
        """
        outcome = PostCreateOutcome()
        patterns = list(extra_copy_files or []) + list(post_create.copy_files)

        if patterns:
            self.copy_files(worktree_path, patterns, outcome)

        if post_create.commands:
            self.run_commands(worktree_path, post_create.commands, outcome)

        logger.info(
            "Post-create finished",
            worktree=str(worktree_path),
            copied=len(outcome.copied_files),
            skipped=len(outcome.skipped_files),
            commands=len(outcome.executed_commands),
            failed=outcome.has_failures,
        )
        return outcome
