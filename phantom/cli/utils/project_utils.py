"""仓库定位工具

从当前目录找到仓库根目录，并为命令构造运行上下文。
"""

from pathlib import Path
from typing import Optional

import click

from phantom.cli.utils.formatting import FormatterConfig, OutputFormatter
from phantom.core.context import Context, create_context
from phantom.core.exceptions import GitException, GitOperationFailed
from phantom.core.git_client import GitClient


class RepositoryNotFoundError(GitException):
    """当前目录不在 git 仓库中"""

    def __init__(self, start_path: Path):
        self.start_path = start_path
        super().__init__(
            "fatal: not a git repository (or any of the parent directories)",
            details=f"searched from: {start_path}",
        )


def find_repo_root(start_path: Optional[Path] = None) -> Path:
    """查找仓库根目录

    在附加 worktree 中调用时返回主工作区根目录；bare 仓库返回 git 目录。

    Raises:
        RepositoryNotFoundError: 不在 git 仓库中
    """
    start_path = Path(start_path) if start_path else Path.cwd()
    try:
        return GitClient(start_path).get_repo_root(start_path)
    except GitOperationFailed as e:
        raise RepositoryNotFoundError(start_path) from e


def load_context(start_path: Optional[Path] = None) -> Context:
    """定位仓库并加载配置与偏好设置

    Raises:
        RepositoryNotFoundError: 不在 git 仓库中
        ConfigException: 配置文件无效
    """
    return create_context(find_repo_root(start_path)).unwrap()


def get_formatter() -> OutputFormatter:
    """按全局 --no-color 选项构造格式化器"""
    ctx = click.get_current_context(silent=True)
    no_color = False
    if ctx is not None and isinstance(ctx.find_root().obj, dict):
        no_color = ctx.find_root().obj.get("no_color", False)
    return OutputFormatter(FormatterConfig(no_color=no_color))
