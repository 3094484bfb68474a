"""phantom exec / shell 命令实现

在指定 worktree 中执行命令或启动交互式 shell，进程退出码即命令的退出码。
"""

import sys
from pathlib import Path
from typing import Optional, Sequence

import click

from phantom.cli.utils import abort, get_formatter, load_context
from phantom.core.exceptions import PhantomError
from phantom.core.logger import get_logger
from phantom.core.worktree_manager import WorktreeManager

logger = get_logger("exec_command")


class ExecCommand:
    """执行命令处理器"""

    def __init__(self, project_path: Optional[Path] = None):
        self.project_path = Path(project_path) if project_path else Path.cwd()

    def _manager(self) -> WorktreeManager:
        return WorktreeManager.from_context(load_context(self.project_path))

    def execute(self, name: str, command: Sequence[str], interactive: bool = False) -> int:
        """在 worktree 中执行命令，返回其退出码"""
        logger.info("Executing exec command", name=name, command=list(command), interactive=interactive)
        return self._manager().exec(name, command, interactive=interactive).unwrap().exit_code

    def shell(self, name: str) -> int:
        """在 worktree 中启动 $SHELL，返回其退出码"""
        logger.info("Opening shell", name=name)
        return self._manager().shell(name).unwrap().exit_code


@click.command(name="exec", context_settings={"ignore_unknown_options": True})
@click.option("-i", "--interactive", is_flag=True, help="连接到当前终端的标准输入")
@click.argument("name")
@click.argument("command", nargs=-1, required=True, type=click.UNPROCESSED)
def exec_command(interactive: bool, name: str, command) -> None:
    """在 worktree 中执行命令

    \b
    使用示例:
    phantom exec feature-x npm test
    phantom exec feature-x -- git status --short
    """
    try:
        exit_code = ExecCommand().execute(name, command, interactive=interactive)
    except PhantomError as e:
        abort(e, get_formatter())
    sys.exit(exit_code)


@click.command()
@click.argument("name")
def shell(name: str) -> None:
    """在 worktree 中打开交互式 shell

    \b
    使用示例:
    phantom shell feature-x
    """
    try:
        exit_code = ExecCommand().shell(name)
    except PhantomError as e:
        abort(e, get_formatter())
    sys.exit(exit_code)
