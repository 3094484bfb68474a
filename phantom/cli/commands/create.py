"""phantom create 命令实现

创建新的 worktree 和分支，并执行 post-create 动作。
"""

import sys
from pathlib import Path
from typing import Optional, Sequence

import click

from phantom.cli.utils import OutputFormatter, abort, get_formatter, load_context
from phantom.core.data_structures import CreateOutcome
from phantom.core.exceptions import PhantomError
from phantom.core.logger import get_logger
from phantom.core.process import user_shell
from phantom.core.worktree_manager import WorktreeManager

logger = get_logger("create_command")


def report_post_create(outcome: CreateOutcome, formatter: OutputFormatter) -> None:
    """输出 post-create 的复制与命令执行结果"""
    for copied in outcome.copied_files:
        click.echo(formatter.info(f"Copied {copied}"))
    for skipped in outcome.skipped_files:
        click.echo(formatter.warning(f"Skipped {skipped} (not found)"), err=True)
    if outcome.copy_error:
        click.echo(formatter.warning(outcome.copy_error), err=True)
    for command in outcome.executed_commands:
        click.echo(formatter.info(f"Executed: {command}"))
    if outcome.command_error:
        click.echo(formatter.warning(str(outcome.command_error)), err=True)


class CreateCommand:
    """创建命令处理器"""

    def __init__(self, project_path: Optional[Path] = None, formatter: Optional[OutputFormatter] = None):
        self.project_path = Path(project_path) if project_path else Path.cwd()
        self.formatter = formatter or OutputFormatter()

    def execute(
        self,
        name: str,
        branch: Optional[str] = None,
        base: Optional[str] = None,
        copy_files: Sequence[str] = (),
        exec_command: Optional[str] = None,
    ) -> int:
        """执行创建命令

        Returns:
            进程退出码；指定 --exec 时为该命令的退出码

        Raises:
            PhantomError: 创建失败时抛出
        """
        logger.info("Executing create command", name=name, branch=branch, base=base)

        context = load_context(self.project_path)
        manager = WorktreeManager.from_context(context)

        outcome = manager.create(name, branch=branch, commitish=base, copy_files=list(copy_files)).unwrap()
        click.echo(self.formatter.success(outcome.message))
        report_post_create(outcome, self.formatter)

        if not exec_command:
            return 0

        click.echo(self.formatter.info(f"Executing: {exec_command}"))
        executed = manager.exec(name, [user_shell(), "-c", exec_command]).unwrap()
        return executed.exit_code


@click.command()
@click.argument("name")
@click.option("-b", "--branch", help="新分支名（默认与 NAME 相同）")
@click.option("--base", help="新分支的起点（分支、标签或提交）")
@click.option("--copy-file", "copy_files", multiple=True, help="额外复制到新 worktree 的文件，可重复")
@click.option("-x", "--exec", "exec_command", help="创建完成后在新 worktree 中执行的命令")
def create(name: str, branch: Optional[str], base: Optional[str], copy_files, exec_command: Optional[str]) -> None:
    """创建新的 worktree 和分支

    \b
    使用示例:
    phantom create feature-x
    phantom create feature-x --base origin/main
    phantom create feature-x --copy-file .env --exec "npm install"
    """
    formatter = get_formatter()
    try:
        exit_code = CreateCommand(formatter=formatter).execute(
            name,
            branch=branch,
            base=base,
            copy_files=copy_files,
            exec_command=exec_command,
        )
    except PhantomError as e:
        abort(e, formatter)

    if exit_code:
        sys.exit(exit_code)
