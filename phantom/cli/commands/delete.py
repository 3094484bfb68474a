"""phantom delete 命令实现

删除一个或多个 worktree，默认同时删除对应分支。
"""

import sys
from pathlib import Path
from typing import Optional, Sequence

import click

from phantom.cli.utils import OutputFormatter, abort, exit_code_for, get_formatter, load_context
from phantom.core.exceptions import PhantomError, ValidationFailure
from phantom.core.logger import get_logger
from phantom.core.worktree_manager import WorktreeManager

logger = get_logger("delete_command")


class DeleteCommand:
    """删除命令处理器

    多个名称按给定顺序依次删除，单个失败不会中断其余名称。
    """

    def __init__(self, project_path: Optional[Path] = None, formatter: Optional[OutputFormatter] = None):
        self.project_path = Path(project_path) if project_path else Path.cwd()
        self.formatter = formatter or OutputFormatter()

    def resolve_names(self, manager: WorktreeManager, names: Sequence[str], current: bool) -> list:
        """确定要删除的 worktree 名称

        Raises:
            ValidationFailure: 名称与 --current 同时给出或都未给出，或当前目录不在 worktree 中
        """
        if current and names:
            raise ValidationFailure("Cannot specify worktree names together with --current")
        if not current:
            if not names:
                raise ValidationFailure("Please provide a worktree name to delete or use --current")
            return list(names)

        name = manager.current_worktree(self.project_path)
        if name is None:
            raise ValidationFailure("Not in a worktree directory. The --current option can only be used inside a worktree")
        return [name]

    def execute(
        self,
        names: Sequence[str],
        force: bool = False,
        keep_branch: bool = False,
        current: bool = False,
    ) -> int:
        """执行删除命令

        Returns:
            全部成功时为 0，否则为第一个失败对应的退出码
        """
        context = load_context(self.project_path)
        manager = WorktreeManager.from_context(context)

        targets = self.resolve_names(manager, names, current)
        keep_branch = keep_branch or context.preferences.keep_branch

        logger.info("Executing delete command", names=targets, force=force, keep_branch=keep_branch)

        batch = manager.delete_many(targets, force=force, keep_branch=keep_branch)
        exit_code = 0
        for name, result in batch.results:
            if result.is_ok:
                click.echo(self.formatter.success(result.value.message))
            else:
                click.echo(self.formatter.error(result.message), err=True)
                if not exit_code:
                    exit_code = exit_code_for(result.kind)
        return exit_code


@click.command()
@click.argument("names", nargs=-1)
@click.option("-f", "--force", is_flag=True, help="强制删除，忽略未提交或未推送的改动")
@click.option("--keep-branch", is_flag=True, help="保留对应的分支")
@click.option("--current", is_flag=True, help="删除当前所在的 worktree")
def delete(names, force: bool, keep_branch: bool, current: bool) -> None:
    """删除 worktree 和对应的分支

    \b
    使用示例:
    phantom delete feature-x
    phantom delete feature-x feature-y --force
    phantom delete --current --keep-branch
    """
    formatter = get_formatter()
    try:
        exit_code = DeleteCommand(formatter=formatter).execute(
            names,
            force=force,
            keep_branch=keep_branch,
            current=current,
        )
    except PhantomError as e:
        abort(e, formatter)

    if exit_code:
        sys.exit(exit_code)
