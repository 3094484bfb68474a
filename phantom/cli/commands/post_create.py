"""phantom post-create 命令实现

对已存在的 worktree 重新执行 postCreate 中配置的复制与命令。
"""

import sys
from pathlib import Path
from typing import Optional

import click

from phantom.cli.commands.create import report_post_create
from phantom.cli.utils import OutputFormatter, abort, get_formatter, load_context
from phantom.core.exceptions import PhantomError, ValidationFailure
from phantom.core.logger import get_logger
from phantom.core.worktree_manager import WorktreeManager

logger = get_logger("post_create_command")


class PostCreateCommand:
    """post-create 重放命令处理器"""

    def __init__(self, project_path: Optional[Path] = None, formatter: Optional[OutputFormatter] = None):
        self.project_path = Path(project_path) if project_path else Path.cwd()
        self.formatter = formatter or OutputFormatter()

    def execute(self, name: Optional[str] = None, current: bool = False) -> bool:
        """执行重放

        Returns:
            post-create 是否全部成功
        """
        manager = WorktreeManager.from_context(load_context(self.project_path))

        if current:
            if name:
                raise ValidationFailure("Cannot specify a worktree name together with --current")
            name = manager.current_worktree(self.project_path)
            if name is None:
                raise ValidationFailure("Not in a worktree directory. The --current option can only be used inside a worktree")
        elif not name:
            raise ValidationFailure("Please provide a worktree name or use --current")

        logger.info("Replaying post-create", name=name)
        outcome = manager.replay_post_create(name).unwrap()

        click.echo(self.formatter.success(outcome.message))
        report_post_create(outcome, self.formatter)
        return not outcome.post_create_failed


@click.command(name="post-create")
@click.argument("name", required=False)
@click.option("--current", is_flag=True, help="使用当前所在的 worktree")
def post_create(name: Optional[str], current: bool) -> None:
    """重新执行 post-create 动作

    \b
    使用示例:
    phantom post-create feature-x
    phantom post-create --current
    """
    formatter = get_formatter()
    try:
        succeeded = PostCreateCommand(formatter=formatter).execute(name, current=current)
    except PhantomError as e:
        abort(e, formatter)

    if not succeeded:
        sys.exit(1)
