"""phantom attach 命令实现

为已存在的本地分支创建 worktree。
"""

from pathlib import Path
from typing import Optional

import click

from phantom.cli.commands.create import report_post_create
from phantom.cli.utils import OutputFormatter, abort, get_formatter, load_context
from phantom.core.exceptions import PhantomError
from phantom.core.logger import get_logger
from phantom.core.worktree_manager import WorktreeManager

logger = get_logger("attach_command")


class AttachCommand:
    """附加命令处理器"""

    def __init__(self, project_path: Optional[Path] = None, formatter: Optional[OutputFormatter] = None):
        self.project_path = Path(project_path) if project_path else Path.cwd()
        self.formatter = formatter or OutputFormatter()

    def execute(self, branch: str) -> None:
        logger.info("Executing attach command", branch=branch)

        context = load_context(self.project_path)
        outcome = WorktreeManager.from_context(context).attach(branch).unwrap()

        click.echo(self.formatter.success(outcome.message))
        report_post_create(outcome, self.formatter)


@click.command()
@click.argument("branch")
def attach(branch: str) -> None:
    """为已存在的分支创建 worktree

    \b
    使用示例:
    phantom attach feature-x
    """
    formatter = get_formatter()
    try:
        AttachCommand(formatter=formatter).execute(branch)
    except PhantomError as e:
        abort(e, formatter)
