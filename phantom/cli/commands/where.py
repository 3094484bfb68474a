"""phantom where 命令实现"""

from pathlib import Path
from typing import Optional

import click

from phantom.cli.utils import abort, get_formatter, load_context
from phantom.core.exceptions import PhantomError
from phantom.core.worktree_manager import WorktreeManager


class WhereCommand:
    """定位命令处理器"""

    def __init__(self, project_path: Optional[Path] = None):
        self.project_path = Path(project_path) if project_path else Path.cwd()

    def execute(self, name: str) -> Path:
        context = load_context(self.project_path)
        return WorktreeManager.from_context(context).where(name).unwrap().path


@click.command()
@click.argument("name")
def where(name: str) -> None:
    """输出 worktree 的路径

    \b
    使用示例:
    cd "$(phantom where feature-x)"
    """
    try:
        path = WhereCommand().execute(name)
    except PhantomError as e:
        abort(e, get_formatter())
    click.echo(str(path))
