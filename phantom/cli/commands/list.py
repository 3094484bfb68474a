"""phantom list 命令实现

列出所有 worktree 及其状态。
"""

from pathlib import Path
from typing import List, Optional

import click

from phantom.cli.utils import OutputFormatter, TableExporter, abort, get_formatter, load_context
from phantom.core.data_structures import WorktreeInfo
from phantom.core.exceptions import PhantomError
from phantom.core.logger import get_logger
from phantom.core.worktree_manager import WorktreeManager

logger = get_logger("list_command")

TABLE_HEADERS = ["NAME", "BRANCH", "STATUS", "PATH"]
JSON_FIELDS = ["name", "path", "branch", "isClean", "isDefault"]


class ListCommand:
    """列表命令处理器"""

    def __init__(self, project_path: Optional[Path] = None, formatter: Optional[OutputFormatter] = None):
        self.project_path = Path(project_path) if project_path else Path.cwd()
        self.formatter = formatter or OutputFormatter()

    def collect(self, include_default: bool = True) -> List[WorktreeInfo]:
        context = load_context(self.project_path)
        outcome = WorktreeManager.from_context(context).list_worktrees(include_default=include_default).unwrap()
        logger.info("Worktrees collected", count=len(outcome.worktrees))
        return outcome.worktrees

    def format_table(self, worktrees: List[WorktreeInfo]) -> str:
        rows = []
        for info in worktrees:
            name = f"{info.name} (default)" if info.is_default else info.name
            status = "clean" if info.is_clean else "dirty"
            rows.append([name, info.display_branch, status, str(info.path)])
        return self.formatter.format_table(TABLE_HEADERS, rows)

    def format_json(self, worktrees: List[WorktreeInfo]) -> str:
        rows = []
        for info in worktrees:
            data = info.to_dict()
            rows.append([data[field] for field in JSON_FIELDS])
        return TableExporter.to_json(JSON_FIELDS, rows)

    def execute(self, include_default: bool = True, names_only: bool = False, output_format: str = "table") -> str:
        """执行列表命令，返回要输出的文本"""
        worktrees = self.collect(include_default)

        if output_format == "json":
            return self.format_json(worktrees)
        if names_only:
            return "\n".join(info.name for info in worktrees)
        if not worktrees:
            return "No worktrees found"
        return self.format_table(worktrees)


@click.command(name="list")
@click.option("--no-default", is_flag=True, help="不显示主工作区")
@click.option("--names", "names_only", is_flag=True, help="只输出名称")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    help="输出格式",
)
def list_command(no_default: bool, names_only: bool, output_format: str) -> None:
    """列出所有 worktree

    \b
    使用示例:
    phantom list
    phantom list --no-default --names
    phantom list --format json
    """
    formatter = get_formatter()
    try:
        output = ListCommand(formatter=formatter).execute(
            include_default=not no_default,
            names_only=names_only,
            output_format=output_format,
        )
    except PhantomError as e:
        abort(e, formatter)

    if output:
        click.echo(output)
