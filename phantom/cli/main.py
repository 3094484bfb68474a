"""Phantom CLI 主入口"""

import sys

import click

from phantom.cli.commands.attach import attach
from phantom.cli.commands.create import create
from phantom.cli.commands.delete import delete
from phantom.cli.commands.exec import exec_command, shell
from phantom.cli.commands.list import list_command
from phantom.cli.commands.post_create import post_create
from phantom.cli.commands.preferences import preferences
from phantom.cli.commands.version import VERSION, version
from phantom.cli.commands.where import where
from phantom.cli.utils import EXIT_GENERAL_ERROR, EXIT_INTERRUPTED, exit_code_for
from phantom.core.exceptions import PhantomError
from phantom.core.logger import LoggerConfig, configure_logger


@click.group()
@click.version_option(version=VERSION, prog_name="phantom")
@click.option(
    '--verbose',
    is_flag=True,
    help='详细日志输出（调试用）'
)
@click.option(
    '--no-color',
    is_flag=True,
    help='关闭彩色输出'
)
@click.pass_context
def cli(ctx, verbose, no_color):
    """Phantom - Git Worktree 生命周期管理工具

    \b
    核心命令：
      create <name> [options]   创建新 worktree 和分支
      attach <branch>           为已存在的分支创建 worktree
      delete <name>...          删除 worktree
      list [options]            列出所有 worktree
      where <name>              输出 worktree 路径
      exec <name> <command>     在 worktree 中执行命令
      shell <name>              在 worktree 中打开 shell
      post-create [name]        重新执行 post-create 动作
      preferences               管理全局偏好设置

    \b
    示例:
      phantom create feature-x
      phantom list --format json
      phantom exec feature-x npm test
      phantom delete feature-x --keep-branch
    """
    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose
    ctx.obj['no_color'] = no_color
    configure_logger(LoggerConfig.from_env(verbose=verbose))


# 注册命令
cli.add_command(create)
cli.add_command(attach)
cli.add_command(delete)
cli.add_command(list_command, name="list")
cli.add_command(where)
cli.add_command(exec_command, name="exec")
cli.add_command(shell)
cli.add_command(post_create, name="post-create")
cli.add_command(preferences)
cli.add_command(version)


def main():
    """CLI 入口点，处理全局异常"""
    try:
        cli(standalone_mode=False)
    except click.exceptions.Abort:
        click.echo("Interrupted", err=True)
        sys.exit(EXIT_INTERRUPTED)
    except click.ClickException as e:
        e.show()
        sys.exit(e.exit_code)
    except PhantomError as e:
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(exit_code_for(e.kind))
    except Exception as e:
        # 其他未处理的异常
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_GENERAL_ERROR)


if __name__ == "__main__":
    main()
