"""phantom preferences 命令实现

读写 git 全局配置中的 phantom.* 偏好设置。
"""

from typing import Optional

import click

from phantom.cli.utils import OutputFormatter, abort, get_formatter
from phantom.core.exceptions import PhantomError
from phantom.core.preferences import PreferencesStore, normalize_key


class PreferencesCommand:
    """偏好设置命令处理器"""

    def __init__(self, store: Optional[PreferencesStore] = None, formatter: Optional[OutputFormatter] = None):
        self.store = store or PreferencesStore()
        self.formatter = formatter or OutputFormatter()

    def get(self, key: str) -> Optional[str]:
        return self.store.get_preference(key)

    def set(self, key: str, value: str) -> str:
        canonical = self.store.set_preference(key, value)
        return self.formatter.success(f"Set phantom.{canonical} to '{value}'")

    def remove(self, key: str) -> str:
        canonical = normalize_key(key)
        if self.store.remove_preference(canonical):
            return self.formatter.success(f"Removed phantom.{canonical}")
        return self.formatter.info(f"Preference '{canonical}' was not set")

    def show_all(self) -> str:
        preferences = self.store.load_preferences().to_dict()
        if not preferences:
            return self.formatter.info("No preferences set")
        return self.formatter.format_key_value(preferences)


@click.group(invoke_without_command=True)
@click.pass_context
def preferences(ctx) -> None:
    """管理全局偏好设置

    \b
    支持的键: editor, ai, worktreesDirectory, keepBranch
    使用示例:
    phantom preferences set editor code
    phantom preferences get editor
    phantom preferences remove editor
    """
    if ctx.invoked_subcommand is None:
        try:
            click.echo(PreferencesCommand(formatter=get_formatter()).show_all())
        except PhantomError as e:
            abort(e, get_formatter())


@preferences.command(name="get")
@click.argument("key")
def get_preference(key: str) -> None:
    """读取偏好设置"""
    formatter = get_formatter()
    try:
        value = PreferencesCommand(formatter=formatter).get(key)
    except PhantomError as e:
        abort(e, formatter)

    if value is None:
        click.echo(formatter.info(f"Preference '{key}' is not set"), err=True)
    else:
        click.echo(value)


@preferences.command(name="set")
@click.argument("key")
@click.argument("value")
def set_preference(key: str, value: str) -> None:
    """写入偏好设置"""
    formatter = get_formatter()
    try:
        click.echo(PreferencesCommand(formatter=formatter).set(key, value))
    except PhantomError as e:
        abort(e, formatter)


@preferences.command(name="remove")
@click.argument("key")
def remove_preference(key: str) -> None:
    """删除偏好设置"""
    formatter = get_formatter()
    try:
        click.echo(PreferencesCommand(formatter=formatter).remove(key))
    except PhantomError as e:
        abort(e, formatter)
