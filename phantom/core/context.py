"""运行上下文

按层合并配置：phantom.config.json < git 全局偏好设置 < 环境变量。
每次调用都重新读取，不做缓存。
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional, Tuple

from phantom.core.config_manager import ConfigManager
from phantom.core.data_structures import Preferences, WorktreeConfig
from phantom.core.exceptions import ConfigException
from phantom.core.logger import get_logger
from phantom.core.paths import get_worktrees_directory
from phantom.core.preferences import PreferencesStore
from phantom.core.result import Ok, Result

logger = get_logger("context")

ENV_WORKTREES_DIRECTORY = "PHANTOM_WORKTREES_DIRECTORY"


@dataclass
class Context:
    """一次调用所需的全部已解析输入"""
    repo_root: Path
    worktrees_directory: Path
    config: WorktreeConfig = field(default_factory=WorktreeConfig)
    preferences: Preferences = field(default_factory=Preferences)
    directory_source: str = "default"
    editor: Optional[str] = None


def resolve_worktrees_directory(
    repo_root: Path,
    config: WorktreeConfig,
    preferences: Preferences,
    env: Mapping[str, str],
) -> Tuple[Path, str]:
    """确定 worktree 基础目录及其来源"""
    if env.get(ENV_WORKTREES_DIRECTORY):
        return get_worktrees_directory(repo_root, env[ENV_WORKTREES_DIRECTORY]), "environment"

    if preferences.worktreesDirectory:
        return get_worktrees_directory(repo_root, preferences.worktreesDirectory), "preferences"

    if config.worktrees_directory:
        logger.warning(
            "'worktreesDirectory' in phantom.config.json is deprecated; "
            "set it with 'phantom preferences set worktreesDirectory <path>' instead",
            value=config.worktrees_directory,
        )
        return get_worktrees_directory(repo_root, config.worktrees_directory), "config"

    return get_worktrees_directory(repo_root), "default"


def create_context(
    repo_root: Path,
    preferences_store: Optional[PreferencesStore] = None,
    env: Optional[Mapping[str, str]] = None,
) -> Result[Context, ConfigException]:
    """加载配置与偏好设置，生成 Context

    Returns:
        Ok(Context)；配置文件无效时返回 Err(ConfigException)
    """
    env = os.environ if env is None else env
    repo_root = Path(repo_root)

    config_result = ConfigManager(repo_root).load_config()
    if config_result.is_err:
        return config_result
    config = config_result.value

    store = preferences_store or PreferencesStore()
    preferences = store.load_preferences()

    worktrees_directory, source = resolve_worktrees_directory(repo_root, config, preferences, env)
    logger.debug(
        "Context created",
        repo_root=str(repo_root),
        worktrees_directory=str(worktrees_directory),
        source=source,
    )

    return Ok(
        Context(
            repo_root=repo_root,
            worktrees_directory=worktrees_directory,
            config=config,
            preferences=preferences,
            directory_source=source,
            editor=preferences.editor or env.get("EDITOR"),
        )
    )
