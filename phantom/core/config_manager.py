"""配置管理器

加载并验证仓库根目录下的 phantom.config.json（兼容读取 phantom.config.yaml）。
文件不存在时返回空配置；无法解析或不符合结构时返回 Err。
"""

import copy
import json
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple

import yaml

from phantom.core.data_structures import PostCreateConfig, PreDeleteConfig, WorktreeConfig
from phantom.core.exceptions import ConfigException, ConfigParseError, ConfigValidationError
from phantom.core.logger import get_logger
from phantom.core.result import Err, Ok, Result

logger = get_logger("config_manager")

CONFIG_FILENAME = "phantom.config.json"
YAML_CONFIG_FILENAME = "phantom.config.yaml"


def _is_mapping(value: Any) -> bool:
    return isinstance(value, dict)


def _check_string_list(container: Dict[str, Any], key: str, field_name: str) -> Optional[str]:
    # 键存在即校验，null 同样不合法
    if key not in container:
        return None
    value = container[key]
    if not isinstance(value, list):
        return f"{field_name} must be an array"
    if not all(isinstance(item, str) for item in value):
        return f"{field_name} must contain only strings"
    return None


def _check_top_level(cfg: Any) -> Optional[str]:
    if not _is_mapping(cfg):
        return "Configuration must be an object"
    return None


def _check_post_create(cfg: Dict[str, Any]) -> Optional[str]:
    if "postCreate" in cfg and not _is_mapping(cfg["postCreate"]):
        return "postCreate must be an object"
    return None


def _check_copy_files(cfg: Dict[str, Any]) -> Optional[str]:
    return _check_string_list(cfg.get("postCreate", {}), "copyFiles", "postCreate.copyFiles")


def _check_commands(cfg: Dict[str, Any]) -> Optional[str]:
    return _check_string_list(cfg.get("postCreate", {}), "commands", "postCreate.commands")


def _check_generic(cfg: Dict[str, Any]) -> Optional[str]:
    if "preDelete" in cfg:
        pre_delete = cfg["preDelete"]
        if not _is_mapping(pre_delete):
            return "preDelete must be an object"
        error = _check_string_list(pre_delete, "commands", "preDelete.commands")
        if error:
            return error
    for key in ("worktreesDirectory", "basePath"):
        if key in cfg and not isinstance(cfg[key], str):
            return f"{key} must be a string"
    return None


# 检查顺序即错误信息的优先级，第一个失败的检查决定报告的字段
VALIDATION_CHAIN: Tuple[Callable[[Any], Optional[str]], ...] = (
    _check_top_level,
    _check_post_create,
    _check_copy_files,
    _check_commands,
    _check_generic,
)


def validate_config(data: Any) -> Result[WorktreeConfig, ConfigValidationError]:
    """验证原始配置并转换为 WorktreeConfig

    Args:
        data: yaml.safe_load 的结果

    Returns:
        Ok(WorktreeConfig) 或 Err(ConfigValidationError)
    """
    for check in VALIDATION_CHAIN:
        error = check(data)
        if error:
            logger.warning("Configuration validation failed", error=error)
            return Err(ConfigValidationError(error))

    cfg = copy.deepcopy(data)

    post_create_raw = cfg.pop("postCreate", None) or {}
    post_create = PostCreateConfig(
        copy_files=list(post_create_raw.pop("copyFiles", None) or []),
        commands=list(post_create_raw.pop("commands", None) or []),
        extra=post_create_raw,
    )

    pre_delete_raw = cfg.pop("preDelete", None) or {}
    pre_delete = PreDeleteConfig(
        commands=list(pre_delete_raw.pop("commands", None) or []),
        extra=pre_delete_raw,
    )

    worktrees_directory = cfg.pop("worktreesDirectory", None)
    base_path = cfg.pop("basePath", None)

    return Ok(
        WorktreeConfig(
            worktrees_directory=worktrees_directory or base_path,
            post_create=post_create,
            pre_delete=pre_delete,
            extra=cfg,
        )
    )


class ConfigManager:
    """配置管理器

    负责定位、读取和验证 phantom.config.json。仓库中只有 phantom.config.yaml 时读取它。
    每次调用 load_config 都重新读取文件。
    """

    def __init__(self, project_root: Optional[Path] = None):
        """初始化配置管理器

        Args:
            project_root: 仓库根目录，默认为当前目录
        """
        self.project_root = Path(project_root) if project_root else Path.cwd()

    @property
    def config_path(self) -> Path:
        """获取配置文件路径，phantom.config.json 优先"""
        json_path = self.project_root / CONFIG_FILENAME
        yaml_path = self.project_root / YAML_CONFIG_FILENAME
        if not json_path.exists() and yaml_path.exists():
            return yaml_path
        return json_path

    def load_config(self) -> Result[WorktreeConfig, ConfigException]:
        """加载配置文件

        Returns:
            Ok(WorktreeConfig)；解析失败为 Err(ConfigParseError)，
            结构不合法为 Err(ConfigValidationError)
        """
        path = self.config_path

        if not path.exists():
            logger.debug("Configuration file not found, using empty config", path=str(path))
            return Ok(WorktreeConfig())

        logger.info("Loading configuration", path=str(path))

        try:
            with open(path, "r", encoding="utf-8") as f:
                if path.name == CONFIG_FILENAME:
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f)
        except (yaml.YAMLError, ValueError) as e:
            logger.error("Failed to parse configuration", path=str(path), error=str(e))
            return Err(ConfigParseError(f"Failed to parse {path.name}: {e}", details=str(path)))

        if data is None:
            logger.info("Configuration file is empty", path=str(path))
            return Ok(WorktreeConfig())

        return validate_config(data)


def load_config(repo_root: Path) -> Result[WorktreeConfig, ConfigException]:
    """读取 repo_root 下的配置"""
    return ConfigManager(repo_root).load_config()

