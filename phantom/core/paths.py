"""Worktree 路径解析

纯函数：仓库根目录 + 配置 + 名称 → worktree 的绝对路径，以及反向查找。
"""

import re
from pathlib import Path
from typing import Optional, Union

from phantom.core.data_structures import WorktreeConfig
from phantom.core.exceptions import InvalidWorktreeName
from phantom.core.result import Err, Ok, Result

DEFAULT_WORKTREES_DIRECTORY = Path(".git") / "phantom" / "worktrees"

_VALID_NAME = re.compile(r"^[A-Za-z0-9._-]+$")


def get_worktrees_directory(repo_root: Path, override: Optional[Union[str, Path]] = None) -> Path:
    """计算 worktree 的基础目录

    override 为绝对路径时原样使用，为相对路径时相对 repo_root 解析；
    未提供时使用 <repo_root>/.git/phantom/worktrees。
    """
    repo_root = Path(repo_root)
    if override:
        base = Path(override).expanduser()
        return base if base.is_absolute() else repo_root / base
    return repo_root / DEFAULT_WORKTREES_DIRECTORY


def validate_worktree_name(name: str) -> Result[str, InvalidWorktreeName]:
    """校验 worktree 名称

    名称同时用作分支名和目录名，因此不能为空，不能包含路径分隔符，
    也不能是 `.`、`..` 或包含 `..`。
    """
    if not name or not name.strip():
        return Err(InvalidWorktreeName("Worktree name cannot be empty"))
    if "/" in name or "\\" in name:
        return Err(InvalidWorktreeName(f"Worktree name '{name}' cannot contain path separators"))
    if name in (".", "..") or ".." in name:
        return Err(InvalidWorktreeName(f"Worktree name '{name}' cannot contain consecutive dots"))
    if not _VALID_NAME.match(name):
        return Err(
            InvalidWorktreeName(
                f"Worktree name '{name}' can only contain letters, numbers, hyphens, underscores, and dots"
            )
        )
    return Ok(name)


def worktree_path(
    repo_root: Path,
    config: Optional[WorktreeConfig],
    name: str,
    override: Optional[Union[str, Path]] = None,
) -> Path:
    """计算 worktree 路径

    Args:
        repo_root: 仓库根目录
        config: 已加载的配置，可为 None
        name: worktree 名称
        override: 覆盖配置中的基础目录（偏好设置或环境变量）

    Raises:
        InvalidWorktreeName: 名称不安全时抛出
    """
    validation = validate_worktree_name(name)
    if validation.is_err:
        raise validation.error
    base_override = override or (config.worktrees_directory if config else None)
    return get_worktrees_directory(repo_root, base_override) / name


def worktree_name_from_path(
    repo_root: Path,
    config: Optional[WorktreeConfig],
    path: Union[str, Path],
    override: Optional[Union[str, Path]] = None,
) -> Optional[str]:
    """根据路径反查 worktree 名称

    path 为某个 worktree 目录本身或其子目录时返回名称，否则返回 None。
    """
    base_override = override or (config.worktrees_directory if config else None)
    base = _normalize(get_worktrees_directory(repo_root, base_override))
    target = _normalize(Path(path))

    try:
        relative = target.relative_to(base)
    except ValueError:
        return None

    if not relative.parts:
        return None
    name = relative.parts[0]
    return name if validate_worktree_name(name).is_ok else None


def _normalize(path: Path) -> Path:
    try:
        return path.resolve()
    except OSError:
        return path.absolute()
