"""Phantom 核心数据结构定义

配置、偏好设置、worktree 信息以及各生命周期操作的结果载荷。
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from phantom.core.result import Result


DETACHED_MARKER = "(detached HEAD)"
BARE_MARKER = "(bare)"


# 配置相关数据结构
@dataclass
class PostCreateConfig:
    """postCreate 配置"""
    copy_files: List[str] = field(default_factory=list)
    commands: List[str] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.copy_files and not self.commands


@dataclass
class PreDeleteConfig:
    """preDelete 配置"""
    commands: List[str] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass
class WorktreeConfig:
    """phantom.config.json 的解析结果

    未识别的键原样保存在 extra 中。
    """
    worktrees_directory: Optional[str] = None
    post_create: PostCreateConfig = field(default_factory=PostCreateConfig)
    pre_delete: PreDeleteConfig = field(default_factory=PreDeleteConfig)
    extra: Dict[str, Any] = field(default_factory=dict)


# 偏好设置
PREFERENCE_KEYS = ("editor", "ai", "worktreesDirectory", "keepBranch")


@dataclass
class Preferences:
    """用户级偏好设置（git config --global phantom.*）"""
    editor: Optional[str] = None
    ai: Optional[str] = None
    worktreesDirectory: Optional[str] = None
    keepBranch: Optional[str] = None

    def get(self, key: str) -> Optional[str]:
        return getattr(self, key) if key in PREFERENCE_KEYS else None

    @property
    def keep_branch(self) -> bool:
        return (self.keepBranch or "").strip().lower() in ("true", "yes", "on", "1")

    def to_dict(self) -> Dict[str, str]:
        return {key: getattr(self, key) for key in PREFERENCE_KEYS if getattr(self, key) is not None}


# Worktree 信息
@dataclass
class WorktreeInfo:
    """Worktree 信息（列出时的快照）"""
    name: str
    path: Path
    branch: Optional[str] = None
    is_clean: bool = True
    is_default: bool = False
    is_bare: bool = False

    @property
    def display_branch(self) -> str:
        if self.branch:
            return self.branch
        return BARE_MARKER if self.is_bare else DETACHED_MARKER

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "path": str(self.path),
            "branch": self.branch,
            "isClean": self.is_clean,
            "isDefault": self.is_default,
        }


# 生命周期操作结果
@dataclass
class CommandFailure:
    """执行失败的命令"""
    command: str
    exit_code: int

    def __str__(self) -> str:
        return f"Command failed with exit code {self.exit_code}: {self.command}"


@dataclass
class PostCreateOutcome:
    """post-create 执行结果"""
    copied_files: List[str] = field(default_factory=list)
    skipped_files: List[str] = field(default_factory=list)
    copy_error: Optional[str] = None
    executed_commands: List[str] = field(default_factory=list)
    command_error: Optional[CommandFailure] = None

    @property
    def has_failures(self) -> bool:
        return self.copy_error is not None or self.command_error is not None


@dataclass
class CreateOutcome:
    """create / attach 的结果"""
    name: str
    message: str
    path: Path
    copied_files: List[str] = field(default_factory=list)
    skipped_files: List[str] = field(default_factory=list)
    copy_error: Optional[str] = None
    executed_commands: List[str] = field(default_factory=list)
    command_error: Optional[CommandFailure] = None

    @property
    def post_create_failed(self) -> bool:
        return self.copy_error is not None or self.command_error is not None


@dataclass
class DeleteOutcome:
    """delete 的结果"""
    name: str
    message: str
    path: Path
    branch: Optional[str] = None
    branch_deleted: bool = False
    branch_error: Optional[str] = None


@dataclass
class BatchDeleteOutcome:
    """批量删除结果

    按请求顺序保存 (名称, 结果)，重复的名称各自保留一条记录。
    """
    results: List[Tuple[str, Result]] = field(default_factory=list)

    def add(self, name: str, result: Result) -> None:
        self.results.append((name, result))

    @property
    def failures(self) -> List[Tuple[str, Result]]:
        return [(name, r) for name, r in self.results if r.is_err]

    @property
    def failed(self) -> List[str]:
        return [name for name, _ in self.failures]

    @property
    def succeeded(self) -> List[str]:
        return [name for name, r in self.results if r.is_ok]

    @property
    def all_succeeded(self) -> bool:
        return not self.failures


@dataclass
class ListOutcome:
    """list 的结果"""
    worktrees: List[WorktreeInfo] = field(default_factory=list)

    @property
    def message(self) -> Optional[str]:
        return None if self.worktrees else "No worktrees found"


@dataclass
class WhereOutcome:
    """where 的结果"""
    name: str
    path: Path


@dataclass
class ExecOutcome:
    """exec 的结果"""
    name: str
    path: Path
    exit_code: int
