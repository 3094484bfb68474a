"""Phantom 异常体系

每个异常都带有固定的 ErrorKind，CLI 层据此映射退出码。
"""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """错误类别"""
    VALIDATION_FAILURE = "validation_failure"
    PARSE_FAILURE = "parse_failure"
    ALREADY_EXISTS = "already_exists"
    NOT_FOUND = "not_found"
    BRANCH_NOT_FOUND = "branch_not_found"
    GIT_OPERATION_FAILED = "git_operation_failed"
    UNSAFE_DELETE = "unsafe_delete"
    PRE_DELETE_FAILED = "pre_delete_failed"
    POST_CREATE_PARTIAL_FAILURE = "post_create_partial_failure"
    PROCESS_FAILED = "process_failed"
    UNEXPECTED = "unexpected"


class PhantomError(Exception):
    """基础异常类"""
    kind = ErrorKind.UNEXPECTED

    def __init__(self, message: str, details: Optional[str] = None):
        self.message = message
        self.details = details
        super().__init__(self.message)


class ValidationFailure(PhantomError):
    """输入校验失败"""
    kind = ErrorKind.VALIDATION_FAILURE


class InvalidWorktreeName(ValidationFailure):
    """Worktree 名称不合法"""
    pass


# Worktree 相关异常
class WorktreeException(PhantomError):
    """Worktree 操作异常"""
    pass


class WorktreeAlreadyExists(WorktreeException):
    """Worktree 已存在"""
    kind = ErrorKind.ALREADY_EXISTS

    def __init__(self, name: str, path: Optional[str] = None):
        self.name = name
        super().__init__(f"Worktree '{name}' already exists", details=path)


class WorktreeNotFound(WorktreeException):
    """Worktree 不存在"""
    kind = ErrorKind.NOT_FOUND

    def __init__(self, name: str, path: Optional[str] = None):
        self.name = name
        super().__init__(f"Worktree '{name}' not found", details=path)


class UnsafeDelete(WorktreeException):
    """工作区有未提交或未推送的改动"""
    kind = ErrorKind.UNSAFE_DELETE


class PreDeleteFailed(WorktreeException):
    """preDelete 命令执行失败"""
    kind = ErrorKind.PRE_DELETE_FAILED


# 配置相关异常
class ConfigException(PhantomError):
    """配置异常"""
    kind = ErrorKind.VALIDATION_FAILURE


class ConfigParseError(ConfigException):
    """配置解析失败"""
    kind = ErrorKind.PARSE_FAILURE


class ConfigValidationError(ConfigException):
    """配置验证失败"""

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(f"Invalid phantom.config.json: {message}", details=details)


class UnknownPreference(ValidationFailure):
    """未知的偏好设置键"""
    pass


# Git 操作异常
class GitException(PhantomError):
    """Git 操作异常"""
    kind = ErrorKind.GIT_OPERATION_FAILED


class GitCommandError(GitException):
    """Git 命令执行失败"""
    pass


class GitOperationFailed(GitException):
    """Git 子命令返回非零退出码"""

    def __init__(self, operation: str, stderr: str):
        self.operation = operation
        super().__init__(f"git {operation} failed: {stderr.strip()}", details=stderr)


class BranchNotFound(GitException):
    """本地分支不存在"""
    kind = ErrorKind.BRANCH_NOT_FOUND

    def __init__(self, branch: str):
        self.branch = branch
        super().__init__(f"Branch '{branch}' not found")


class ProcessSpawnError(PhantomError):
    """子进程无法启动"""
    kind = ErrorKind.PROCESS_FAILED


class UnexpectedError(PhantomError):
    """非预期错误，附带操作名和目标"""
    kind = ErrorKind.UNEXPECTED

    def __init__(self, operation: str, target: str, cause: BaseException):
        self.operation = operation
        self.target = target
        self.cause = cause
        super().__init__(
            f"Unexpected error during {operation} of '{target}': {cause}",
            details=type(cause).__name__,
        )
