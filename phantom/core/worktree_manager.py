"""统一的 Worktree 管理器

负责 worktree 的完整生命周期：创建、附加、删除、列出、定位、执行命令以及重放 post-create。
所有公开方法都返回 Ok / Err，预期内的错误不会以异常形式抛出；
非预期的 OSError 和 Git 异常会被包装成 UnexpectedError。
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from phantom.core.config_manager import ConfigManager
from phantom.core.data_structures import (
    BatchDeleteOutcome,
    CommandFailure,
    CreateOutcome,
    DeleteOutcome,
    ExecOutcome,
    ListOutcome,
    PostCreateOutcome,
    WhereOutcome,
    WorktreeConfig,
    WorktreeInfo,
)
from phantom.core.exceptions import (
    BranchNotFound,
    ErrorKind,
    GitException,
    GitOperationFailed,
    PhantomError,
    PreDeleteFailed,
    ProcessSpawnError,
    UnexpectedError,
    UnsafeDelete,
    WorktreeAlreadyExists,
    WorktreeNotFound,
)
from phantom.core.git_client import GitClient, GitWorktreeEntry
from phantom.core.logger import Logger, OperationScope, get_logger
from phantom.core.paths import (
    get_worktrees_directory,
    validate_worktree_name,
    worktree_name_from_path,
)
from phantom.core.post_create import CommandRunner, PostCreateRunner
from phantom.core.process import run_shell_command, spawn, user_shell
from phantom.core.result import Err, Ok, Result

logger = get_logger("worktree_manager")

# 阶段函数返回 None 表示继续，返回异常表示终止整个流程
StageFn = Callable[[Dict[str, Any]], Optional[PhantomError]]


@dataclass
class _Stage:
    description: str
    execute_fn: StageFn


class _Pipeline:
    """顺序执行的阶段列表

    每个阶段读写同一个 state 字典。阶段返回错误时终止后续阶段，
    已完成的阶段不回滚；阶段可以只在 state 中记录降级结果而继续执行。
    """

    def __init__(self, name: str):
        self.name = name
        self.stages: List[_Stage] = []

    def add_stage(self, execute_fn: StageFn, description: str = "") -> "_Pipeline":
        self.stages.append(_Stage(description=description, execute_fn=execute_fn))
        return self

    def run(self, state: Dict[str, Any]) -> Result[Dict[str, Any], PhantomError]:
        for index, stage in enumerate(self.stages):
            logger.debug(
                "Executing stage",
                pipeline=self.name,
                stage=stage.description,
                index=index,
                total=len(self.stages),
            )
            error = stage.execute_fn(state)
            if error is not None:
                logger.warning(
                    "Stage aborted pipeline",
                    pipeline=self.name,
                    stage=stage.description,
                    error=error.message,
                )
                return Err(error)
        return Ok(state)


class WorktreeManager:
    """统一的 Worktree 管理器

    无状态：每次调用都重新查询 git 与文件系统。
    """

    def __init__(
        self,
        repo_root: Path,
        git_client: Optional[GitClient] = None,
        config: Optional[WorktreeConfig] = None,
        worktrees_directory: Optional[Union[str, Path]] = None,
        post_create_runner: Optional[PostCreateRunner] = None,
        command_runner: Optional[CommandRunner] = None,
        logger_: Optional[Logger] = None,
    ):
        """初始化 Worktree 管理器

        Args:
            repo_root: 仓库根目录
            git_client: Git 客户端，默认在 repo_root 下执行
            config: 已加载的 phantom.config.json
            worktrees_directory: 已解析的基础目录（偏好设置或环境变量），覆盖配置文件
            post_create_runner: post-create 执行器
            command_runner: 执行 preDelete 命令，默认使用用户 shell
            logger_: 日志记录器
        """
        self.repo_root = Path(repo_root)
        self.git_client = git_client or GitClient(self.repo_root)
        self.config = config or WorktreeConfig()
        self.worktrees_directory = worktrees_directory
        self.command_runner = command_runner or (lambda command, cwd: run_shell_command(command, cwd))
        self.post_create_runner = post_create_runner or PostCreateRunner(
            self.repo_root, command_runner=self.command_runner
        )
        self.logger = logger_ or logger

    @classmethod
    def from_context(cls, context, git_client: Optional[GitClient] = None) -> "WorktreeManager":
        """由 phantom.core.context.Context 构造"""
        return cls(
            repo_root=context.repo_root,
            git_client=git_client or GitClient(context.repo_root),
            config=context.config,
            worktrees_directory=context.worktrees_directory,
        )

    @property
    def base_directory(self) -> Path:
        return get_worktrees_directory(
            self.repo_root, self.worktrees_directory or self.config.worktrees_directory
        )

    # ------------------------------------------------------------------
    # 公开操作
    # ------------------------------------------------------------------

    def create(
        self,
        name: str,
        branch: Optional[str] = None,
        commitish: Optional[str] = None,
        copy_files: Optional[Sequence[str]] = None,
    ) -> Result[CreateOutcome, PhantomError]:
        """创建 worktree 并新建分支

        Args:
            name: worktree 名称
            branch: 新分支名，默认与 name 相同
            commitish: 新分支的起点，默认为 HEAD
            copy_files: 额外复制的文件，先于配置中的 copyFiles

        Returns:
            Ok(CreateOutcome)；post-create 失败时仍为 Ok，失败信息记录在结果里
        """
        return self._run_operation(
            "create",
            name,
            lambda: self._create(name, branch or name, commitish, copy_files, create_branch=True),
            branch=branch or name,
        )

    def attach(self, branch_name: str) -> Result[CreateOutcome, PhantomError]:
        """为已存在的本地分支创建 worktree，worktree 名称即分支名"""
        return self._run_operation(
            "attach",
            branch_name,
            lambda: self._create(branch_name, branch_name, None, None, create_branch=False),
        )

    def delete(
        self,
        name: str,
        force: bool = False,
        keep_branch: bool = False,
    ) -> Result[DeleteOutcome, PhantomError]:
        """删除 worktree

        Args:
            name: worktree 名称
            force: 忽略未提交 / 未推送的改动
            keep_branch: 保留对应的分支
        """
        return self._run_operation(
            "delete",
            name,
            lambda: self._delete(name, force, keep_branch),
            force=force,
        )

    def delete_many(
        self,
        names: Sequence[str],
        force: bool = False,
        keep_branch: bool = False,
    ) -> BatchDeleteOutcome:
        """按顺序删除多个 worktree

        某个名称失败不影响后续名称；所有名称共用同一个 force 标志。
        """
        outcome = BatchDeleteOutcome()
        for name in names:
            outcome.add(name, self.delete(name, force=force, keep_branch=keep_branch))

        self.logger.info(
            "Batch delete finished",
            requested=len(names),
            succeeded=len(outcome.succeeded),
            failed=outcome.failed,
        )
        return outcome

    def list_worktrees(self, include_default: bool = True) -> Result[ListOutcome, PhantomError]:
        """列出所有已注册的 worktree

        Args:
            include_default: 是否包含主工作区（bare 仓库时为 git 目录本身）
        """
        return self._run_operation(
            "list",
            str(self.repo_root),
            lambda: Ok(self._list(include_default)),
            include_default=include_default,
        )

    def where(self, name: str) -> Result[WhereOutcome, PhantomError]:
        """返回 worktree 的路径"""

        def _where():
            located = self._locate(name)
            if located.is_err:
                return located
            path, _ = located.value
            return Ok(WhereOutcome(name=name, path=path))

        return self._run_operation("where", name, _where)

    def exec(
        self,
        name: str,
        command: Sequence[str],
        interactive: bool = False,
    ) -> Result[ExecOutcome, PhantomError]:
        """在 worktree 中执行命令

        Args:
            name: worktree 名称
            command: 命令及参数
            interactive: 是否继承终端的 stdin

        Returns:
            Ok(ExecOutcome)，命令本身的非零退出码也记录在 ExecOutcome 中
        """

        def _exec():
            located = self._locate(name)
            if located.is_err:
                return located
            path, _ = located.value
            try:
                exit_code = spawn(command, cwd=path, interactive=interactive)
            except ProcessSpawnError as e:
                return Err(e)
            return Ok(ExecOutcome(name=name, path=path, exit_code=exit_code))

        return self._run_operation("exec", name, _exec, command=list(command))

    def shell(self, name: str) -> Result[ExecOutcome, PhantomError]:
        """在 worktree 中启动交互式 shell"""
        return self.exec(name, [user_shell()], interactive=True)

    def replay_post_create(self, name: str) -> Result[CreateOutcome, PhantomError]:
        """对已存在的 worktree 重新执行 post-create

        重新读取配置文件，不做任何 git 修改。
        """

        def _replay():
            located = self._locate(name)
            if located.is_err:
                return located
            path, _ = located.value

            config_result = ConfigManager(self.repo_root).load_config()
            if config_result.is_err:
                return config_result
            post_create = config_result.value.post_create

            if post_create.is_empty:
                return Ok(CreateOutcome(name=name, message="No post-create actions configured", path=path))

            outcome = self.post_create_runner.run(path, post_create)
            return Ok(
                self._merge_outcome(
                    CreateOutcome(
                        name=name,
                        message=f"Replayed post-create actions for worktree '{name}'",
                        path=path,
                    ),
                    outcome,
                )
            )

        return self._run_operation("post_create", name, _replay)

    def current_worktree(self, cwd: Optional[Path] = None) -> Optional[str]:
        """当前目录所在的 worktree 名称，不在任何 worktree 内时返回 None"""
        return worktree_name_from_path(
            self.repo_root,
            self.config,
            cwd or Path.cwd(),
            override=self.worktrees_directory,
        )

    # ------------------------------------------------------------------
    # 内部实现
    # ------------------------------------------------------------------

    def _run_operation(self, operation: str, target: str, fn: Callable[[], Result], **context) -> Result:
        with OperationScope(operation, context={"target": target, **context}, logger=self.logger) as scope:
            try:
                result = fn()
            except (OSError, GitException) as e:
                result = Err(UnexpectedError(operation, target, e))

            if result.is_err:
                scope.fail(result.message)
            return result

    def _path_for(self, name: str) -> Path:
        return self.base_directory / name

    def _locate(self, name: str) -> Result:
        """检查 worktree 的目录存在且已在 git 中注册

        Returns:
            Ok((path, GitWorktreeEntry))，否则 Err(WorktreeNotFound)
        """
        validation = validate_worktree_name(name)
        if validation.is_err:
            return validation

        path = self._path_for(name)
        if not path.exists():
            return Err(WorktreeNotFound(name, str(path)))

        target = _resolve(path)
        for entry in self.git_client.list_worktrees():
            if _resolve(entry.path) == target:
                return Ok((path, entry))

        self.logger.warning("Directory exists but is not a registered worktree", name=name, path=str(path))
        return Err(WorktreeNotFound(name, str(path)))

    def _create(
        self,
        name: str,
        branch: str,
        commitish: Optional[str],
        copy_files: Optional[Sequence[str]],
        create_branch: bool,
    ) -> Result[CreateOutcome, PhantomError]:
        validation = validate_worktree_name(name)
        if validation.is_err:
            return validation

        path = self._path_for(name)
        if path.exists() or path.is_symlink():
            return Err(WorktreeAlreadyExists(name, str(path)))

        pipeline = _Pipeline("create" if create_branch else "attach")

        if not create_branch:
            pipeline.add_stage(self._stage_require_branch, f"Verify branch {branch} exists")

        pipeline.add_stage(self._stage_add_worktree, f"Create worktree at {path}")
        pipeline.add_stage(self._stage_post_create, "Run post-create actions")

        state = {
            "name": name,
            "branch": branch,
            "commitish": commitish,
            "path": path,
            "create_branch": create_branch,
            "copy_files": list(copy_files or []),
        }
        result = pipeline.run(state)
        if result.is_err:
            return result

        message = (
            f"Created worktree '{name}' at {path}"
            if create_branch
            else f"Attached worktree '{name}' at {path}"
        )
        return Ok(self._merge_outcome(CreateOutcome(name=name, message=message, path=path), state["post_create"]))

    def _stage_require_branch(self, state: Dict[str, Any]) -> Optional[PhantomError]:
        if not self.git_client.branch_exists(state["branch"]):
            return BranchNotFound(state["branch"])
        return None

    def _stage_add_worktree(self, state: Dict[str, Any]) -> Optional[PhantomError]:
        path: Path = state["path"]
        path.parent.mkdir(parents=True, exist_ok=True)

        result = self.git_client.add_worktree(
            path,
            branch=state["branch"],
            commitish=state["commitish"],
            create_branch=state["create_branch"],
        )
        if not result.ok:
            return GitOperationFailed("worktree add", result.stderr)

        self.logger.info("Worktree added", name=state["name"], branch=state["branch"], path=str(path))
        return None

    def _stage_post_create(self, state: Dict[str, Any]) -> Optional[PhantomError]:
        outcome = self.post_create_runner.run(
            state["path"],
            self.config.post_create,
            extra_copy_files=state["copy_files"],
        )
        if outcome.has_failures:
            self.logger.warning(
                "Post-create finished with failures",
                name=state["name"],
                kind=ErrorKind.POST_CREATE_PARTIAL_FAILURE.value,
                copy_error=outcome.copy_error,
                command_error=str(outcome.command_error) if outcome.command_error else None,
            )
        state["post_create"] = outcome
        return None

    @staticmethod
    def _merge_outcome(result: CreateOutcome, outcome: PostCreateOutcome) -> CreateOutcome:
        result.copied_files = list(outcome.copied_files)
        result.skipped_files = list(outcome.skipped_files)
        result.copy_error = outcome.copy_error
        result.executed_commands = list(outcome.executed_commands)
        result.command_error = outcome.command_error
        return result

    def _delete(self, name: str, force: bool, keep_branch: bool) -> Result[DeleteOutcome, PhantomError]:
        located = self._locate(name)
        if located.is_err:
            return located
        path, entry = located.value

        if not force:
            unsafe = self._check_safe_to_delete(name, path)
            if unsafe is not None:
                return Err(unsafe)

        hook_error = self._run_pre_delete(name, path)
        if hook_error is not None:
            return Err(hook_error)

        removed = self.git_client.remove_worktree(path, force=force)
        if not removed.ok:
            return Err(GitOperationFailed("worktree remove", removed.stderr))
        self.logger.info("Worktree removed", name=name, path=str(path))

        outcome = DeleteOutcome(name=name, message=f"Deleted worktree '{name}'", path=path, branch=entry.branch)
        if entry.branch and not keep_branch:
            self._delete_branch(outcome, entry)
        return Ok(outcome)

    def _check_safe_to_delete(self, name: str, path: Path) -> Optional[UnsafeDelete]:
        status = self.git_client.get_status(path)
        changed = [line for line in status.splitlines() if line.strip()]
        if changed:
            return UnsafeDelete(
                f"Worktree '{name}' has uncommitted changes ({len(changed)} files). "
                "Use --force to delete anyway.",
                details=status,
            )

        unpushed = self.git_client.count_unpushed_commits(path)
        if unpushed:
            return UnsafeDelete(
                f"Worktree '{name}' has unpushed commits ({unpushed} commits). "
                "Use --force to delete anyway."
            )
        return None

    def _run_pre_delete(self, name: str, path: Path) -> Optional[PreDeleteFailed]:
        for command in self.config.pre_delete.commands:
            self.logger.info("Executing pre-delete command", name=name, command=command)
            try:
                exit_code = self.command_runner(command, path)
            except ProcessSpawnError as e:
                self.logger.error("Pre-delete command could not start", command=command, error=e.message)
                exit_code = 127
            if exit_code != 0:
                failure = CommandFailure(command=command, exit_code=exit_code)
                return PreDeleteFailed(f"Pre-delete hook failed for worktree '{name}': {failure}")
        return None

    def _delete_branch(self, outcome: DeleteOutcome, entry: GitWorktreeEntry) -> None:
        branch = entry.branch
        removed_path = _resolve(entry.path)
        checked_out_elsewhere = [
            other for other in self.git_client.list_worktrees()
            if other.branch == branch and _resolve(other.path) != removed_path
        ]
        if checked_out_elsewhere:
            self.logger.info(
                "Branch kept, checked out in another worktree",
                branch=branch,
                worktree=str(checked_out_elsewhere[0].path),
            )
            return

        result = self.git_client.delete_branch(branch)
        if result.ok:
            outcome.branch_deleted = True
            outcome.message = f"Deleted worktree '{outcome.name}' and its branch '{branch}'"
            self.logger.info("Branch deleted", branch=branch)
        else:
            outcome.branch_error = result.stderr.strip()
            outcome.message += f"\nNote: Branch '{branch}' could not be deleted: {outcome.branch_error}"
            self.logger.warning("Failed to delete branch", branch=branch, error=outcome.branch_error)

    def _list(self, include_default: bool) -> ListOutcome:
        entries = self.git_client.list_worktrees()
        base = _resolve(self.base_directory)

        worktrees: List[WorktreeInfo] = []
        for index, entry in enumerate(entries):
            is_default = index == 0
            if is_default and not include_default:
                continue
            worktrees.append(
                WorktreeInfo(
                    name=self._display_name(entry, base),
                    path=entry.path,
                    branch=None if entry.is_detached else entry.branch,
                    is_clean=self._is_clean(entry),
                    is_default=is_default,
                    is_bare=entry.is_bare,
                )
            )
        return ListOutcome(worktrees=worktrees)

    @staticmethod
    def _display_name(entry: GitWorktreeEntry, base: Path) -> str:
        try:
            relative = _resolve(entry.path).relative_to(base)
            if relative.parts:
                return relative.parts[0]
        except ValueError:
            pass
        return entry.branch or entry.path.name

    def _is_clean(self, entry: GitWorktreeEntry) -> bool:
        if entry.is_bare:
            return True
        try:
            return not self.git_client.get_status(entry.path).strip()
        except GitOperationFailed as e:
            self.logger.warning("Could not read worktree status", path=str(entry.path), error=e.message)
            return False


def _resolve(path: Path) -> Path:
    try:
        return Path(path).resolve()
    except OSError:
        return Path(path).absolute()
