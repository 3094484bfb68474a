"""子进程执行

在指定目录中运行用户命令：exec 与 post-create/preDelete 命令都经由这里。
"""

import os
import subprocess
from pathlib import Path
from typing import Optional, Sequence

from phantom.core.exceptions import ProcessSpawnError
from phantom.core.logger import get_logger

logger = get_logger("process")

DEFAULT_SHELL = "/bin/sh"


def user_shell() -> str:
    """$SHELL，未设置时为 /bin/sh"""
    return os.environ.get("SHELL") or DEFAULT_SHELL


def spawn(
    command: Sequence[str],
    cwd: Path,
    interactive: bool = False,
    env: Optional[dict] = None,
) -> int:
    """运行命令并等待结束

    Args:
        command: 命令及参数
        cwd: 工作目录
        interactive: True 时继承终端的 stdin；否则 stdin 为空
        env: 额外的环境变量

    Returns:
        退出码

    Raises:
        ProcessSpawnError: 命令无法启动时抛出
    """
    if not command:
        raise ProcessSpawnError("No command given")

    process_env = None
    if env:
        process_env = dict(os.environ)
        process_env.update(env)

    logger.debug("Spawning process", command=list(command), cwd=str(cwd), interactive=interactive)

    try:
        completed = subprocess.run(
            list(command),
            cwd=cwd,
            stdin=None if interactive else subprocess.DEVNULL,
            env=process_env,
            check=False,
        )
    except OSError as e:
        logger.error("Failed to spawn process", command=list(command), error=str(e))
        raise ProcessSpawnError(f"Failed to execute '{command[0]}': {e}", details=str(cwd)) from e

    logger.debug("Process exited", command=list(command), exit_code=completed.returncode)
    return completed.returncode


def run_shell_command(command: str, cwd: Path, env: Optional[dict] = None) -> int:
    """通过用户 shell 执行一条命令字符串"""
    return spawn([user_shell(), "-c", command], cwd=cwd, env=env)
