"""结构化日志系统

基于 structlog 的日志记录器，并提供 OperationScope 追踪每个生命周期操作的耗时与结果。
"""

import contextvars
import logging
import os
import time
import uuid
from pathlib import Path
from typing import Any, Dict, Optional

import structlog


_operation_id: contextvars.ContextVar[str] = contextvars.ContextVar(
    "operation_id", default=""
)


class LoggerConfig:
    """日志配置类"""

    def __init__(
        self,
        log_dir: Optional[Path] = None,
        level: str = "WARNING",
        json_output: bool = False,
        console_output: bool = False,
    ):
        """初始化日志配置

        Args:
            log_dir: 日志目录，如果为 None 则不写入文件
            level: 日志级别 (DEBUG, INFO, WARNING, ERROR)
            json_output: 是否输出 JSON 格式
            console_output: 是否输出到控制台（stderr）
        """
        self.log_dir = Path(log_dir) if log_dir else None
        self.level = level
        self.json_output = json_output
        self.console_output = console_output

    @classmethod
    def from_env(cls, verbose: bool = False) -> "LoggerConfig":
        """根据环境变量构造配置

        PHANTOM_LOG_DIR 指定日志目录，PHANTOM_LOG_JSON=1 切换为 JSON 输出，
        PHANTOM_LOG_LEVEL 覆盖日志级别。
        """
        level = os.environ.get("PHANTOM_LOG_LEVEL", "DEBUG" if verbose else "WARNING")
        return cls(
            log_dir=os.environ.get("PHANTOM_LOG_DIR") or None,
            level=level.upper(),
            json_output=os.environ.get("PHANTOM_LOG_JSON") == "1",
            console_output=verbose,
        )


def _setup_structlog(config: LoggerConfig) -> None:
    """配置 structlog 与标准库 logging"""
    handlers = []

    if config.console_output:
        handlers.append(logging.StreamHandler())

    if config.log_dir:
        config.log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(config.log_dir / "phantom.log"))

    if not handlers:
        handlers.append(logging.NullHandler())

    logging.basicConfig(
        handlers=handlers,
        level=getattr(logging, config.level, logging.WARNING),
        format="%(message)s",
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
            if config.json_output
            else structlog.dev.ConsoleRenderer(colors=False),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


class Logger:
    """结构化日志记录器

    对 structlog 的薄封装，自动附加当前操作 ID。
    """

    def __init__(self, name: str = "phantom"):
        self.name = name
        self.logger = structlog.get_logger(name)

    def debug(self, event: str, **kwargs) -> None:
        self._log("debug", event, **kwargs)

    def info(self, event: str, **kwargs) -> None:
        self._log("info", event, **kwargs)

    def warning(self, event: str, **kwargs) -> None:
        self._log("warning", event, **kwargs)

    def error(self, event: str, **kwargs) -> None:
        self._log("error", event, **kwargs)

    def bind(self, **kwargs) -> "Logger":
        """绑定上下文信息，返回新的记录器"""
        new_logger = Logger(self.name)
        new_logger.logger = self.logger.bind(**kwargs)
        return new_logger

    def _log(self, level: str, event: str, **kwargs) -> None:
        operation_id = _operation_id.get()
        if operation_id:
            kwargs.setdefault("operation_id", operation_id)
        getattr(self.logger, level)(event, **kwargs)


class OperationScope:
    """操作范围上下文管理器

    记录 `<name>_started` 与 `<name>_succeeded` / `<name>_failed` 事件，
    期间产生的日志都带上同一个 operation_id。异常不会被吞掉。
    """

    def __init__(
        self,
        operation_name: str,
        context: Optional[Dict[str, Any]] = None,
        logger: Optional[Logger] = None,
    ):
        self.operation_name = operation_name
        self.context = context or {}
        self.logger = logger or get_logger("operation")
        self.operation_id = str(uuid.uuid4())
        self.status = "pending"
        self.duration_ms = 0
        self._start = 0.0
        self._token = None

    def __enter__(self) -> "OperationScope":
        self._token = _operation_id.set(self.operation_id)
        self._start = time.monotonic()
        self.status = "running"
        self.logger.info(f"{self.operation_name}_started", **self.context)
        return self

    def fail(self, reason: str) -> None:
        """将操作标记为失败（不抛出异常的失败路径）"""
        self.status = "failure"
        self.logger.warning(f"{self.operation_name}_rejected", reason=reason, **self.context)

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.duration_ms = int((time.monotonic() - self._start) * 1000)
        if exc_type is not None:
            self.status = "failure"
            self.logger.error(
                f"{self.operation_name}_failed",
                duration_ms=self.duration_ms,
                error_type=exc_type.__name__,
                error_message=str(exc_val),
                **self.context,
            )
        elif self.status == "failure":
            self.logger.info(
                f"{self.operation_name}_failed",
                duration_ms=self.duration_ms,
                **self.context,
            )
        else:
            self.status = "success"
            self.logger.info(
                f"{self.operation_name}_succeeded",
                duration_ms=self.duration_ms,
                **self.context,
            )

        if self._token is not None:
            _operation_id.reset(self._token)
        return False


_configured = False


def get_logger(name: str = "phantom") -> Logger:
    """获取日志记录器实例

    首次调用时使用默认配置（不输出）初始化 structlog。
    """
    global _configured

    if not _configured:
        _setup_structlog(LoggerConfig())
        _configured = True

    return Logger(name)


def configure_logger(config: LoggerConfig) -> None:
    """按给定配置重新初始化全局日志"""
    global _configured
    _setup_structlog(config)
    _configured = True
