"""结构化日志系统的单元测试"""

import json
from pathlib import Path

import pytest

from phantom.core.logger import (
    Logger,
    LoggerConfig,
    OperationScope,
    _operation_id,
    configure_logger,
    get_logger,
)


@pytest.fixture
def json_log(tmp_path):
    """将日志以 JSON 写入临时目录，返回读取函数"""
    configure_logger(LoggerConfig(log_dir=tmp_path, level="DEBUG", json_output=True))

    def read():
        log_file = tmp_path / "phantom.log"
        if not log_file.exists():
            return []
        return [json.loads(line) for line in log_file.read_text().splitlines() if line.strip()]

    yield read
    configure_logger(LoggerConfig())


class TestLoggerConfig:
    """测试 LoggerConfig 类"""

    def test_default_config(self):
        """测试默认配置"""
        config = LoggerConfig()

        assert config.log_dir is None
        assert config.level == "WARNING"
        assert config.json_output is False
        assert config.console_output is False

    def test_from_env(self, monkeypatch, tmp_path):
        """测试从环境变量读取配置"""
        monkeypatch.setenv("PHANTOM_LOG_DIR", str(tmp_path))
        monkeypatch.setenv("PHANTOM_LOG_JSON", "1")
        monkeypatch.setenv("PHANTOM_LOG_LEVEL", "info")

        config = LoggerConfig.from_env()

        assert config.log_dir == Path(tmp_path)
        assert config.json_output is True
        assert config.level == "INFO"

    def test_verbose_enables_console_debug(self, monkeypatch):
        monkeypatch.delenv("PHANTOM_LOG_LEVEL", raising=False)

        config = LoggerConfig.from_env(verbose=True)

        assert config.level == "DEBUG"
        assert config.console_output is True


class TestLogger:
    """测试 Logger 类"""

    def test_logger_creation(self):
        assert get_logger("test").name == "test"

    def test_structured_fields(self, json_log):
        """测试关键字参数作为结构化字段输出"""
        Logger("test").info("Worktree added", name="feature")

        entry = json_log()[-1]
        assert entry["event"] == "Worktree added"
        assert entry["name"] == "feature"
        assert entry["logger"] == "test"
        assert entry["level"] == "info"

    def test_bind(self, json_log):
        Logger("test").bind(repo="/repo").warning("Bound event")

        assert json_log()[-1]["repo"] == "/repo"

    def test_level_filtering(self, tmp_path):
        configure_logger(LoggerConfig(log_dir=tmp_path, level="WARNING", json_output=True))
        try:
            Logger("test").info("hidden")
            Logger("test").warning("visible")
        finally:
            configure_logger(LoggerConfig())

        events = [json.loads(line)["event"] for line in (tmp_path / "phantom.log").read_text().splitlines()]
        assert events == ["visible"]


class TestOperationScope:
    """测试操作范围"""

    def test_success_events(self, json_log):
        with OperationScope("create", context={"target": "feature"}) as scope:
            get_logger("inner").info("Inside")

        events = json_log()
        assert [e["event"] for e in events] == ["create_started", "Inside", "create_succeeded"]
        assert scope.status == "success"
        assert "duration_ms" in events[-1]
        assert {e["operation_id"] for e in events} == {scope.operation_id}
        assert _operation_id.get() == ""

    def test_rejected_operation(self, json_log):
        with OperationScope("delete", context={"target": "x"}) as scope:
            scope.fail("Worktree 'x' not found")

        events = [e["event"] for e in json_log()]
        assert events == ["delete_started", "delete_rejected", "delete_failed"]
        assert scope.status == "failure"

    def test_exception_propagates(self, json_log):
        with pytest.raises(RuntimeError):
            with OperationScope("list"):
                raise RuntimeError("boom")

        failed = json_log()[-1]
        assert failed["event"] == "list_failed"
        assert failed["error_type"] == "RuntimeError"
        assert failed["error_message"] == "boom"
