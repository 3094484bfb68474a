"""CLI 输出格式化工具

提供颜色、表格、列表以及 JSON 导出的格式化功能。"""

import json
from typing import List, Dict, Any, Optional


class Color:
    """ANSI 颜色代码"""
    RESET = '\033[0m'
    BOLD = '\033[1m'
    DIM = '\033[2m'

    RED = '\033[31m'
    GREEN = '\033[32m'
    YELLOW = '\033[33m'
    BLUE = '\033[34m'


class FormatterConfig:
    """格式化配置中心"""

    def __init__(self, no_color: bool = False):
        """初始化配置
        Args:
            no_color: 是否禁用颜色输出
        """
        self.no_color = no_color

    def colorize(self, text: str, color: str) -> str:
        """根据配置为文本添加 ANSI 颜色"""
        if self.no_color:
            return text
        return f"{color}{text}{Color.RESET}"


class OutputFormatter:
    """CLI 输出格式化器实现"""

    def __init__(self, config: Optional[FormatterConfig] = None):
        self.config = config or FormatterConfig()

    def success(self, message: str) -> str:
        """格式化成功消息"""
        prefix = self.config.colorize("+", Color.GREEN)
        return f"{prefix} {message}"

    def error(self, message: str) -> str:
        """格式化错误消息"""
        prefix = self.config.colorize("-", Color.RED)
        return f"{prefix} {message}"

    def warning(self, message: str) -> str:
        """格式化警告消息"""
        prefix = self.config.colorize("!", Color.YELLOW)
        return f"{prefix} {message}"

    def info(self, message: str) -> str:
        """格式化普通信息消息"""
        prefix = self.config.colorize("*", Color.BLUE)
        return f"{prefix} {message}"

    def format_table(
        self,
        headers: List[str],
        rows: List[List[Any]],
        column_widths: Optional[List[int]] = None
    ) -> str:
        """格式化对齐的表格字符串
        Args:
            headers: 表头列表
            rows: 数据行列表
            column_widths: 可选的列宽限制
        """
        if not headers:
            return ""

        if column_widths is None:
            column_widths = []
            for i, header in enumerate(headers):
                max_width = len(str(header))
                for row in rows:
                    if i < len(row):
                        max_width = max(max_width, len(str(row[i])))
                column_widths.append(max_width)

        lines = []

        header_row = "  ".join(
            str(header).ljust(column_widths[i]) for i, header in enumerate(headers)
        )
        lines.append(self.config.colorize(header_row.rstrip(), Color.BOLD))
        lines.append("  ".join("-" * width for width in column_widths))

        for row in rows:
            data_row = "  ".join(
                str(cell).ljust(column_widths[i] if i < len(column_widths) else len(str(cell)))
                for i, cell in enumerate(row)
            )
            lines.append(data_row.rstrip())

        return "\n".join(lines)

    def format_key_value(self, items: Dict[str, Any]) -> str:
        """格式化键值对列表"""
        if not items:
            return ""
        max_key_len = max(len(str(k)) for k in items.keys())
        lines = []
        for key, value in items.items():
            lines.append(f"{str(key).ljust(max_key_len)}: {value}")
        return "\n".join(lines)


class TableExporter:
    """表格数据导出工具类"""

    @staticmethod
    def to_json(headers: List[str], rows: List[List[Any]]) -> str:
        """导出为 JSON 格式"""
        data = []
        for row in rows:
            item = {}
            for i, header in enumerate(headers):
                if i < len(row):
                    item[header] = row[i]
            data.append(item)
        return json.dumps(data, ensure_ascii=False, indent=2)
