"""CLI 工具包导出"""

from .formatting import (
    OutputFormatter,
    FormatterConfig,
    TableExporter,
    Color
)
from .exit_codes import (
    EXIT_SUCCESS,
    EXIT_GENERAL_ERROR,
    EXIT_NOT_FOUND,
    EXIT_VALIDATION_ERROR,
    EXIT_INTERRUPTED,
    exit_code_for,
    abort,
)
from .project_utils import find_repo_root, load_context, get_formatter, RepositoryNotFoundError

__all__ = [
    'OutputFormatter',
    'FormatterConfig',
    'TableExporter',
    'Color',
    'EXIT_SUCCESS',
    'EXIT_GENERAL_ERROR',
    'EXIT_NOT_FOUND',
    'EXIT_VALIDATION_ERROR',
    'EXIT_INTERRUPTED',
    'exit_code_for',
    'abort',
    'find_repo_root',
    'load_context',
    'get_formatter',
    'RepositoryNotFoundError',
]
