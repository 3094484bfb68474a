"""退出码

核心层只返回错误类别（ErrorKind），由这里映射为进程退出码。
"""

import sys
from typing import NoReturn, Optional

import click

from phantom.core.exceptions import ErrorKind, PhantomError

EXIT_SUCCESS = 0
EXIT_GENERAL_ERROR = 1
EXIT_NOT_FOUND = 2
EXIT_VALIDATION_ERROR = 3
EXIT_INTERRUPTED = 130

_KIND_TO_EXIT_CODE = {
    ErrorKind.NOT_FOUND: EXIT_NOT_FOUND,
    ErrorKind.BRANCH_NOT_FOUND: EXIT_NOT_FOUND,
    ErrorKind.VALIDATION_FAILURE: EXIT_VALIDATION_ERROR,
    ErrorKind.PARSE_FAILURE: EXIT_VALIDATION_ERROR,
}


def exit_code_for(kind: ErrorKind) -> int:
    """错误类别对应的退出码，未列出的类别均为一般错误"""
    return _KIND_TO_EXIT_CODE.get(kind, EXIT_GENERAL_ERROR)


def abort(error: PhantomError, formatter=None, prefix: Optional[str] = None) -> NoReturn:
    """向 stderr 输出错误并以对应的退出码退出"""
    message = f"{prefix}{error.message}" if prefix else error.message
    click.echo(formatter.error(message) if formatter else f"Error: {message}", err=True)
    sys.exit(exit_code_for(error.kind))
