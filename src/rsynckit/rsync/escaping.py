# src/rsynckit/rsync/escaping.py
"""
Shell escaping and path normalization for rsync arguments.

The command is run through a shell, so every value that ends up in the
argument list has to survive being re-parsed by it.
"""

import re
import typing

EscapeFunction = typing.Callable[[str], str]
# True/None -> default escaping, False -> no escaping, callable -> custom
EscapeSpec = typing.Union[bool, None, EscapeFunction]

_NEEDS_ESCAPING = re.compile(r"[\"'`\\$ ]")
_ESCAPED_CHARS = re.compile(r"([\"'`\\$])")
_DRIVE_LETTER = re.compile(r"^[A-Za-z]:")
_SEPARATORS = re.compile(r"[\\/]+")


def escape_shell_arg(arg: str) -> str:
    """
    Escapes an argument for use in a shell command when necessary.

    Arguments without quotes, backticks, backslashes, dollar signs or
    spaces are returned unchanged. Anything else is wrapped in double
    quotes with the special characters backslash-escaped.
    """
    if not _NEEDS_ESCAPING.search(arg):
        return arg
    return '"' + _ESCAPED_CHARS.sub(r"\\\1", arg) + '"'


def no_escape(arg: str) -> str:
    return arg


def resolve_escape(escape: EscapeSpec) -> EscapeFunction:
    """Turns an escape setting into the function to apply."""
    if escape is None or escape is True:
        return escape_shell_arg
    if escape is False:
        return no_escape
    if callable(escape):
        return escape
    raise TypeError(f"escape must be a bool or a callable, got {type(escape).__name__}")


def unixify(path: str, platform: str) -> str:
    """
    Rewrites a Windows path into the POSIX form rsync expects.

    On win32 the drive letter is dropped and backslashes become forward
    slashes (C:\\a\\b -> /a/b). Other platforms get the path back as is.
    """
    if platform != "win32":
        return path
    path = _DRIVE_LETTER.sub("", path)
    return _SEPARATORS.sub("/", path)
