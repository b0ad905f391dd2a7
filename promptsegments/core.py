"""Shared building blocks: segment properties, the environment interface,
regex helpers and a small text template engine."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Protocol, runtime_checkable

DISPLAY_VERSION = "display_version"
DISPLAY_ERROR = "display_error"
ENABLE_HYPERLINK = "enable_hyperlink"
COLOR_BACKGROUND = "color_background"
SEGMENT_TEMPLATE = "template"
ALWAYS_ENABLED = "always_enabled"
STYLE = "style"

WINDOWS_PLATFORM = "windows"


@dataclass
class Properties:
    """Configuration values of a segment plus its current colours."""

    values: dict[str, Any] = field(default_factory=dict)
    foreground: str = ""
    background: str = ""

    def get_string(self, key: str, default: str) -> str:
        value = self.values.get(key)
        return value if isinstance(value, str) else default

    def get_bool(self, key: str, default: bool) -> bool:
        value = self.values.get(key)
        return value if isinstance(value, bool) else default

    def get_int(self, key: str, default: int) -> int:
        value = self.values.get(key)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return default
        return int(value)

    def get_float(self, key: str, default: float) -> float:
        value = self.values.get(key)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return default
        return float(value)

    def get_color(self, key: str, default: str) -> str:
        value = self.values.get(key)
        return value if isinstance(value, str) and value else default


@dataclass
class FileInfo:
    """A file found while walking up the directory tree."""

    path: str
    parent_folder: str = ""
    is_dir: bool = False


class CommandError(Exception):
    """A command ran but exited with a non-zero code."""

    def __init__(self, message: str = "", exit_code: int = 0):
        super().__init__(message)
        self.exit_code = exit_code


class NoBatteryError(Exception):
    """The machine reports no battery."""

    def __init__(self, message: str = "no battery"):
        super().__init__(message)


class TemplateError(Exception):
    """A segment template could not be parsed or evaluated."""

    def __init__(self, message: str = "invalid template text"):
        super().__init__(message)


@runtime_checkable
class Environment(Protocol):
    """What segments may ask of the shell environment."""

    def getenv(self, key: str) -> str: ...

    def getcwd(self) -> str: ...

    def home_dir(self) -> str: ...

    def has_command(self, command: str) -> bool: ...

    def run_command(self, command: str, *args: str) -> str: ...

    def run_shell_command(self, shell: str, command: str) -> str: ...

    def has_files(self, pattern: str) -> bool: ...

    def has_files_in_dir(self, folder: str, pattern: str) -> bool: ...

    def has_folder(self, folder: str) -> bool: ...

    def has_parent_file_path(self, path: str) -> FileInfo: ...

    def get_file_content(self, path: str) -> str: ...

    def get_folders_list(self, path: str) -> list[str]: ...

    def execution_time(self) -> float: ...

    def last_error_code(self) -> int: ...

    def get_battery_info(self) -> list: ...

    def is_wsl(self) -> bool: ...

    def runtime_goos(self) -> str: ...


def find_named_regex_match(pattern: str, text: str) -> dict[str, str]:
    """Return the named groups of the first match, or an empty dict."""
    match = re.search(pattern, text)
    if match is None:
        return {}
    return {name: value or "" for name, value in match.groupdict().items()}


def replace_all_string(pattern: str, text: str, replacement: str) -> str:
    return re.sub(pattern, replacement, text)


# --- template engine -------------------------------------------------------

_ACTION = re.compile(r"\{\{(-?)(.*?)(-?)\}\}", re.S)
_LEXEME = re.compile(r'"(?:[^"\\]|\\.)*"|[()]|[^\s()]+')
_INT = re.compile(r"-?\d+$")


def _truthy(value: Any) -> bool:
    return bool(value)


_FUNCS: dict[str, Callable[..., Any]] = {
    "not": lambda value: not _truthy(value),
    "eq": lambda first, *others: any(first == other for other in others),
    "ne": lambda a, b: a != b,
    "lt": lambda a, b: a < b,
    "le": lambda a, b: a <= b,
    "gt": lambda a, b: a > b,
    "ge": lambda a, b: a >= b,
    "and": lambda *values: all(_truthy(v) for v in values),
    "or": lambda *values: any(_truthy(v) for v in values),
}


def _snake(name: str) -> str:
    name = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", name)
    return re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", name).lower()


def _lookup(context: Any, path: str) -> Any:
    value = context
    for part in filter(None, path.split(".")):
        if value is None:
            return None
        if isinstance(value, dict):
            if part not in value:
                raise TemplateError(f"can't evaluate field {part}")
            value = value[part]
        else:
            for attr in (part, _snake(part)):
                if hasattr(value, attr):
                    value = getattr(value, attr)
                    break
            else:
                raise TemplateError(f"can't evaluate field {part}")
        if callable(value):
            value = value()
    return value


def _operand(items: list[str], pos: int, context: Any) -> tuple[Any, int]:
    item = items[pos]
    if item == "(":
        value, pos = _command(items, pos + 1, context)
        if pos >= len(items) or items[pos] != ")":
            raise TemplateError()
        return value, pos + 1
    if item.startswith('"'):
        return item[1:-1], pos + 1
    if item.startswith("."):
        return _lookup(context, item), pos + 1
    if item in ("true", "false"):
        return item == "true", pos + 1
    if _INT.match(item):
        return int(item), pos + 1
    raise TemplateError()


def _command(items: list[str], pos: int, context: Any) -> tuple[Any, int]:
    if pos >= len(items):
        raise TemplateError()
    head = items[pos]
    if head not in _FUNCS:
        return _operand(items, pos, context)
    args = []
    pos += 1
    while pos < len(items) and items[pos] != ")":
        value, pos = _operand(items, pos, context)
        args.append(value)
    try:
        return _FUNCS[head](*args), pos
    except TypeError as exc:
        raise TemplateError() from exc


def _evaluate(items: list[str], context: Any) -> Any:
    value, pos = _command(items, 0, context)
    if pos != len(items):
        raise TemplateError()
    return value


def _format(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _parse(template: str) -> list:
    pieces: list[tuple[str, str]] = []
    pos = 0
    trim_next = False
    for match in _ACTION.finditer(template):
        text = template[pos:match.start()]
        if trim_next:
            text = text.lstrip()
        if match.group(1):
            text = text.rstrip()
        pieces.append(("text", text))
        pieces.append(("action", match.group(2).strip()))
        trim_next = bool(match.group(3))
        pos = match.end()
    tail = template[pos:]
    pieces.append(("text", tail.lstrip() if trim_next else tail))

    root: list = []
    current = root
    stack: list[tuple[list, list]] = []
    for kind, value in pieces:
        if kind == "text":
            if value:
                current.append(("text", value))
            continue
        words = _LEXEME.findall(value)
        if not words:
            raise TemplateError()
        if words[0] == "if":
            node = ["if", words[1:], [], []]
            current.append(node)
            stack.append((node, current))
            current = node[2]
        elif words == ["else"]:
            if not stack:
                raise TemplateError()
            current = stack[-1][0][3]
        elif words == ["end"]:
            if not stack:
                raise TemplateError()
            current = stack.pop()[1]
        else:
            current.append(("expr", words))
    if stack:
        raise TemplateError()
    return root


def _execute(nodes: list, context: Any, out: list[str]) -> None:
    for node in nodes:
        if node[0] == "text":
            out.append(node[1])
        elif node[0] == "expr":
            out.append(_format(_evaluate(node[1], context)))
        else:
            branch = node[2] if _truthy(_evaluate(node[1], context)) else node[3]
            _execute(branch, context, out)


def render_template(template: str, context: Any) -> str:
    """Render a Go-style text template (fields, if/else/end, comparisons)."""
    out: list[str] = []
    try:
        _execute(_parse(template), context, out)
    except TypeError as exc:
        raise TemplateError() from exc
    return "".join(out)