"""Generic language segment: detect project files and report a tool version."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, Optional

from .core import (
    COLOR_BACKGROUND,
    DISPLAY_ERROR,
    DISPLAY_VERSION,
    ENABLE_HYPERLINK,
    CommandError,
    Environment,
    Properties,
    find_named_regex_match,
)

DISPLAY_MODE = "display_mode"
DISPLAY_MODE_ALWAYS = "always"
DISPLAY_MODE_FILES = "files"
DISPLAY_MODE_ENVIRONMENT = "environment"
DISPLAY_MODE_CONTEXT = "context"
MISSING_COMMAND_TEXT = "missing_command_text"
VERSION_MISMATCH_COLOR = "version_mismatch_color"
ENABLE_VERSION_MISMATCH = "enable_version_mismatch"
HOME_ENABLED = "home_enabled"

_VERB = re.compile(r"%%|%(?:\[(\d+)\])?(-?)(\d*)s")


class LanguageError(Exception):
    """The version of a language tool could not be determined."""


def _sprintf(fmt: str, args: list[str]) -> str:
    index = 0

    def substitute(match: re.Match) -> str:
        nonlocal index
        if match.group(0) == "%%":
            return "%"
        if match.group(1):
            index = int(match.group(1)) - 1
        value = args[index] if 0 <= index < len(args) else "%!s(MISSING)"
        index += 1
        width = int(match.group(3)) if match.group(3) else 0
        return value.ljust(width) if match.group(2) else value.rjust(width)

    return _VERB.sub(substitute, fmt)


@dataclass
class Version:
    full: str = ""
    major: str = ""
    minor: str = ""
    patch: str = ""


@dataclass
class VersionCommand:
    """An executable whose output reveals a version."""

    executable: str
    args: list[str] = field(default_factory=list)
    regex: str = ""
    version: Optional[Version] = None

    def parse(self, version_info: str) -> None:
        values = find_named_regex_match(self.regex, version_info)
        if not values:
            raise ValueError("cannot parse version string")
        self.version = Version(
            full=values.get("version", ""),
            major=values.get("major", ""),
            minor=values.get("minor", ""),
            patch=values.get("patch", ""),
        )

    def build_version_url(self, template: str) -> str:
        version = self.version
        if not template:
            return version.full
        args = [version.full, version.major, version.minor, version.patch]
        placeholders = template.count("%s")
        if placeholders > len(args):
            return version.full
        if placeholders:
            args = args[:placeholders]
        return _sprintf(template, args)


@dataclass
class Language:
    props: Properties
    env: Environment
    extensions: list[str] = field(default_factory=list)
    commands: list[VersionCommand] = field(default_factory=list)
    version_url_template: str = ""
    active_command: Optional[VersionCommand] = None
    exit_code: int = 0
    load_context: Optional[Callable[[], None]] = None
    in_context: Optional[Callable[[], bool]] = None
    matches_version_file: Optional[Callable[[], bool]] = None

    def render(self) -> str:
        if not self.props.get_bool(DISPLAY_VERSION, True):
            return ""
        try:
            self.set_version()
        except LanguageError as err:
            return str(err) if self.props.get_bool(DISPLAY_ERROR, True) else ""
        if self.props.get_bool(ENABLE_HYPERLINK, False):
            return self.active_command.build_version_url(self.version_url_template)
        if self.props.get_bool(ENABLE_VERSION_MISMATCH, False):
            self.set_version_file_mismatch()
        return self.active_command.version.full

    def enabled(self) -> bool:
        in_home = self.env.getcwd() == self.env.home_dir()
        if in_home and not self.props.get_bool(HOME_ENABLED, False):
            return False
        mode = self.props.get_string(DISPLAY_MODE, DISPLAY_MODE_FILES)
        self.load_language_context()
        if mode == DISPLAY_MODE_ALWAYS:
            return True
        if mode == DISPLAY_MODE_ENVIRONMENT:
            return self.in_language_context()
        if mode == DISPLAY_MODE_FILES:
            return self.has_language_files()
        return self.has_language_files() or self.in_language_context()

    def has_language_files(self) -> bool:
        if not self.extensions:
            return True
        return any(self.env.has_files(ext) for ext in self.extensions)

    def set_version(self) -> None:
        """Find the first available command and parse its version.

        Raises LanguageError when no version can be obtained."""
        for command in self.commands:
            if not self.env.has_command(command.executable):
                continue
            try:
                output = self.env.run_command(command.executable, *command.args)
            except CommandError as err:
                self.exit_code = err.exit_code
                raise LanguageError(
                    f"err executing {command.executable} with [{' '.join(command.args)}]"
                ) from err
            if not output:
                continue
            try:
                command.parse(output)
            except ValueError as err:
                raise LanguageError(
                    f"err parsing info from {command.executable} with {output}"
                ) from err
            self.active_command = command
            return
        raise LanguageError(self.props.get_string(MISSING_COMMAND_TEXT, ""))

    def load_language_context(self) -> None:
        if self.load_context is not None:
            self.load_context()

    def in_language_context(self) -> bool:
        return self.in_context is not None and self.in_context()

    def set_version_file_mismatch(self) -> None:
        if self.matches_version_file is None or self.matches_version_file():
            return
        if self.props.get_bool(COLOR_BACKGROUND, False):
            self.props.background = self.props.get_color(VERSION_MISMATCH_COLOR, self.props.background)
            return
        self.props.foreground = self.props.get_color(VERSION_MISMATCH_COLOR, self.props.foreground)