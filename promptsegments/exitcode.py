"""Segment showing the exit status of the last command."""

from __future__ import annotations

from .core import ALWAYS_ENABLED, COLOR_BACKGROUND, Environment, Properties

DISPLAY_EXIT_CODE = "display_exit_code"
ERROR_COLOR = "error_color"
ALWAYS_NUMERIC = "always_numeric"
SUCCESS_ICON = "success_icon"
ERROR_ICON = "error_icon"

_SIGNALS = (
    "SIGHUP", "SIGINT", "SIGQUIT", "SIGILL", "SIGTRAP", "SIGIOT", "SIGBUS",
    "SIGFPE", "SIGKILL", "SIGUSR1", "SIGSEGV", "SIGUSR2", "SIGPIPE", "SIGALRM",
    "SIGTERM", "SIGSTKFLT", "SIGCHLD", "SIGCONT", "SIGSTOP", "SIGTSTP",
    "SIGTTIN", "SIGTTOU",
)

EXIT_CODE_MEANINGS: dict[int, str] = {
    1: "ERROR",
    2: "USAGE",
    126: "NOPERM",
    127: "NOTFOUND",
    **{128 + number: name for number, name in enumerate(_SIGNALS, start=1)},
}


class Exit:
    """Shows an icon and a readable meaning for a failing exit code."""

    def __init__(self, props: Properties, env: Environment):
        self.props = props
        self.env = env

    def enabled(self) -> bool:
        if self.props.get_bool(ALWAYS_ENABLED, False):
            return True
        return self.env.last_error_code() != 0

    def render(self) -> str:
        return self.get_formatted_text()

    def get_formatted_text(self) -> str:
        meaning = self.get_meaning_from_exit_code()
        code = self.env.last_error_code()
        if code == 0:
            return self.props.get_string(SUCCESS_ICON, "")
        if self.props.get_bool(COLOR_BACKGROUND, False):
            self.props.background = self.props.get_color(ERROR_COLOR, self.props.background)
        else:
            self.props.foreground = self.props.get_color(ERROR_COLOR, self.props.foreground)
        return f"{self.props.get_string(ERROR_ICON, '')}{meaning}"

    def get_meaning_from_exit_code(self) -> str:
        if not self.props.get_bool(DISPLAY_EXIT_CODE, True):
            return ""
        code = self.env.last_error_code()
        if self.props.get_bool(ALWAYS_NUMERIC, False):
            return str(code)
        return EXIT_CODE_MEANINGS.get(code, str(code))