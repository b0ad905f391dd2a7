"""Segment showing the output of a user supplied shell command."""

from __future__ import annotations

from .core import Environment, Properties

EXECUTABLE_SHELL = "shell"
COMMAND = "command"


class Command:
    """Runs a command in a shell; supports '||' fallbacks and '&&' concatenation."""

    def __init__(self, props: Properties, env: Environment):
        self.props = props
        self.env = env
        self.value = ""

    def enabled(self) -> bool:
        shell = self.props.get_string(EXECUTABLE_SHELL, "bash")
        if not self.env.has_command(shell):
            return False
        command = self.props.get_string(COMMAND, "echo no command specified")
        if "||" in command:
            for part in command.split("||"):
                output = self.env.run_shell_command(shell, part)
                if output:
                    self.value = output
                    return True
        if "&&" in command:
            self.value = "".join(
                self.env.run_shell_command(shell, part) for part in command.split("&&")
            )
            return self.value != ""
        self.value = self.env.run_shell_command(shell, command)
        return self.value != ""

    def render(self) -> str:
        return self.value