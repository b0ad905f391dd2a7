"""Segment showing the value of an environment variable."""

from __future__ import annotations

from .core import Environment, Properties

VAR_NAME = "var_name"


class EnvVar:
    """Shows the content of the variable named by the var_name property."""

    def __init__(self, props: Properties, env: Environment):
        self.props = props
        self.env = env
        self.content = ""

    def enabled(self) -> bool:
        name = self.props.get_string(VAR_NAME, "")
        self.content = self.env.getenv(name)
        return self.content != ""

    def render(self) -> str:
        return self.content