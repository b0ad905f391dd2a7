"""Segment showing the current Kubernetes context and namespace."""

from __future__ import annotations

from .core import (
    DISPLAY_ERROR,
    SEGMENT_TEMPLATE,
    CommandError,
    Environment,
    Properties,
    TemplateError,
    render_template,
)

DEFAULT_TEMPLATE = "{{.Context}}{{if .Namespace}} :: {{.Namespace}}{{end}}"
ERROR_TEXT = "KUBECTL ERR"


class Kubectl:
    """Shows the active kubectl context and namespace."""

    def __init__(self, props: Properties, env: Environment):
        self.props = props
        self.env = env
        self.context = ""
        self.namespace = ""

    def render(self) -> str:
        template = self.props.get_string(SEGMENT_TEMPLATE, DEFAULT_TEMPLATE)
        try:
            return render_template(template, self)
        except TemplateError as err:
            return str(err)

    def enabled(self) -> bool:
        if not self.env.has_command("kubectl"):
            return False
        try:
            result = self.env.run_command(
                "kubectl", "config", "view", "--minify", "--output",
                "jsonpath={..current-context},{..namespace}",
            )
        except (CommandError, OSError):
            if self.props.get_bool(DISPLAY_ERROR, False):
                self.context = ERROR_TEXT
                self.namespace = ERROR_TEXT
                return True
            return False
        values = result.split(",")
        self.context = values[0]
        self.namespace = values[1] if len(values) > 1 else ""
        return self.context != ""