"""Segment showing the version computed by Nerdbank.GitVersioning."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Optional

from .core import (
    SEGMENT_TEMPLATE,
    CommandError,
    Environment,
    Properties,
    TemplateError,
    render_template,
)

DEFAULT_TEMPLATE = "{{ .Version }}"


def _field(data: dict[str, Any], key: str, kind: type, default: Any) -> Any:
    value = data.get(key.lower())
    if value is None:
        return default
    if not isinstance(value, kind):
        raise ValueError(f"field {key} has the wrong type")
    return value


@dataclass
class NbgvVersionInfo:
    version_file_found: bool = False
    version: str = ""
    assembly_version: str = ""
    assembly_informational_version: str = ""
    nu_get_package_version: str = ""
    chocolatey_package_version: str = ""
    npm_package_version: str = ""
    simple_version: str = ""

    @classmethod
    def from_json(cls, text: str) -> "NbgvVersionInfo":
        """Build the version info from 'nbgv get-version --format=json'."""
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError("expected a JSON object")
        fields = {key.lower(): value for key, value in data.items()}
        return cls(
            version_file_found=_field(fields, "VersionFileFound", bool, False),
            version=_field(fields, "Version", str, ""),
            assembly_version=_field(fields, "AssemblyVersion", str, ""),
            assembly_informational_version=_field(fields, "AssemblyInformationalVersion", str, ""),
            nu_get_package_version=_field(fields, "NuGetPackageVersion", str, ""),
            chocolatey_package_version=_field(fields, "ChocolateyPackageVersion", str, ""),
            npm_package_version=_field(fields, "NpmPackageVersion", str, ""),
            simple_version=_field(fields, "SimpleVersion", str, ""),
        )


class Nbgv:
    """Shows version details when the repository has a version file."""

    def __init__(self, props: Properties, env: Environment):
        self.props = props
        self.env = env
        self.info: Optional[NbgvVersionInfo] = None

    def enabled(self) -> bool:
        if not self.env.has_command("nbgv"):
            return False
        try:
            response = self.env.run_command("nbgv", "get-version", "--format=json")
        except (CommandError, OSError):
            return False
        try:
            self.info = NbgvVersionInfo.from_json(response)
        except ValueError:
            return False
        return self.info.version_file_found

    def render(self) -> str:
        template = self.props.get_string(SEGMENT_TEMPLATE, DEFAULT_TEMPLATE)
        try:
            return render_template(template, self.info)
        except TemplateError as err:
            return str(err)