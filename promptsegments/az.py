"""Segment showing the active Azure subscription."""

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

UPDATE_CONSENT_NEEDED = "Do you want to continue?"
UPDATE_MESSAGE = "AZ CLI: Update needed!"
UPDATE_FOREGROUND = "#ffffff"
UPDATE_BACKGROUND = "#ff5349"

DEFAULT_TEMPLATE = "{{.Name}}"


def _lowered(data: dict) -> dict[str, Any]:
    return {key.lower(): value for key, value in data.items()}


def _field(data: dict[str, Any], key: str, kind: type, default: Any) -> Any:
    value = data.get(key.lower())
    if value is None:
        return default
    if not isinstance(value, kind):
        raise ValueError(f"field {key} has the wrong type")
    return value


@dataclass
class AzureUser:
    name: str = ""


@dataclass
class AzureAccount:
    environment_name: str = ""
    home_tenant_id: str = ""
    id: str = ""
    is_default: bool = False
    name: str = ""
    state: str = ""
    tenant_id: str = ""
    user: Optional[AzureUser] = None

    @classmethod
    def from_json(cls, text: str) -> "AzureAccount":
        """Build an account from the output of 'az account show'."""
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError("expected a JSON object")
        fields = _lowered(data)
        user = None
        user_data = fields.get("user")
        if user_data is not None:
            if not isinstance(user_data, dict):
                raise ValueError("field user has the wrong type")
            user = AzureUser(name=_field(_lowered(user_data), "name", str, ""))
        return cls(
            environment_name=_field(fields, "environmentName", str, ""),
            home_tenant_id=_field(fields, "homeTenantId", str, ""),
            id=_field(fields, "id", str, ""),
            is_default=_field(fields, "isDefault", bool, False),
            name=_field(fields, "name", str, ""),
            state=_field(fields, "state", str, ""),
            tenant_id=_field(fields, "tenantId", str, ""),
            user=user,
        )


class Az:
    """Shows Azure account details from environment variables or the az CLI."""

    def __init__(self, props: Properties, env: Environment):
        self.props = props
        self.env = env
        self.account: Optional[AzureAccount] = None

    def render(self) -> str:
        if self.account is not None and self.account.name == UPDATE_MESSAGE:
            return UPDATE_MESSAGE
        template = self.props.get_string(SEGMENT_TEMPLATE, DEFAULT_TEMPLATE)
        try:
            return render_template(template, self.account)
        except TemplateError as err:
            return str(err)

    def enabled(self) -> bool:
        if self.get_from_env_vars():
            return True
        return self.get_from_az_cli()

    def get_from_env_vars(self) -> bool:
        environment_name = self.env.getenv("AZ_ENVIRONMENT_NAME")
        user_name = self.env.getenv("AZ_USER_NAME")
        subscription_id = self.env.getenv("AZ_SUBSCRIPTION_ID")
        account_name = self.env.getenv("AZ_ACCOUNT_NAME")
        if not user_name and not environment_name:
            return False
        self.account = AzureAccount(
            environment_name=environment_name,
            name=account_name,
            id=subscription_id,
            user=AzureUser(name=user_name),
        )
        return True

    def get_from_az_cli(self) -> bool:
        if not self.env.has_command("az"):
            return False
        try:
            output = self.env.run_command("az", "account", "show")
        except (CommandError, OSError):
            output = ""
        if not output:
            return False
        if UPDATE_CONSENT_NEEDED in output:
            self.props.foreground = UPDATE_FOREGROUND
            self.props.background = UPDATE_BACKGROUND
            self.account = AzureAccount(name=UPDATE_MESSAGE)
            return True
        self.account = AzureAccount()
        try:
            self.account = AzureAccount.from_json(output)
        except ValueError:
            return False
        return True