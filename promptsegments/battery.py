"""Segment showing the battery charge and state."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .core import (
    COLOR_BACKGROUND,
    DISPLAY_ERROR,
    SEGMENT_TEMPLATE,
    Environment,
    NoBatteryError,
    Properties,
    TemplateError,
    render_template,
)

CHARGING_ICON = "charging_icon"
DISCHARGING_ICON = "discharging_icon"
CHARGED_ICON = "charged_icon"
CHARGED_COLOR = "charged_color"
CHARGING_COLOR = "charging_color"
DISCHARGING_COLOR = "discharging_color"
DISPLAY_CHARGING = "display_charging"
DISPLAY_CHARGED = "display_charged"

DEFAULT_TEMPLATE = "{{.Icon}}{{ if not .Error }}{{.Percentage}}{{ end }}{{.Error}}"


class BatteryState(str, Enum):
    UNKNOWN = "Unknown"
    EMPTY = "Empty"
    FULL = "Full"
    CHARGING = "Charging"
    DISCHARGING = "Discharging"
    NOT_CHARGING = "Not charging"

    def __str__(self) -> str:
        return self.value


@dataclass
class BatteryInfo:
    current: float = 0.0
    full: float = 0.0
    state: BatteryState = BatteryState.UNKNOWN


_STATE_STYLE = {
    BatteryState.DISCHARGING: (DISCHARGING_COLOR, DISCHARGING_ICON),
    BatteryState.NOT_CHARGING: (DISCHARGING_COLOR, DISCHARGING_ICON),
    BatteryState.CHARGING: (CHARGING_COLOR, CHARGING_ICON),
    BatteryState.FULL: (CHARGED_COLOR, CHARGED_ICON),
}


def map_most_logical_state(current_state: BatteryState, new_state: BatteryState) -> BatteryState:
    """Combine the state of several batteries into the one worth showing."""
    if current_state in (BatteryState.DISCHARGING, BatteryState.NOT_CHARGING):
        return BatteryState.DISCHARGING
    if current_state == BatteryState.CHARGING:
        if new_state == BatteryState.DISCHARGING:
            return BatteryState.DISCHARGING
        return BatteryState.CHARGING
    return new_state


class Battery:
    """Shows the combined charge of all batteries with a state icon."""

    def __init__(self, props: Properties, env: Environment):
        self.props = props
        self.env = env
        self.battery: Optional[BatteryInfo] = None
        self.percentage = 0
        self.error = ""
        self.icon = ""

    def enabled(self) -> bool:
        try:
            batteries = list(self.env.get_battery_info())
            error: Optional[Exception] = None
        except Exception as exc:  # battery backends fail in many different ways
            batteries, error = [], exc

        if not self.enabled_while_error(error):
            return False
        if error is None and not batteries:
            return False

        total = BatteryInfo()
        for info in batteries:
            total.current += info.current
            total.full += info.full
            total.state = map_most_logical_state(total.state, info.state)
        self.battery = total

        if not self.props.get_bool(DISPLAY_CHARGED, True) and total.state == BatteryState.FULL:
            return False
        if not self.props.get_bool(DISPLAY_CHARGING, True) and total.state == BatteryState.CHARGING:
            return False

        ratio = total.current / total.full * 100 if total.full else 0.0
        self.percentage = int(min(100.0, ratio))

        style = _STATE_STYLE.get(total.state)
        if style is None:
            return True
        color_property, icon_property = style
        self.icon = self.props.get_string(icon_property, "")
        if self.props.get_bool(COLOR_BACKGROUND, False):
            self.props.background = self.props.get_color(color_property, self.props.background)
        else:
            self.props.foreground = self.props.get_color(color_property, self.props.foreground)
        return True

    def enabled_while_error(self, error: Optional[Exception]) -> bool:
        """Decide whether the segment still shows when reading batteries failed."""
        if error is None:
            return True
        if isinstance(error, NoBatteryError):
            return False
        if not self.props.get_bool(DISPLAY_ERROR, False):
            return False
        self.error = str(error)
        # Some systems error out when the battery is full; show it as charged.
        self.battery = BatteryInfo(current=100, full=100, state=BatteryState.FULL)
        return True

    def render(self) -> str:
        template = self.props.get_string(SEGMENT_TEMPLATE, DEFAULT_TEMPLATE)
        try:
            return render_template(template, self)
        except TemplateError as err:
            return str(err)