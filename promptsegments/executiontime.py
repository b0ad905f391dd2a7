"""Segment showing how long the last command took to run."""

from __future__ import annotations

from enum import Enum

from .core import ALWAYS_ENABLED, STYLE, Environment, Properties

THRESHOLD = "threshold"

SECOND = 1000
MINUTE = 60_000
HOUR = 3_600_000
DAY = 86_400_000
SECONDS_PER_MINUTE = 60
MINUTES_PER_HOUR = 60
HOURS_PER_DAY = 24


class DurationStyle(str, Enum):
    AUSTIN = "austin"
    ROUNDROCK = "roundrock"
    DALLAS = "dallas"
    GALVESTON = "galveston"
    HOUSTON = "houston"
    AMARILLO = "amarillo"
    ROUND = "round"


def _shortest(value: float) -> str:
    """Shortest decimal form of a float, without a trailing '.0'."""
    text = repr(value)
    return text[:-2] if text.endswith(".0") else text


def format_duration_austin(ms: int) -> str:
    if ms < SECOND:
        return f"{ms % SECOND}ms"
    result = _shortest((ms % MINUTE) / SECOND) + "s"
    if ms >= MINUTE:
        result = f"{ms // MINUTE % SECONDS_PER_MINUTE}m {result}"
    if ms >= HOUR:
        result = f"{ms // HOUR % HOURS_PER_DAY}h {result}"
    if ms >= DAY:
        result = f"{ms // DAY}d {result}"
    return result


def format_duration_roundrock(ms: int) -> str:
    result = f"{ms % SECOND}ms"
    if ms >= SECOND:
        result = f"{ms // SECOND % SECONDS_PER_MINUTE}s {result}"
    if ms >= MINUTE:
        result = f"{ms // MINUTE % MINUTES_PER_HOUR}m {result}"
    if ms >= HOUR:
        result = f"{ms // HOUR % HOURS_PER_DAY}h {result}"
    if ms >= DAY:
        result = f"{ms // DAY}d {result}"
    return result


def format_duration_dallas(ms: int) -> str:
    result = _shortest((ms % MINUTE) / SECOND)
    if ms >= MINUTE:
        result = f"{ms // MINUTE % MINUTES_PER_HOUR}:{result}"
    if ms >= HOUR:
        result = f"{ms // HOUR % HOURS_PER_DAY}:{result}"
    if ms >= DAY:
        result = f"{ms // DAY}:{result}"
    return result


def format_duration_galveston(ms: int) -> str:
    return f"{ms // HOUR:02d}:{ms // MINUTE % MINUTES_PER_HOUR:02d}:{ms % MINUTE // SECOND:02d}"


def format_duration_houston(ms: int) -> str:
    milliseconds = ".0"
    if ms % SECOND > 0:
        milliseconds = _shortest((ms % SECOND) / SECOND)[1:]
    return (
        f"{ms // HOUR:02d}:{ms // MINUTE % MINUTES_PER_HOUR:02d}:"
        f"{ms % MINUTE // SECOND:02d}{milliseconds}"
    )


def format_duration_amarillo(ms: int) -> str:
    result = f"{ms // SECOND:,}"
    fraction = (ms % SECOND) / SECOND
    if fraction > 0:
        result += _shortest(fraction)[1:]
    return result + "s"


def format_duration_round(ms: int) -> str:
    def pair(one: int, two: int, one_text: str, two_text: str) -> str:
        if two == 0:
            return f"{one}{one_text}"
        return f"{one}{one_text} {two}{two_text}"

    hours = ms // HOUR % HOURS_PER_DAY
    if ms >= DAY:
        return pair(ms // DAY, hours, "d", "h")
    minutes = ms // MINUTE % SECONDS_PER_MINUTE
    if ms >= HOUR:
        return pair(hours, minutes, "h", "m")
    seconds = (ms % MINUTE) // SECOND
    if ms >= MINUTE:
        return pair(minutes, seconds, "m", "s")
    if ms >= SECOND:
        return f"{seconds}s"
    return f"{ms % SECOND}ms"


_FORMATTERS = {
    DurationStyle.AUSTIN: format_duration_austin,
    DurationStyle.ROUNDROCK: format_duration_roundrock,
    DurationStyle.DALLAS: format_duration_dallas,
    DurationStyle.GALVESTON: format_duration_galveston,
    DurationStyle.HOUSTON: format_duration_houston,
    DurationStyle.AMARILLO: format_duration_amarillo,
    DurationStyle.ROUND: format_duration_round,
}


def format_duration(ms: int, style: DurationStyle | str) -> str:
    """Format a duration in milliseconds in the given style."""
    try:
        formatter = _FORMATTERS[DurationStyle(style)]
    except ValueError:
        return f"Style: {style} is not available"
    return formatter(ms)


class ExecutionTime:
    """Shows the duration of the last command once it exceeds a threshold."""

    def __init__(self, props: Properties, env: Environment):
        self.props = props
        self.env = env
        self.output = ""

    def enabled(self) -> bool:
        always = self.props.get_bool(ALWAYS_ENABLED, False)
        elapsed = self.env.execution_time()
        threshold = self.props.get_float(THRESHOLD, 500.0)
        if not always and elapsed < threshold:
            return False
        style = self.props.get_string(STYLE, DurationStyle.AUSTIN.value)
        self.output = format_duration(int(elapsed), style)
        return self.output != ""

    def render(self) -> str:
        return self.output