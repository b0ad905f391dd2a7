"""Segment showing the share of memory in use."""

from __future__ import annotations

from typing import Optional

import psutil

from .core import Environment, Properties

PRECISION = "precision"
USE_AVAILABLE = "use_available"
MEMORY_TYPE = "memory_type"


class Memory:
    """Percentage of physical memory or swap in use."""

    def __init__(
        self,
        props: Properties,
        env: Environment,
        total_memory: Optional[int] = None,
        free_memory: Optional[int] = None,
    ):
        self.props = props
        self.env = env
        self.total_memory = total_memory or 0
        self.free_memory = free_memory or 0
        if total_memory is None and free_memory is None:
            self.load()

    def load(self) -> None:
        """Read the current memory figures from the system."""
        if self.props.get_string(MEMORY_TYPE, "physical") == "physical":
            stats = psutil.virtual_memory()
            self.total_memory = stats.total
            if self.props.get_bool(USE_AVAILABLE, True):
                self.free_memory = stats.available
            else:
                self.free_memory = stats.free
            return
        swap = psutil.swap_memory()
        self.total_memory = swap.total
        self.free_memory = swap.free

    def enabled(self) -> bool:
        return self.total_memory != 0 and self.free_memory != 0

    def render(self) -> str:
        used = self.total_memory - self.free_memory
        percentage = 100.0 / self.total_memory * used
        precision = self.props.get_int(PRECISION, 0)
        return f"{percentage:.{precision}f}"