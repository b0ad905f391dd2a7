"""Prompt segments that describe the shell's current context: git, language
tool versions, execution time, exit codes, battery, memory and more."""

__version__ = "0.1.0"