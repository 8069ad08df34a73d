"""Prompt primitives: the shared contract, a rich console backend, and a scripted one."""

from interactive_parse.prompts.base import DEFAULT_UNDO_TOKEN, SKIP, Prompter, Skip, Skipped
from interactive_parse.prompts.console import ConsolePrompter
from interactive_parse.prompts.scripted import PromptRecord, ScriptedPrompter

__all__ = [
    "DEFAULT_UNDO_TOKEN",
    "SKIP",
    "ConsolePrompter",
    "PromptRecord",
    "Prompter",
    "ScriptedPrompter",
    "Skip",
    "Skipped",
]
