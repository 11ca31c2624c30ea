"""Prompt construction package."""

from serene.services.prompt.prompt_builder import BuiltPrompt, InlinePart, PromptBuilder

__all__ = ["BuiltPrompt", "InlinePart", "PromptBuilder"]
