"""Narration prompts and the OpenAI script generator."""

from .openai_client import OpenAIScriptGenerator
from .prompts import NARRATION_PROMPTS, PromptMessages, build_messages, get_prompt

__all__ = ["NARRATION_PROMPTS", "OpenAIScriptGenerator", "PromptMessages", "build_messages", "get_prompt"]
