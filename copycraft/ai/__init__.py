"""Generation collaborators and task marker processing."""

from .base import Generator, build_prompt
from .claude_cli import ClaudeCliGenerator
from .claude_client import ClaudeClient
from .processor import SegmentProcessor, ProcessResult, SegmentResult, DocumentSegmentResult

__all__ = [
    "Generator",
    "build_prompt",
    "ClaudeCliGenerator",
    "ClaudeClient",
    "SegmentProcessor",
    "ProcessResult",
    "SegmentResult",
    "DocumentSegmentResult",
    "create_generator",
]


def create_generator(config) -> Generator:
    """Build the generator selected by ``config.generator``."""
    if config.generator == "api":
        return ClaudeClient(api_key=config.api_key, model=config.model, max_tokens=config.max_tokens)
    return ClaudeCliGenerator(config.claude_command)
