"""Generation collaborator interface and prompt assembly."""

from typing import Dict, Optional, Protocol


INSTRUCTIONS = (
    "Return ONLY the generated content as plain text. Do NOT write to files, "
    "do NOT execute commands. You MAY use web search if needed to gather "
    "information. Just output the text content directly."
)


class Generator(Protocol):
    """Turns a prompt, optional context and optional memory into text."""

    async def generate(
        self,
        prompt: str,
        context: Optional[str] = None,
        memory: Optional[Dict[str, str]] = None,
    ) -> str:
        ...


def build_prompt(
    prompt: str,
    context: Optional[str] = None,
    memory: Optional[Dict[str, str]] = None,
) -> str:
    """Assemble the full prompt: memory, section context, task, instructions."""
    parts = []

    if memory:
        parts.append("# Memory Context\n\n")
        for filename, content in memory.items():
            parts.append(f"## {filename}\n\n{content}\n\n")
        parts.append("---\n\n")

    if context:
        parts.append("# Current Section Context\n\n")
        parts.append(f"{context}\n\n")
        parts.append("---\n\n")

    parts.append("# Task\n\n")
    parts.append(prompt)
    parts.append("\n\n---\n\n")
    parts.append("# Important Instructions\n\n")
    parts.append(INSTRUCTIONS)

    return "".join(parts)
