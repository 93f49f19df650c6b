"""Generation through the headless ``claude`` command line tool."""

import asyncio
import logging
from typing import Dict, List, Optional

from ..core.errors import GenerationError
from .base import build_prompt

logger = logging.getLogger(__name__)

DEFAULT_COMMAND = ["claude", "--print"]


class ClaudeCliGenerator:
    """Runs ``claude --print`` with the prompt on stdin and returns stdout."""

    def __init__(self, command: Optional[List[str]] = None):
        self.command = list(command or DEFAULT_COMMAND)

    async def generate(
        self,
        prompt: str,
        context: Optional[str] = None,
        memory: Optional[Dict[str, str]] = None,
    ) -> str:
        full_prompt = build_prompt(prompt, context, memory)
        program = self.command[0]

        try:
            process = await asyncio.create_subprocess_exec(
                *self.command,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.error(f"Failed to start {program}: {e}")
            raise GenerationError(f"Failed to start {program}: {e}") from e

        stdout, stderr = await process.communicate(full_prompt.encode("utf-8"))

        if process.returncode != 0:
            diagnostics = stderr.decode("utf-8", errors="replace").strip()
            logger.error(f"{program} exited with code {process.returncode}")
            raise GenerationError(
                f"{program} exited with code {process.returncode}",
                returncode=process.returncode,
                diagnostics=diagnostics,
            )

        return stdout.decode("utf-8", errors="replace").strip()
