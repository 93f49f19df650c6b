import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock

import anthropic
import httpx
import pytest

from copycraft.ai import ClaudeCliGenerator, ClaudeClient, create_generator
from copycraft.ai.base import INSTRUCTIONS, build_prompt
from copycraft.config import Config
from copycraft.core.errors import GenerationError


class TestBuildPrompt:
    def test_task_only(self):
        prompt = build_prompt("Do it")

        assert prompt.startswith("# Task\n\nDo it\n\n---\n\n# Important Instructions\n\n")
        assert prompt.endswith(INSTRUCTIONS)
        assert "# Memory Context" not in prompt
        assert "# Current Section Context" not in prompt

    def test_section_order(self):
        prompt = build_prompt("Do it", context="CTX", memory={"a.md": "A", "b.md": "B"})

        positions = [
            prompt.index("# Memory Context"),
            prompt.index("## a.md\n\nA"),
            prompt.index("## b.md\n\nB"),
            prompt.index("# Current Section Context\n\nCTX"),
            prompt.index("# Task\n\nDo it"),
            prompt.index("# Important Instructions"),
        ]
        assert positions == sorted(positions)


class TestClaudeCliGenerator:
    def test_prompt_goes_to_stdin(self):
        generator = ClaudeCliGenerator(["cat"])

        text = asyncio.run(generator.generate("Do it", context="CTX"))

        assert text == build_prompt("Do it", "CTX").strip()

    def test_nonzero_exit(self):
        generator = ClaudeCliGenerator(["sh", "-c", "echo boom >&2; exit 3"])

        with pytest.raises(GenerationError) as excinfo:
            asyncio.run(generator.generate("Do it"))

        assert excinfo.value.returncode == 3
        assert excinfo.value.diagnostics == "boom"
        assert "boom" in str(excinfo.value)

    def test_missing_program(self):
        generator = ClaudeCliGenerator(["copycraft-no-such-program"])

        with pytest.raises(GenerationError, match="Failed to start"):
            asyncio.run(generator.generate("Do it"))

    def test_default_command(self):
        assert ClaudeCliGenerator().command == ["claude", "--print"]


class TestClaudeClient:
    @pytest.fixture
    def client(self):
        client = ClaudeClient(api_key="test-key", max_tokens=1000)
        client.client = SimpleNamespace(messages=SimpleNamespace(create=AsyncMock()))
        return client

    def test_requires_api_key(self, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)

        with pytest.raises(ValueError):
            ClaudeClient()

    def test_streaming_only_for_long_outputs(self):
        assert not ClaudeClient(api_key="k", max_tokens=8000).use_streaming
        assert ClaudeClient(api_key="k", max_tokens=20000).use_streaming

    def test_generate(self, client):
        client.client.messages.create.return_value = SimpleNamespace(
            content=[SimpleNamespace(text="  generated  ")]
        )

        text = asyncio.run(client.generate("Do it", memory={"m.md": "M"}))

        assert text == "generated"
        kwargs = client.client.messages.create.call_args.kwargs
        assert kwargs["max_tokens"] == 1000
        assert kwargs["messages"] == [
            {"role": "user", "content": build_prompt("Do it", memory={"m.md": "M"})}
        ]

    def test_api_error_becomes_generation_error(self, client):
        request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
        client.client.messages.create.side_effect = anthropic.APIError("bad request", request, body=None)

        with pytest.raises(GenerationError, match="bad request"):
            asyncio.run(client.generate("Do it"))

        assert client.client.messages.create.call_count == 1


class TestCreateGenerator:
    def test_cli(self):
        generator = create_generator(Config(claude_command=["claude", "--print", "--verbose"]))

        assert isinstance(generator, ClaudeCliGenerator)
        assert generator.command == ["claude", "--print", "--verbose"]

    def test_api(self):
        generator = create_generator(Config(generator="api", api_key="k", model="claude-x"))

        assert isinstance(generator, ClaudeClient)
        assert generator.model == "claude-x"
