"""Shared fixtures for copycraft tests."""

import pytest

from copycraft.core.errors import GenerationError
from copycraft.io.content_store import ContentStore
from copycraft.io.memory_store import MemoryStore


class FakeGenerator:
    """Records calls and answers from a table, or with ``[prompt]``."""

    def __init__(self, responses=None, fail_on=()):
        self.responses = responses or {}
        self.fail_on = set(fail_on)
        self.calls = []

    async def generate(self, prompt, context=None, memory=None):
        self.calls.append({"prompt": prompt, "context": context, "memory": memory})
        if prompt in self.fail_on:
            raise GenerationError("claude exited with code 1", returncode=1, diagnostics="rate limited")
        return self.responses.get(prompt, f"[{prompt}]")


@pytest.fixture
def make_generator():
    return FakeGenerator


@pytest.fixture
def generator():
    return FakeGenerator()


@pytest.fixture
def store(tmp_path):
    return ContentStore(tmp_path / "content")


@pytest.fixture
def memory_store(tmp_path):
    return MemoryStore(tmp_path / "memory")


@pytest.fixture
def sample_tree(store):
    """Two modules imported from a flat document."""
    store.import_flat(
        "=== Getting Started ===\n"
        "--- Basics ---\n"
        "+++ Welcome +++\n"
        "Hello <agent><prompt>greet the reader</prompt></agent>\n"
        "+++ Setup +++\n"
        "Install things.\n"
        "--- Next Steps ---\n"
        "+++ Explore +++\n"
        "Look around.\n"
        "=== Advanced ===\n"
        "--- Internals ---\n"
        "+++ Deep Dive +++\n"
        "<agent><research>find sources</research></agent>\n"
    )
    return store
