"""Configuration for copycraft."""

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from dotenv import load_dotenv

from .io.file_handler import FileHandler

DEFAULT_CONFIG_FILE = "copycraft.yaml"

GENERATORS = ("cli", "api")

# Environment variable -> config field
ENV_OVERRIDES = {
    "COPYCRAFT_CONTENT_DIR": "content_dir",
    "COPYCRAFT_MEMORY_DIR": "memory_dir",
    "COPYCRAFT_GENERATOR": "generator",
    "COPYCRAFT_MODEL": "model",
    "COPYCRAFT_LOG_LEVEL": "log_level",
}


@dataclass
class Config:
    """Central configuration for the application."""

    # Directories
    content_dir: str = "./content"
    memory_dir: str = "./memory"

    # Generation collaborator: "cli" runs the claude command, "api" calls Anthropic
    generator: str = "cli"
    claude_command: List[str] = field(default_factory=lambda: ["claude", "--print"])
    model: str = "claude-sonnet-4-20250514"
    max_tokens: int = 8000
    api_key: str = field(default_factory=lambda: os.getenv("ANTHROPIC_API_KEY", ""))

    log_level: str = "INFO"

    def __post_init__(self):
        if self.generator not in GENERATORS:
            raise ValueError(f"Unknown generator {self.generator!r}, expected one of {GENERATORS}")
        if isinstance(self.claude_command, str):
            self.claude_command = self.claude_command.split()
        self.max_tokens = int(self.max_tokens)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        """Create config from a dictionary, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")
        return cls(**data)

    @classmethod
    def load(cls, path: Optional[Union[str, Path]] = None) -> "Config":
        """Load ``.env``, then the YAML file, then environment overrides."""
        load_dotenv()

        data: Dict[str, Any] = {}
        config_path = Path(path) if path else Path.cwd() / DEFAULT_CONFIG_FILE
        if path or config_path.exists():
            data.update(FileHandler().read_yaml(config_path))

        for env_name, key in ENV_OVERRIDES.items():
            value = os.getenv(env_name)
            if value:
                data[key] = value

        api_key = os.getenv("ANTHROPIC_API_KEY")
        if api_key:
            data["api_key"] = api_key

        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        """Config as a dictionary, with the API key masked."""
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        if data["api_key"]:
            data["api_key"] = "***"
        return data
