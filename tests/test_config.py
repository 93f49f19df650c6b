import pytest

from copycraft.config import ENV_OVERRIDES, Config


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for name in list(ENV_OVERRIDES) + ["ANTHROPIC_API_KEY"]:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_defaults(clean_env):
    config = Config()

    assert config.content_dir == "./content"
    assert config.memory_dir == "./memory"
    assert config.generator == "cli"
    assert config.claude_command == ["claude", "--print"]
    assert config.api_key == ""


def test_load_without_file(clean_env):
    assert Config.load() == Config()


def test_load_yaml(clean_env):
    path = clean_env / "settings.yaml"
    path.write_text("content_dir: ./book\ngenerator: api\nmax_tokens: '12000'\n", encoding="utf-8")

    config = Config.load(path)

    assert config.content_dir == "./book"
    assert config.generator == "api"
    assert config.max_tokens == 12000


def test_default_file_in_working_directory(clean_env):
    (clean_env / "copycraft.yaml").write_text("memory_dir: ./notes\n", encoding="utf-8")

    assert Config.load().memory_dir == "./notes"


def test_environment_overrides_file(clean_env, monkeypatch):
    (clean_env / "copycraft.yaml").write_text("content_dir: ./from-file\n", encoding="utf-8")
    monkeypatch.setenv("COPYCRAFT_CONTENT_DIR", "./from-env")
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-test")

    config = Config.load()

    assert config.content_dir == "./from-env"
    assert config.api_key == "sk-test"


def test_unknown_key(clean_env):
    (clean_env / "copycraft.yaml").write_text("colour: blue\n", encoding="utf-8")

    with pytest.raises(ValueError, match="colour"):
        Config.load()


def test_invalid_generator(clean_env):
    with pytest.raises(ValueError):
        Config(generator="gpt")


def test_command_string_is_split(clean_env):
    assert Config(claude_command="claude --print --verbose").claude_command == [
        "claude", "--print", "--verbose"
    ]


def test_to_dict_masks_api_key(clean_env):
    data = Config(api_key="sk-secret").to_dict()

    assert data["api_key"] == "***"
    assert data["generator"] == "cli"
