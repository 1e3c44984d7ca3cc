import json
import os
import shutil

from dataclasses import dataclass, field
from typing import Optional

from .errors import ConfigIOError, CredentialMissing


CONFIG_DIR_NAME = ".dingus-aid"
CONFIG_FILE_NAME = "config.json"
HISTORY_FILE_NAME = "history.json"
API_KEY_FIELD = "OPENAI_API_KEY"

DEFAULT_MODEL = "openai:gpt-4o-mini"

# USD per million tokens for gpt-4o-mini.
INPUT_TOKEN_COST = 0.15
OUTPUT_TOKEN_COST = 0.60


@dataclass
class Settings:
    """Everything an invocation needs to know, built once in the CLI and passed down."""

    config_dir: str
    model: str = DEFAULT_MODEL
    max_tokens: int = 100
    history_size: int = 8
    history_words: int = 160
    input_token_cost: float = INPUT_TOKEN_COST
    output_token_cost: float = OUTPUT_TOKEN_COST
    api_key: Optional[str] = field(default=None, repr=False)

    @property
    def config_file(self) -> str:
        return os.path.join(self.config_dir, CONFIG_FILE_NAME)

    @property
    def history_file(self) -> str:
        return os.path.join(self.config_dir, HISTORY_FILE_NAME)

    @property
    def provider_configs(self) -> dict:
        provider = self.model.split(":", 1)[0]
        return {provider: {"api_key": self.api_key}}

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Builds the settings from the environment.

        `DINGUS_AID_HOME` replaces the default `~/.dingus-aid` directory and
        `DINGUS_AID_MODEL` replaces the aisuite `provider:model` identifier.
        """
        config_dir = os.getenv("DINGUS_AID_HOME")
        if not config_dir:
            home = os.path.expanduser("~")
            if home == "~" or not home:
                raise ConfigIOError("failed to get home directory")
            config_dir = os.path.join(home, CONFIG_DIR_NAME)

        return cls(
            config_dir=config_dir,
            model=os.getenv("DINGUS_AID_MODEL") or DEFAULT_MODEL,
        )


class CredentialStore:
    """Reads and writes the API key kept in `config.json`."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def load(self) -> Optional[str]:
        """Returns the stored API key, or None if there is no usable one."""
        path = self.settings.config_file
        if not os.path.exists(path):
            return None

        try:
            with open(path, "r", encoding="utf-8") as config_file:
                data = json.load(config_file)
        except json.JSONDecodeError:
            return None
        except OSError as e:
            raise ConfigIOError(f"failed to read {path}: {e}") from e

        if not isinstance(data, dict):
            return None
        api_key = data.get(API_KEY_FIELD)
        if not isinstance(api_key, str) or not api_key:
            return None
        return api_key

    def require(self) -> str:
        api_key = self.load()
        if api_key is None:
            raise CredentialMissing(f"API key not found in {self.settings.config_file}")
        return api_key

    def save(self, api_key: str):
        path = self.settings.config_file
        try:
            os.makedirs(self.settings.config_dir, mode=0o755, exist_ok=True)
            # Open with 0600 up front so the key is never world readable.
            fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "w", encoding="utf-8") as config_file:
                json.dump({API_KEY_FIELD: api_key}, config_file, indent=2)
            os.chmod(path, 0o600)
        except OSError as e:
            raise ConfigIOError(f"failed to write {path}: {e}") from e

    def erase(self):
        """Removes the whole configuration directory. Missing is fine."""
        try:
            shutil.rmtree(self.settings.config_dir)
        except FileNotFoundError:
            pass
        except OSError as e:
            raise ConfigIOError(f"failed to remove config files: {e}") from e
