"""Settings read from the environment."""

import os
from dataclasses import dataclass
from pathlib import Path

from .errors import ConfigurationError
from .models import DEEPSEEK_URL, DEFAULT_MODEL, ModelGateway


@dataclass
class Settings:
    api_key: str = ""
    api_url: str = DEEPSEEK_URL
    model: str = DEFAULT_MODEL
    sessions_dir: Path = Path.home() / ".govmind" / "sessions"

    @classmethod
    def from_env(cls) -> "Settings":
        sessions_dir = os.environ.get("GOVMIND_SESSIONS_DIR")
        return cls(
            api_key=os.environ.get("DEEPSEEK_API_KEY", ""),
            api_url=os.environ.get("GOVMIND_API_URL") or DEEPSEEK_URL,
            model=os.environ.get("GOVMIND_MODEL") or DEFAULT_MODEL,
            sessions_dir=Path(sessions_dir).expanduser() if sessions_dir else cls.sessions_dir,
        )

    def gateway(self) -> ModelGateway:
        if not self.api_key:
            raise ConfigurationError(
                "DEEPSEEK_API_KEY environment variable is not set. "
                "Set it, or pass --mock to run offline."
            )
        return ModelGateway(api_key=self.api_key, url=self.api_url, model=self.model)
