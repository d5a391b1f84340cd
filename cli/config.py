"""
CLI Configuration Management
"""

import os
import json
from pathlib import Path
from dataclasses import dataclass, field, fields


@dataclass
class CLIConfig:
    """Configuration for the ComplaintDesk CLI"""

    # API settings
    api_base_url: str = "http://localhost:8000/api/v1"
    timeout: float = 30.0

    # Paths; a relative credentials_file lives under config_dir
    config_dir: str = field(default_factory=lambda: str(Path.home() / ".complaintdesk"))
    credentials_file: str = "credentials.json"

    def __post_init__(self):
        self.api_base_url = self.api_base_url.rstrip("/")

    @property
    def credentials_path(self) -> str:
        if os.path.isabs(self.credentials_file):
            return self.credentials_file
        return str(Path(self.config_dir).expanduser() / self.credentials_file)

    def load_from_file(self, config_path: str) -> None:
        """Load configuration from JSON file"""
        path = Path(config_path)
        if path.exists():
            with open(path) as f:
                data = json.load(f)
                known = {item.name for item in fields(self)}
                for key, value in data.items():
                    if key in known:
                        setattr(self, key, value)
            self.__post_init__()

    @classmethod
    def load_default(cls) -> "CLIConfig":
        """Load default configuration from user config directory"""
        config = cls()
        default_config_path = Path(config.config_dir) / "config.json"
        if default_config_path.exists():
            config.load_from_file(str(default_config_path))

        # Override with environment variables
        config._load_from_env()

        return config

    def _load_from_env(self) -> None:
        """Load configuration from environment variables"""
        env_mappings = {
            "COMPLAINTDESK_API_URL": "api_base_url",
            "COMPLAINTDESK_TIMEOUT": ("timeout", float),
        }

        for env_var, mapping in env_mappings.items():
            value = os.environ.get(env_var)
            if value:
                if isinstance(mapping, tuple):
                    attr, converter = mapping
                    setattr(self, attr, converter(value))
                else:
                    setattr(self, mapping, value)

        self.api_base_url = self.api_base_url.rstrip("/")
