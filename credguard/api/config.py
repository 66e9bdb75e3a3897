"""Configuration for FastAPI application."""

import json
from typing import List, Optional, Union

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CREDGUARD_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",  # Ignore extra environment variables
    )

    # API Configuration
    api_prefix: str = "/api"
    api_title: str = "credguard API"
    api_version: str = "0.3.0"
    allowed_origins: Union[str, List[str]] = ["http://localhost:8080"]

    # Server
    host: str = "127.0.0.1"
    port: int = 8080

    # JSON config file for the backup service; environment variables are used when unset
    config_file: Optional[str] = None

    @field_validator('allowed_origins', mode='before')
    @classmethod
    def parse_allowed_origins(cls, v):
        """Parse allowed_origins from string or list."""
        if isinstance(v, str):
            # If it's a JSON array string, parse it
            if v.startswith('['):
                try:
                    return json.loads(v)
                except json.JSONDecodeError:
                    return [v]
            # Single origin string
            return [v]
        return v

    @model_validator(mode="after")
    def port_from_config_file(self) -> "Settings":
        """Use the config file's ``http_port`` unless the port was set explicitly."""
        if not self.config_file or "port" in self.model_fields_set:
            return self
        try:
            with open(self.config_file, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, json.JSONDecodeError):
            # Reported when the backup config is loaded from the same file
            return self
        if isinstance(raw, dict) and raw.get("http_port"):
            self.port = int(raw["http_port"])
        return self


settings = Settings()
