# logship/config.py
import os
from typing import Mapping, Optional

from pydantic import BaseModel, Field, field_validator


class AgentConfig(BaseModel):
    paths: list[str] = Field(min_length=1)
    endpoint: str
    timeout: Optional[float] = None
    attempts: int = Field(default=2, ge=1)
    retry_delay: float = Field(default=0.2, ge=0)

    @field_validator("paths")
    @classmethod
    def _absolute_paths(cls, v: list[str]) -> list[str]:
        paths = [os.path.abspath(p.strip()) for p in v if p.strip()]
        if not paths:
            raise ValueError("at least one log file path is required")
        return paths

    @field_validator("endpoint")
    @classmethod
    def _strip_slash(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if not v:
            raise ValueError("endpoint must not be empty")
        return v

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "AgentConfig":
        """Build a config from ``FILE_PATH`` and ``LOG_ENDPOINT``."""
        env = os.environ if environ is None else environ
        values = {
            "paths": split_paths(env.get("FILE_PATH", "")),
            "endpoint": env.get("LOG_ENDPOINT", ""),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


def split_paths(value: str) -> list[str]:
    return [p.strip() for p in value.split(",") if p.strip()]
