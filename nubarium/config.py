from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import find_dotenv, load_dotenv

ENV_ENDPOINT = "NUBARIUM_ENDPOINT"
ENV_USERNAME = "NUBARIUM_USERNAME"
ENV_PASSWORD = "NUBARIUM_PASSWORD"


@dataclass(frozen=True)
class NubariumSettings:
    endpoint: str
    username: str
    password: str

    @classmethod
    def from_env(cls) -> "NubariumSettings":
        """Read settings from the environment (a .env file in the cwd is loaded first)."""
        load_dotenv(find_dotenv(usecwd=True))
        values = {}
        for name in (ENV_ENDPOINT, ENV_USERNAME, ENV_PASSWORD):
            v = os.environ.get(name, "").strip()
            if not v:
                raise RuntimeError(f"{name} is required (set env vars or create .env)")
            values[name] = v
        return cls(
            endpoint=values[ENV_ENDPOINT],
            username=values[ENV_USERNAME],
            password=values[ENV_PASSWORD],
        )
