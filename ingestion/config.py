"""Gateway configuration read from the environment."""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

ENV_PREFIX = "SYLLABUS2CAL_"

DEFAULT_GATEWAY_URL = "https://ai.gateway.lovable.dev/v1/chat/completions"
DEFAULT_MODEL = "google/gemini-2.5-flash"
DEFAULT_TIMEOUT_SECONDS = 120.0


@dataclass(frozen=True)
class GatewaySettings:
    """Connection settings for the AI chat-completions gateway."""

    api_key: str
    url: str = DEFAULT_GATEWAY_URL
    model: str = DEFAULT_MODEL
    timeout: float = DEFAULT_TIMEOUT_SECONDS

    def __post_init__(self) -> None:
        if not self.api_key:
            raise ValueError("Gateway API key must not be empty")
        if self.timeout <= 0:
            raise ValueError(f"Timeout must be positive, got {self.timeout}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "GatewaySettings":
        """Build settings from ``SYLLABUS2CAL_GATEWAY_*`` variables.

        Args:
            environ: Mapping to read instead of ``os.environ``.

        Raises:
            ValueError: If the API key is missing or the timeout is not a number.
        """
        env = os.environ if environ is None else environ

        api_key = env.get(f"{ENV_PREFIX}GATEWAY_API_KEY", "").strip()
        if not api_key:
            raise ValueError(f"{ENV_PREFIX}GATEWAY_API_KEY environment variable is not set")

        raw_timeout = env.get(f"{ENV_PREFIX}GATEWAY_TIMEOUT", "").strip()
        try:
            timeout = float(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT_SECONDS
        except ValueError:
            raise ValueError(
                f"Invalid {ENV_PREFIX}GATEWAY_TIMEOUT: '{raw_timeout}'. Expected seconds."
            )

        return cls(
            api_key=api_key,
            url=env.get(f"{ENV_PREFIX}GATEWAY_URL", "").strip() or DEFAULT_GATEWAY_URL,
            model=env.get(f"{ENV_PREFIX}GATEWAY_MODEL", "").strip() or DEFAULT_MODEL,
            timeout=timeout,
        )
