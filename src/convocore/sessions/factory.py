from typing import Any

from .base import BackendSession
from .talk import TalkSession


def create_session(kind: str, **config: Any) -> BackendSession:
    """Create a backend session.

    Args:
        kind: Session type ('talk')
        **config: Session-specific configuration
            For talk:
                - talk_url: str (required)
                - timeout: float (default: 30.0)
                - headers: dict[str, str] | None
                - client: httpx.AsyncClient | None

    Returns:
        Uninitialized backend session

    Raises:
        ValueError: If the session type is not supported
        TypeError: If required configuration is missing

    Examples:
        >>> session = create_session("talk", talk_url="https://va.example.com/talk")
    """
    kind_lower = kind.lower()

    if kind_lower == "talk":
        if not config.get("talk_url"):
            raise TypeError("Talk session requires 'talk_url' in config")
        return TalkSession(**config)

    raise ValueError(
        f"Unsupported session type: {kind}. "
        "Supported types: 'talk'"
    )
