"""HTTP session speaking the JSON "talk" protocol.

Request:  {"input": {"text": ..., "option_id": ...}, "session_id": ...}
Response: {"response": [{"type": "TEXT", ...}, ...], "session_id": ...}

The backend has no separate conversation objects; its session id doubles as
the conversation id.
"""

import logging
from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError

from ..config import SESSION_START_COMMAND
from .base import BackendSession
from .models import BackendReply, Conversation, Fragment, SendOptions

logger = logging.getLogger(__name__)

TEMP_CONVERSATION_ID = "va-conversation"

_fragment_adapter: TypeAdapter[Fragment] = TypeAdapter(Fragment)


def parse_fragments(raw: list[dict[str, Any]]) -> tuple[Fragment, ...]:
    """Validate raw response entries into fragments, skipping unknown shapes."""
    fragments = []
    for entry in raw:
        data = dict(entry)
        data["type"] = str(data.get("type", "")).lower()
        try:
            fragments.append(_fragment_adapter.validate_python(data))
        except ValidationError:
            logger.debug("Skipping unsupported response entry: %s", entry)
    return tuple(fragments)


class TalkSession(BackendSession):
    """Backend session for a talk endpoint.

    Hidden design decisions:
    - HTTP client setup and headers
    - Mapping of the session id onto conversations
    - The session-start handshake performed by init()
    """

    def __init__(
        self,
        talk_url: str,
        timeout: float = 30.0,
        headers: dict[str, str] | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._talk_url = talk_url
        final_headers = {"Accept": "application/json"}
        if headers:
            final_headers.update(headers)
        self._client = client or httpx.AsyncClient(timeout=timeout, headers=final_headers)
        self._session_id = TEMP_CONVERSATION_ID
        self._initialized = False
        self._initializing = False
        self._welcome: BackendReply | None = None

    @property
    def welcome(self) -> BackendReply | None:
        """Reply received during the session-start handshake."""
        return self._welcome

    def is_initialized(self) -> bool:
        return self._initialized

    def is_initializing(self) -> bool:
        return self._initializing

    async def init(self) -> None:
        if self._initialized or self._initializing:
            return

        self._initializing = True
        try:
            reply = await self._post(SESSION_START_COMMAND, None, None)
            if not reply.fragments:
                raise RuntimeError("Failed to initialize session - no responses")
            if reply.conversation_id:
                self._session_id = reply.conversation_id
            self._welcome = reply
            self._initialized = True
            logger.debug("Talk session %s initialized", self._session_id)
        finally:
            self._initializing = False

    async def create_new_conversation(self) -> Conversation:
        return Conversation(id=self._session_id, title="Virtual Assistant")

    async def send_message(
        self,
        conversation_id: str | None,
        text: str,
        options: SendOptions | None = None
    ) -> BackendReply:
        session_id = None if conversation_id in (None, TEMP_CONVERSATION_ID) else conversation_id
        option_id = options.option_id if options else None
        reply = await self._post(text, option_id, session_id)
        if reply.conversation_id:
            self._session_id = reply.conversation_id
        return reply

    async def close(self) -> None:
        await self._client.aclose()

    async def _post(self, text: str, option_id: str | None, session_id: str | None) -> BackendReply:
        body = {
            "input": {"text": text, "option_id": option_id},
            "session_id": session_id,
        }
        response = await self._client.post(self._talk_url, json=body)
        response.raise_for_status()
        data = response.json()
        return BackendReply(
            fragments=parse_fragments(data.get("response") or []),
            conversation_id=data.get("session_id"),
        )
