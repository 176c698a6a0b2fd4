"""Command dispatch.

Maps assistant-declared commands to handlers. Handlers run side effects and
report their outcome by appending system messages and banners through the
dispatch context. A failing handler never propagates out of dispatch();
its failure becomes a command-specific banner.
"""

import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import assert_never

from ..config import ENV_STAGE, KNOWN_TOURS
from ..errors import CommandError
from ..messages import BannerKind, SystemKind
from .api import AccountAPI, ServiceAccountRequest
from .host import HostCallbacks
from .models import (
    Command,
    CommandType,
    CreateServiceAccountCommand,
    FeedbackModalCommand,
    FinishConversationCommand,
    ManageOrg2FaCommand,
    RedirectCommand,
    ThumbsCommand,
    TourStartCommand,
    parse_command,
)

logger = logging.getLogger(__name__)


@dataclass
class DispatchContext:
    """What a handler may touch while running."""

    add_system_message: Callable[[SystemKind, Sequence[str]], None]
    add_banner: Callable[[BannerKind, Sequence[str]], None]
    add_thumbs_prompt: Callable[[str, str], None]
    host: HostCallbacks = field(default_factory=HostCallbacks)
    environment: str = ENV_STAGE
    is_preview: bool = False


Handler = Callable[[Command, DispatchContext], Awaitable[None]]


def failure_banner(command: Command) -> tuple[BannerKind, tuple[str, ...]] | None:
    """Banner describing a failed command, or None if it has no banner.

    Failure banners never carry secret material.
    """
    if isinstance(command, CreateServiceAccountCommand):
        return BannerKind.CREATE_SERVICE_ACCOUNT_FAILED, ()
    if isinstance(command, ManageOrg2FaCommand):
        return BannerKind.TOGGLE_ORG_2FA_FAILED, (_flag(command.enable),)
    if isinstance(
        command,
        FinishConversationCommand
        | RedirectCommand
        | TourStartCommand
        | FeedbackModalCommand
        | ThumbsCommand
    ):
        return None
    assert_never(command)


def _flag(value: bool | None) -> str:
    return "true" if value else "false"


class CommandDispatcher:
    """Registry of command handlers.

    Unknown commands are ignored. Every known command has a built-in handler;
    register() lets hosts and tests swap one for their own implementation.
    """

    def __init__(
        self,
        api: AccountAPI | None = None,
        known_tours: Sequence[str] = KNOWN_TOURS,
    ) -> None:
        self._api = api or AccountAPI()
        self._known_tours = frozenset(known_tours)
        self._overrides: dict[CommandType, Handler] = {}

    def register(self, command_type: CommandType, handler: Handler) -> None:
        """Replace the handler for a command type."""
        self._overrides[command_type] = handler

    async def close(self) -> None:
        await self._api.close()

    async def dispatch(self, command: str, args: Sequence[str], context: DispatchContext) -> None:
        """Run the handler for a raw command call.

        Args:
            command: Wire name of the command
            args: Positional string arguments
            context: Message sinks and host callbacks for the handler
        """
        parsed = parse_command(command, tuple(args), default_environment=context.environment)
        if parsed is None:
            logger.debug("Ignoring unknown command %r", command)
            return

        override = self._overrides.get(parsed.type)
        try:
            if override is not None:
                await override(parsed, context)
            else:
                await self._run(parsed, context)
        except Exception:
            logger.error("Command %s failed", parsed.type.value, exc_info=True)
            banner = failure_banner(parsed)
            if banner is not None:
                context.add_banner(*banner)

    async def _run(self, command: Command, context: DispatchContext) -> None:
        match command:
            case FinishConversationCommand():
                await self._finish_conversation(command, context)
            case RedirectCommand():
                await self._redirect(command, context)
            case TourStartCommand():
                await self._tour_start(command, context)
            case FeedbackModalCommand():
                await self._feedback_modal(command, context)
            case ManageOrg2FaCommand():
                await self._manage_org_2fa(command, context)
            case CreateServiceAccountCommand():
                await self._create_service_account(command, context)
            case ThumbsCommand():
                await self._thumbs(command, context)
            case _:
                assert_never(command)

    async def _finish_conversation(self, command: FinishConversationCommand, context: DispatchContext) -> None:
        context.add_system_message(SystemKind.FINISH_CONVERSATION, ())
        context.add_banner(BannerKind.FINISH_CONVERSATION, ())

    async def _redirect(self, command: RedirectCommand, context: DispatchContext) -> None:
        if not command.url:
            logger.error("Redirect command received without a URL")
            return
        context.host.open_url(command.url)
        context.add_system_message(SystemKind.REDIRECT, (command.url,))

    async def _tour_start(self, command: TourStartCommand, context: DispatchContext) -> None:
        if command.tour is None or command.tour not in self._known_tours:
            logger.error("Unknown tour %r", command.tour)
            return
        context.host.start_tour(command.tour)

    async def _feedback_modal(self, command: FeedbackModalCommand, context: DispatchContext) -> None:
        context.host.toggle_feedback_modal(True)

    async def _manage_org_2fa(self, command: ManageOrg2FaCommand, context: DispatchContext) -> None:
        if command.enable is None:
            raise CommandError(command.type.value, "an enable flag is required")
        token = await context.host.get_auth_token()
        await self._api.set_org_2fa(command.enable, token, command.environment)
        context.add_banner(BannerKind.TOGGLE_ORG_2FA, (_flag(command.enable),))

    async def _create_service_account(self, command: CreateServiceAccountCommand, context: DispatchContext) -> None:
        request = ServiceAccountRequest(
            name=command.name,
            description=command.description,
            environment=command.environment,
        )
        token = await context.host.get_auth_token()
        account = await self._api.create_service_account(request, token)
        context.add_banner(
            BannerKind.CREATE_SERVICE_ACCOUNT,
            (account.name, account.description, account.client_id, account.secret),
        )

    async def _thumbs(self, command: ThumbsCommand, context: DispatchContext) -> None:
        context.add_thumbs_prompt(command.thumbs_up, command.thumbs_down)
