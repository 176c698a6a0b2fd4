"""Typed commands the assistant can ask the client to run.

Raw command calls arrive as a wire name plus positional string arguments.
parse_command() narrows them into one member of the Command union; handlers
then work on typed fields instead of probing argument lists.
"""

from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from ..config import ENV_STAGE, THUMBS_DOWN_PAYLOAD, THUMBS_UP_PAYLOAD


class CommandType(str, Enum):
    """Wire names of the supported commands."""

    FINISH_CONVERSATION = "finish-conversation"
    REDIRECT = "redirect"
    TOUR_START = "tour-start"
    FEEDBACK_MODAL = "feedback-modal"
    MANAGE_ORG_2FA = "manage-org-2fa"
    CREATE_SERVICE_ACCOUNT = "create-service-account"
    THUMBS = "thumbs"


# Older backends send snake_case names and a prefixed finish command
_ALIASES = {
    "core-finish-conversation": CommandType.FINISH_CONVERSATION,
}


class _BaseCommand(BaseModel):
    model_config = ConfigDict(frozen=True)


class FinishConversationCommand(_BaseCommand):
    type: Literal[CommandType.FINISH_CONVERSATION] = CommandType.FINISH_CONVERSATION


class RedirectCommand(_BaseCommand):
    type: Literal[CommandType.REDIRECT] = CommandType.REDIRECT
    url: str | None = None


class TourStartCommand(_BaseCommand):
    type: Literal[CommandType.TOUR_START] = CommandType.TOUR_START
    tour: str | None = None


class FeedbackModalCommand(_BaseCommand):
    type: Literal[CommandType.FEEDBACK_MODAL] = CommandType.FEEDBACK_MODAL


class ManageOrg2FaCommand(_BaseCommand):
    type: Literal[CommandType.MANAGE_ORG_2FA] = CommandType.MANAGE_ORG_2FA
    enable: bool | None = Field(default=None, description="None when the argument was missing")
    environment: str = ENV_STAGE


class CreateServiceAccountCommand(_BaseCommand):
    type: Literal[CommandType.CREATE_SERVICE_ACCOUNT] = CommandType.CREATE_SERVICE_ACCOUNT
    name: str = ""
    description: str = ""
    environment: str = ENV_STAGE


class ThumbsCommand(_BaseCommand):
    type: Literal[CommandType.THUMBS] = CommandType.THUMBS
    thumbs_up: str = THUMBS_UP_PAYLOAD
    thumbs_down: str = THUMBS_DOWN_PAYLOAD


Command = Annotated[
    FinishConversationCommand
    | RedirectCommand
    | TourStartCommand
    | FeedbackModalCommand
    | ManageOrg2FaCommand
    | CreateServiceAccountCommand
    | ThumbsCommand,
    Field(discriminator="type"),
]


def command_type(name: str) -> CommandType | None:
    """Resolve a wire name to a CommandType, or None if unknown."""
    normalized = name.strip().lower().replace("_", "-")
    if normalized in _ALIASES:
        return _ALIASES[normalized]
    try:
        return CommandType(normalized)
    except ValueError:
        return None


def _arg(args: tuple[str, ...], index: int) -> str | None:
    if index < len(args) and args[index] != "":
        return args[index]
    return None


def parse_command(
    name: str,
    args: tuple[str, ...] | list[str] = (),
    default_environment: str = ENV_STAGE
) -> Command | None:
    """Narrow a raw command call into a typed command.

    Args:
        name: Wire name of the command
        args: Positional string arguments
        default_environment: Environment used when the call does not name one

    Returns:
        The typed command, or None for an unknown command name
    """
    kind = command_type(name)
    if kind is None:
        return None
    args = tuple(args)

    if kind == CommandType.FINISH_CONVERSATION:
        return FinishConversationCommand()
    if kind == CommandType.REDIRECT:
        return RedirectCommand(url=_arg(args, 0))
    if kind == CommandType.TOUR_START:
        return TourStartCommand(tour=_arg(args, 0))
    if kind == CommandType.FEEDBACK_MODAL:
        return FeedbackModalCommand()
    if kind == CommandType.MANAGE_ORG_2FA:
        flag = _arg(args, 0)
        return ManageOrg2FaCommand(
            enable=None if flag is None else flag.lower() == "true",
            environment=_arg(args, 1) or default_environment,
        )
    if kind == CommandType.CREATE_SERVICE_ACCOUNT:
        return CreateServiceAccountCommand(
            name=_arg(args, 0) or "",
            description=_arg(args, 1) or "",
            environment=_arg(args, 2) or default_environment,
        )
    return ThumbsCommand(
        thumbs_up=_arg(args, 0) or THUMBS_UP_PAYLOAD,
        thumbs_down=_arg(args, 1) or THUMBS_DOWN_PAYLOAD,
    )
