"""Assistant-declared commands and their dispatch."""

from .api import AccountAPI, ServiceAccount, ServiceAccountRequest
from .dispatcher import CommandDispatcher, DispatchContext, failure_banner
from .host import HostCallbacks, open_in_new_tab
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
    command_type,
    parse_command,
)

__all__ = [
    "AccountAPI",
    "Command",
    "CommandDispatcher",
    "CommandType",
    "CreateServiceAccountCommand",
    "DispatchContext",
    "FeedbackModalCommand",
    "FinishConversationCommand",
    "HostCallbacks",
    "ManageOrg2FaCommand",
    "RedirectCommand",
    "ServiceAccount",
    "ServiceAccountRequest",
    "ThumbsCommand",
    "TourStartCommand",
    "command_type",
    "failure_banner",
    "open_in_new_tab",
    "parse_command",
]
