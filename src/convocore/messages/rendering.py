"""Per-kind text templates for system messages and banners.

System messages and banners carry only a kind and free-form string
arguments; this module turns them into display text. Renderers stay free to
lay the text out however their toolkit does.
"""

from pydantic import BaseModel, ConfigDict

from .models import BannerKind, BannerMessage, SystemKind, SystemMessage

TWO_FA_DOCS_URL = (
    "https://docs.redhat.com/en/documentation/red_hat_customer_portal/1/html/"
    "using_two-factor_authentication/index"
)


class BannerContent(BaseModel):
    """Display content of a banner."""

    model_config = ConfigDict(frozen=True)

    variant: str  # "info", "success" or "danger"
    title: str
    body: str = ""


def _arg(args: tuple[str, ...], index: int) -> str:
    return args[index] if index < len(args) else ""


def system_text(message: SystemMessage) -> str:
    """Render a system message to its timeline text."""
    kind = message.kind
    if kind == SystemKind.EMPTY_RESPONSE:
        return "The Virtual Assistant had trouble responding. Please try a different question."
    if kind == SystemKind.FINISH_CONVERSATION:
        return "End of conversation"
    if kind == SystemKind.REDIRECT:
        url = _arg(message.args, 0)
        return f"Your browser may block pop-ups. Please allow pop-ups or click [here]({url})."
    if kind == SystemKind.REQUEST_ERROR:
        return "Please try again later."
    return ""


def banner_content(message: BannerMessage) -> BannerContent:
    """Render a banner to its variant, title and body."""
    kind = message.kind
    args = message.args

    if kind == BannerKind.FINISH_CONVERSATION:
        return BannerContent(
            variant="info",
            title="You can start a new conversation at any time by typing below."
        )

    if kind == BannerKind.CREATE_SERVICE_ACCOUNT:
        body = "\n".join([
            _arg(args, 0),
            _arg(args, 1),
            f"Client Id: {_arg(args, 2)}",
            f"Secret: {_arg(args, 3)}",
            "Please copy and store the Client Id and the Secret in a safe place. "
            "These information will not be available to you again.",
        ])
        return BannerContent(variant="success", title="Service account created successfully.", body=body)

    if kind == BannerKind.CREATE_SERVICE_ACCOUNT_FAILED:
        return BannerContent(
            variant="danger",
            title="Service account creation failed.",
            body="There maybe some ongoing issue with the internal API that we use to create "
                 "service accounts. Please try again later."
        )

    if kind == BannerKind.TOGGLE_ORG_2FA:
        enabled = _arg(args, 0) == "true"
        if enabled:
            body = (
                "Two-factor authentication has been enabled successfully. Users will be required "
                "to set up two-factor authentication the next time they attempt to log in.\n"
                "They can chat with me if they need help setting up two-factor authentication "
                f"or visit our documentation: {TWO_FA_DOCS_URL}"
            )
        else:
            body = "The two-factor authentication requirement has been removed successfully."
        return BannerContent(
            variant="success",
            title=f"Two-factor authentication {'enabled' if enabled else 'disabled'} successfully",
            body=body
        )

    if kind == BannerKind.TOGGLE_ORG_2FA_FAILED:
        enabled = _arg(args, 0) == "true"
        return BannerContent(
            variant="danger",
            title="Operation failed.",
            body=f"You may not have adequate permission to {'enable' if enabled else 'disable'} "
                 "two-factor authentication."
        )

    if kind == BannerKind.MESSAGE_TOO_LONG:
        limit = _arg(args, 0) or "2048"
        return BannerContent(variant="info", title=f"Your message cannot exceed {limit} characters.")

    # BannerKind.REQUEST_ERROR
    return BannerContent(
        variant="danger",
        title="Sorry, something went wrong while talking to the Virtual Assistant."
    )
