from ..commands import HostCallbacks
from ..config import AssistantConfig
from .sink import FeedbackSink, IssueFeedbackSink, LogFeedbackSink


def create_feedback_sink(config: AssistantConfig, host: HostCallbacks) -> FeedbackSink:
    """Pick the feedback sink for a configuration.

    An IssueFeedbackSink when a feedback URL is configured, otherwise a sink
    that only logs.
    """
    if config.feedback_url:
        return IssueFeedbackSink(
            url=config.feedback_url,
            environment=config.environment,
            get_current_user=host.get_current_user,
            timeout=config.http_timeout,
        )
    return LogFeedbackSink()
