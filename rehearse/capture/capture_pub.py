"""Capture publisher module for pub/sub event publishing."""

import logging
from pubsub import pub
from ..models.events import CaptureEvent

logger = logging.getLogger(__name__)


class CapturePublisher:
    """Publishes capture lifecycle events using pubsub.pub."""

    def __init__(self, topic_prefix: str = "capture"):
        """Initialize capture publisher.

        Args:
            topic_prefix: Events go to ``<prefix>.<event_type>`` topics
        """
        self.topic_prefix = topic_prefix
        logger.info(f"CapturePublisher initialized with topic prefix: {topic_prefix}")

    def topic_for(self, event_type: str) -> str:
        return f"{self.topic_prefix}.{event_type}"

    def publish(self, event: CaptureEvent) -> None:
        """Publish a capture event to its pub/sub topic.

        Args:
            event: CaptureEvent to publish
        """
        pub.sendMessage(self.topic_for(event.event_type), event=event)
        logger.debug(f"Published {event.event_type} event for session {event.session_id}")
