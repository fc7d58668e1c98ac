"""
Failure notifications for autoblog.
"""
import logging
from typing import Optional

import requests

# Configure logging
logger = logging.getLogger(__name__)

NOTIFY_TIMEOUT = 10  # seconds


def notify_failure(message: str, webhook_url: Optional[str] = None, timeout: float = NOTIFY_TIMEOUT) -> bool:
    """
    Post a failure message to a Slack-compatible webhook.

    Args:
        message: Text to send
        webhook_url: Incoming webhook URL; nothing is sent when empty
        timeout: Request timeout in seconds

    Returns:
        True if the webhook accepted the message
    """
    if not webhook_url:
        logger.info("No webhook configured, skipping failure notification")
        return False

    try:
        response = requests.post(webhook_url, json={'text': message}, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        logger.error(f"Error sending failure notification: {e}")
        return False

    logger.info("Failure notification sent")
    return True
