from uuid import UUID

from sqlalchemy.orm import Session

from services.composer.app.crud import get_user_settings
from shared.app_logging.logger import get_logger
from shared.database.models.digest import Digest

logger = get_logger("composer.notifications")

NOTIFICATION_TITLE = "Your Daily Digest is Ready"


def build_notification(digest: Digest) -> dict:
    themes = ", ".join((digest.top_themes or [])[:2])
    return {
        "title": NOTIFICATION_TITLE,
        "body": f"{len(digest.articles or [])} articles summarized. {themes}",
    }


def send_push_notification(db: Session, user_id: UUID, digest: Digest) -> bool:
    """Log the notification a device would receive.

    Delivery is not wired to a push provider. Returns whether a notification
    was due; failures are logged and never raised.
    """
    try:
        settings = get_user_settings(db, user_id)
        if not settings or not settings.push_notifications or not settings.fcm_token:
            return False
        logger.info(f"Would send push notification to user {user_id}: {build_notification(digest)}")
        return True
    except Exception as e:
        logger.error(f"Failed to send push notification to user {user_id}: {e}")
        return False
