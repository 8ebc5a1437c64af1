import uuid

from services.composer.app.notifications import (build_notification,
                                                 send_push_notification)
from shared.database.models.digest import Digest
from shared.database.models.user_settings import UserSettings


def _digest():
    return Digest(top_themes=["ai", "rust", "chips"], articles=[{}, {}, {}])


def test_notification_text():
    assert build_notification(_digest()) == {
        "title": "Your Daily Digest is Ready",
        "body": "3 articles summarized. ai, rust",
    }


def test_notification_requires_token_and_preference(db_session):
    with_token, without_token, opted_out = uuid.uuid4(), uuid.uuid4(), uuid.uuid4()
    db_session.add_all(
        [
            UserSettings(user_id=with_token, fcm_token="tok"),
            UserSettings(user_id=without_token),
            UserSettings(user_id=opted_out, fcm_token="tok", push_notifications=False),
        ]
    )
    db_session.commit()

    assert send_push_notification(db_session, with_token, _digest()) is True
    assert send_push_notification(db_session, without_token, _digest()) is False
    assert send_push_notification(db_session, opted_out, _digest()) is False
    assert send_push_notification(db_session, uuid.uuid4(), _digest()) is False
