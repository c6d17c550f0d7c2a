from review_queue.notify.desktop import DesktopNotifier
from review_queue.notify.push import PushbulletClient, PushError
from review_queue.notify.sink import NotificationPort, NotificationSink

__all__ = [
    "DesktopNotifier",
    "NotificationPort",
    "NotificationSink",
    "PushError",
    "PushbulletClient",
]
