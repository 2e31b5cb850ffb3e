from pickup.models.game_schedule import DAYS_OF_WEEK, GameSchedule
from pickup.models.notification_log import NOTIFICATION_TYPES, NotificationLog
from pickup.models.profile import Profile

__all__ = [
    "DAYS_OF_WEEK",
    "GameSchedule",
    "NOTIFICATION_TYPES",
    "NotificationLog",
    "Profile",
]
