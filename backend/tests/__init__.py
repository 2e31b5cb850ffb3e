# Force SQLModel table registration at test discovery time
# This ensures all models are registered before any test database creation
from pickup.models.game_schedule import GameSchedule  # noqa: F401
from pickup.models.notification_log import NotificationLog  # noqa: F401
from pickup.models.profile import Profile  # noqa: F401
