"""Message templates for WhatsApp notifications."""

# Keyed by NotificationLog.type. Only reminders are rendered server-side;
# booking and system_open texts are composed by the client.
DEFAULT_NOTIFICATION_TEMPLATES = {
    "game_reminder": (
        "⚽ Game reminder: {title}\n"
        "📅 {date}\n"
        "🕐 {time}\n"
        "📍 {location}\n"
        "See you there!"
    ),
}


def render_template(template_body: str, **kwargs) -> str:
    """Fill {title}, {date}, {time} and {location}. Missing values render empty."""
    return template_body.format_map({k: "" if v is None else v for k, v in kwargs.items()})
