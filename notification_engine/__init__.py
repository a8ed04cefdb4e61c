"""Event-to-notification orchestration engine."""
