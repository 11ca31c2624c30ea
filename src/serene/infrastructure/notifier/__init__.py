"""Out-of-band alert delivery."""

from serene.infrastructure.notifier.notifier import LogNotifier, Notifier, WebhookNotifier

__all__ = ["LogNotifier", "Notifier", "WebhookNotifier"]
