"""
Notifications

This module provides webhook delivery for missing-test notifications.
"""

from .webhook import WebhookNotifier, build_webhook_payload

__all__ = ['WebhookNotifier', 'build_webhook_payload']
