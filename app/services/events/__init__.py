"""
Event Alerting

Classifies provider stream webhooks and notifies subscribers of the watched
addresses that triggered them.
"""

from .models import (
    ConfirmationPolicy,
    DispatchReport,
    Ignored,
    IgnoreReason,
    Notifiable,
    NotificationDocument,
    NotificationKind,
    ProcessingOutcome,
    WebhookEvent,
)
from .classifier import classify_event, is_substantive
from .extractor import extract_addresses
from .registry import SubscriptionRegistry
from .rendering import render_activity_notification, render_subscription_confirmation
from .dispatcher import NotificationDispatcher
from .service import AlertService, get_alert_service, shutdown_alert_service

__all__ = [
    # Models
    "ConfirmationPolicy",
    "DispatchReport",
    "Ignored",
    "IgnoreReason",
    "Notifiable",
    "NotificationDocument",
    "NotificationKind",
    "ProcessingOutcome",
    "WebhookEvent",
    # Pipeline
    "classify_event",
    "is_substantive",
    "extract_addresses",
    "SubscriptionRegistry",
    "render_activity_notification",
    "render_subscription_confirmation",
    "NotificationDispatcher",
    # Service
    "AlertService",
    "get_alert_service",
    "shutdown_alert_service",
]
