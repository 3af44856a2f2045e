"""Notification module for error and info messages."""

from .notification_channel import (
    InMemoryNotificationChannel,
    Notification,
    NotificationChannel,
)

__all__ = ['InMemoryNotificationChannel', 'Notification', 'NotificationChannel']
