"""
Notification and background job vocabularies.
"""

from enum import Enum


class NotificationType(str, Enum):
    """Delivery channel of a notification."""
    IN_APP = "in_app"
    EMAIL = "email"
    SMS = "sms"


class JobStatus(str, Enum):
    """State of a durable background job."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    DEAD = "dead"
