# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Services package - External integrations and side effects.
"""

from .mongodb import (
    MongoDBService,
    PersistenceError,
    ResidentNotFoundError,
    get_mongodb_service,
    close_mongodb_connection
)
from .notifications import NotificationClient, NotificationConfig, NotificationError, create_notification_client
from .lifecycle import ProfileLifecycleService, TransitionOutcome
from .demographics import DemographicsService
from .change_feed import ChangeFeedListener

__all__ = [
    "MongoDBService",
    "PersistenceError",
    "ResidentNotFoundError",
    "get_mongodb_service",
    "close_mongodb_connection",
    "NotificationClient",
    "NotificationConfig",
    "NotificationError",
    "create_notification_client",
    "ProfileLifecycleService",
    "TransitionOutcome",
    "DemographicsService",
    "ChangeFeedListener"
]
