from __future__ import annotations

from enum import Enum


class NotificationType(str, Enum):
    FORUM_REPLY = "forum_reply"
    COLLABORATION_REQUEST = "collaboration_request"
    TRIAL_UPDATE = "trial_update"
    MESSAGE = "message"
    GENERAL = "general"
