"""
Repository module for data persistence.
"""

from __future__ import annotations

from src.repository.admins import AdminRepo
from src.repository.base import CollectionRepo
from src.repository.content import WebsiteContentRepo
from src.repository.messages import ContactMessageRepo
from src.repository.notifications import NotificationRepo
from src.repository.posts import BlogPostRepo
from src.repository.security import SecurityRepo
from src.repository.settings import SiteSettingsRepo
from src.repository.tools import ToolRepo
from src.repository.users import UserRepo

__all__ = [
    "AdminRepo",
    "BlogPostRepo",
    "CollectionRepo",
    "ContactMessageRepo",
    "NotificationRepo",
    "SecurityRepo",
    "SiteSettingsRepo",
    "ToolRepo",
    "UserRepo",
    "WebsiteContentRepo",
]
