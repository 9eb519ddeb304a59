from __future__ import annotations

from dataclasses import dataclass

from src.auth import AdminAuthenticator, SessionStore
from src.notifications import NotificationHub
from src.repository import (
    AdminRepo,
    BlogPostRepo,
    ContactMessageRepo,
    NotificationRepo,
    SecurityRepo,
    SiteSettingsRepo,
    ToolRepo,
    UserRepo,
    WebsiteContentRepo,
)
from src.store import DocumentStore, ObjectStorage


@dataclass
class AppState:
    store: DocumentStore
    storage: ObjectStorage
    users: UserRepo
    admins: AdminRepo
    posts: BlogPostRepo
    tools: ToolRepo
    messages: ContactMessageRepo
    notifications: NotificationRepo
    site_settings: SiteSettingsRepo
    content: WebsiteContentRepo
    security: SecurityRepo
    sessions: SessionStore
    auth: AdminAuthenticator
    hub: NotificationHub

    @classmethod
    def build(cls, store: DocumentStore, storage: ObjectStorage) -> AppState:
        notifications = NotificationRepo(store)
        site_settings = SiteSettingsRepo(store)
        admins = AdminRepo(store)
        security = SecurityRepo(store, site_settings)
        sessions = SessionStore()
        hub = NotificationHub(notifications)
        # Ending a session closes its live notification query.
        sessions.on_revoke(hub.close_session)
        return cls(
            store=store,
            storage=storage,
            users=UserRepo(store),
            admins=admins,
            posts=BlogPostRepo(store),
            tools=ToolRepo(store),
            messages=ContactMessageRepo(store, notifications),
            notifications=notifications,
            site_settings=site_settings,
            content=WebsiteContentRepo(store),
            security=security,
            sessions=sessions,
            auth=AdminAuthenticator(admins, sessions, security),
            hub=hub,
        )
