# letteros/database/__init__.py
from .connection import get_db_connection, release_db_connection, DatabaseConnection
from .user_repository import UserRepository
from .launch_content_repository import LaunchContentRepository
from .newsletter_repository import NewsletterRepository
from .subscriber_repository import SubscriberRepository

__all__ = [
    "get_db_connection",
    "release_db_connection",
    "DatabaseConnection",
    "UserRepository",
    "LaunchContentRepository",
    "NewsletterRepository",
    "SubscriberRepository"
]
