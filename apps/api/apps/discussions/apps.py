"""Discussions app configuration."""
from django.apps import AppConfig


class DiscussionsConfig(AppConfig):
    """Configuration for discussions app."""
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.discussions'
    verbose_name = 'Case Discussions & Parent Chat'
