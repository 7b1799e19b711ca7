from django.apps import AppConfig


class ChangelogsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'changelogs'
