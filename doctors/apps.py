from django.apps import AppConfig
from django.conf import settings
from django.db.models.signals import post_migrate


def seed_after_migrate(sender, **kwargs):
    from .seeding import seed_departments
    seed_departments()


class DoctorsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'doctors'

    def ready(self):
        if getattr(settings, 'SEED_DEPARTMENTS_ON_MIGRATE', False):
            post_migrate.connect(seed_after_migrate, sender=self)
