import os
from celery import Celery

# Set default Django settings module so Celery knows where Django config is
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'HospitalBackend.settings')

app = Celery('HospitalBackend')

# Only settings prefixed with "CELERY_" are applied
app.config_from_object('django.conf:settings', namespace='CELERY')

# Picks up reports/tasks.py and any other app tasks module
app.autodiscover_tasks()
