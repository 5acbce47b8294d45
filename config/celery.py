import os
from celery import Celery

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

app = Celery('dme')

# every CELERY_* key in Django settings
app.config_from_object('django.conf:settings', namespace='CELERY')

# picks up dme/tasks.py
app.autodiscover_tasks()
