# fleetrecon/worker/config.py

"""
Celery configuration settings

Broker and result backend, serialization, timezone and task limits.
"""

# Local imports
from fleetrecon.core.config import settings

# Broker and result backend configurations
broker_url = settings.celery_broker
result_backend = settings.celery_backend

# Task serialization
task_serializer = "json"
accept_content = ["json"]
result_serializer = "json"
timezone = "UTC"
enable_utc = True

# Task settings
task_track_started = True
task_time_limit = 60 * 60  # 60 minutes
task_soft_time_limit = 50 * 60  # 50 minutes
worker_prefetch_multiplier = 1
task_acks_late = True

# Redis connection settings
broker_connection_retry_on_startup = True
broker_connection_max_retries = 10
redis_socket_timeout = 10
redis_socket_connect_timeout = 10
redis_retry_on_timeout = True
