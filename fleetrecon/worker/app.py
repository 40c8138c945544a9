# fleetrecon/worker/app.py

"""
Main Celery Application Configuration

Sets up the Celery application instance with Redis as broker and result
backend and discovers the task modules.
"""

# Third party imports
from celery import Celery

# Import all models to ensure they're registered with SQLAlchemy
# This must happen before any database operations in tasks
import fleetrecon.records.models
import fleetrecon.sessions.models
import fleetrecon.uploads.models

# Create Celery Instance
app = Celery("fleetrecon")

# Configure celery from separate config file
app.config_from_object("fleetrecon.worker.config")

# Auto discover tasks.py modules
app.autodiscover_tasks(["fleetrecon.ingest"])

if __name__ == "__main__":
    app.start()
