"""
ORM model package. Import all models here so Alembic autogenerate
can discover every table through the shared Base metadata.
"""
from activitylog.models.user import User  # noqa: F401
from activitylog.models.activity import Activity  # noqa: F401
