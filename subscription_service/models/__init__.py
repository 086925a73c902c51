"""ORM Models: SQLAlchemy declarative models.

Design Decisions:
    - One file per entity; all models imported here so Base.metadata is
      populated before create_all or alembic autogenerate
"""

from subscription_service.models.subscription import Subscription  # noqa: F401
