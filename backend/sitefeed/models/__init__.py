"""ORM Models — SQLAlchemy declarative models.

Invariants:
    - All models inherit from Base (db/base.py)

Design Decisions:
    - One file per entity for locality
    - All models imported here so Base.metadata is complete before
      create_all / alembic autogenerate
"""

from sitefeed.models.build_request import BuildRequest  # noqa: F401
