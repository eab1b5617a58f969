# Models are imported by their feature modules (and all together by
# alembic/env.py); only the declarative bases live here.

from app.core.db.base import Base, BaseModel

__all__ = [
    "Base",
    "BaseModel",
]
