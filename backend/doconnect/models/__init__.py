"""ORM Models - SQLAlchemy declarative models for the question/answer entity graph.

Invariants:
    - All models inherit from Base (db/base.py)
    - Question is the aggregate root for answers; question and answer each own images

Design Decisions:
    - One file per entity
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from doconnect.models.user import User  # noqa: F401
from doconnect.models.question import Question  # noqa: F401
from doconnect.models.answer import Answer  # noqa: F401
from doconnect.models.image_file import ImageFile  # noqa: F401
