"""
SQLAlchemy ORM models package.

All models are imported here so that:
  1. Base.metadata knows every table before create_all() runs
  2. Other modules can import from cardbank.models directly
"""

from cardbank.models.user import User, Role  # noqa: F401
from cardbank.models.card import Card, CardStatus  # noqa: F401
from cardbank.models.card_transaction import CardTransaction  # noqa: F401
