"""
Declarative base - every ORM model in tutor_admin inherits from Base.
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass
