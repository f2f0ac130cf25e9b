"""Declarative base shared by all inkpost models."""

from advanced_alchemy.base import UUIDAuditBase


class Base(UUIDAuditBase):
    """UUID primary key plus ``created_at``/``updated_at`` audit columns."""

    __abstract__ = True
