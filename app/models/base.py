"""Shared metadata for all tables."""

from sqlalchemy import MetaData

# Single metadata so foreign keys resolve across modules
metadata = MetaData()
