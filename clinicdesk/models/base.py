"""Shared metadata for all tables."""

from sqlalchemy import MetaData

# Single metadata so cross-table foreign keys resolve
metadata = MetaData()
