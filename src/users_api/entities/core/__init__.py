from ._base import Entity, EntityTable, utc_now

__all__ = ["Entity", "EntityTable", "utc_now"]
