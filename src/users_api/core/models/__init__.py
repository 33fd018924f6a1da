from .pagination import CamelModel, PaginationMeta

__all__ = ["CamelModel", "PaginationMeta"]
