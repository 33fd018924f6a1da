"""Pagination metadata for windowed result sets."""

from __future__ import annotations

import math

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys for API responses."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PaginationMeta(CamelModel):
    """Navigation block describing one page of a listing."""

    current_page: int = Field(ge=1)
    total_pages: int = Field(ge=0)
    total_count: int = Field(ge=0)
    limit: int = Field(ge=1)
    has_next: bool
    has_prev: bool
    next_page: int | None = None
    prev_page: int | None = None

    @classmethod
    def build(cls, page: int, limit: int, total_count: int) -> PaginationMeta:
        """Derive the metadata for ``page`` of a result set of ``total_count`` rows."""
        total_pages = math.ceil(total_count / limit) if limit > 0 else 0
        has_next = page < total_pages
        has_prev = page > 1
        return cls(
            current_page=page,
            total_pages=total_pages,
            total_count=total_count,
            limit=limit,
            has_next=has_next,
            has_prev=has_prev,
            next_page=page + 1 if has_next else None,
            prev_page=page - 1 if has_prev else None,
        )

    @property
    def offset(self) -> int:
        return (self.current_page - 1) * self.limit
