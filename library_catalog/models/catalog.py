"""Catalogue domain models -- authors, books and categories.

# ─── ARCHITECTURE ROLE ───────────────────────────────────────────────
#
# Layer: Models (bottom of the dependency graph -- no imports from upper layers).
#
# These frozen Pydantic v2 models are what the repository returns and what
# the result caches hold.  Because cached values are shared by every
# request thread, they must never be mutated in place: updates go through
# ``model_copy(update={...})`` in the repository and produce new objects.
#
# Denormalisation is narrow so cache invalidation stays exact:
#   - Author carries no book data.
#   - Book carries ``author_id`` and ``category_ids`` only (never names).
#   - Category embeds lightweight BookSummary entries for its books, which
#     is why book mutations must also clear the category cache.
# Lookups that join across entities (books by author name, authors by
# book category) are handled by the services reporting extra types.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class EntityType(str, Enum):  # noqa: UP042
    """The three entity kinds, each with its own result cache."""

    AUTHOR = "AUTHOR"
    BOOK = "BOOK"
    CATEGORY = "CATEGORY"


class Author(BaseModel):
    """A catalogue author."""

    model_config = ConfigDict(frozen=True)

    author_id: int
    name: str = Field(min_length=1)


class BookSummary(BaseModel):
    """The slice of a book embedded in category results."""

    model_config = ConfigDict(frozen=True)

    book_id: int
    title: str


class Book(BaseModel):
    """A catalogue book with its author and category associations."""

    model_config = ConfigDict(frozen=True)

    book_id: int
    title: str = Field(min_length=1)
    # None once the owning author has been deleted.
    author_id: int | None = None
    category_ids: tuple[int, ...] = ()

    def summary(self) -> BookSummary:
        return BookSummary(book_id=self.book_id, title=self.title)


class Category(BaseModel):
    """A category together with summaries of the books filed under it."""

    model_config = ConfigDict(frozen=True)

    category_id: int
    name: str = Field(min_length=1)
    books: tuple[BookSummary, ...] = ()
