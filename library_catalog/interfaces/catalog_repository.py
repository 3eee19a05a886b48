"""Abstract base classes for catalogue persistence.

The services depend only on these contracts; the storage engine behind them
(SQL, in-memory, a remote API) is a deployment detail.  Lookups are keyed by
integer id or by a case-insensitive substring predicate.

Error contract shared by every implementation:

- ``NotFoundError`` -- an id passed to ``update``/``delete`` is unknown.
  ``get`` returns ``None`` instead, so callers decide how to react.
- ``AlreadyExistsError`` -- a unique name is already taken.
- ``InvalidReferenceError`` -- an association names ids that do not exist.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from library_catalog.models.catalog import Author, Book, Category


class IAuthorRepository(ABC):
    """Contract for author persistence."""

    @abstractmethod
    async def get(self, author_id: int) -> Author | None:
        """Return the author with *author_id*, or ``None``."""

    @abstractmethod
    async def list_all(self) -> list[Author]:
        """Return every author ordered by id."""

    @abstractmethod
    async def find_by_name(self, name: str) -> list[Author]:
        """Return authors whose name contains *name* (case-insensitive)."""

    @abstractmethod
    async def find_by_book_category(self, category_name: str) -> list[Author]:
        """Return authors with a book filed under a category whose name contains *category_name*."""

    @abstractmethod
    async def exists_by_name(self, name: str) -> bool:
        """Return ``True`` if an author with exactly this name exists (case-insensitive)."""

    @abstractmethod
    async def save(self, name: str) -> Author:
        """Create an author and return it with its assigned id."""

    @abstractmethod
    async def update(self, author_id: int, name: str) -> Author:
        """Rename an author."""

    @abstractmethod
    async def delete(self, author_id: int) -> list[int]:
        """Delete an author and return the ids of books that were detached from it."""


class IBookRepository(ABC):
    """Contract for book persistence."""

    @abstractmethod
    async def get(self, book_id: int) -> Book | None:
        """Return the book with *book_id*, or ``None``."""

    @abstractmethod
    async def list_all(self) -> list[Book]:
        """Return every book ordered by id."""

    @abstractmethod
    async def find_by_title(self, title: str) -> list[Book]:
        """Return books whose title contains *title* (case-insensitive)."""

    @abstractmethod
    async def find_by_author_id(self, author_id: int) -> list[Book]:
        """Return books written by the author with *author_id*."""

    @abstractmethod
    async def find_by_author_name(self, author_name: str) -> list[Book]:
        """Return books whose author's name contains *author_name*."""

    @abstractmethod
    async def find_by_category_name(self, category_name: str) -> list[Book]:
        """Return books filed under a category whose name contains *category_name*."""

    @abstractmethod
    async def find_by_category_id(self, category_id: int) -> list[Book]:
        """Return books filed under the category with *category_id*."""

    @abstractmethod
    async def save(
        self,
        title: str,
        author_id: int | None = None,
        category_ids: list[int] | None = None,
    ) -> Book:
        """Create a book and return it with its assigned id."""

    @abstractmethod
    async def save_all(self, books: list[dict]) -> list[Book]:
        """Create several books atomically.

        Each dict carries ``title``, ``author_id`` and ``category_ids``.
        Either every book is created or none is.
        """

    @abstractmethod
    async def update(
        self,
        book_id: int,
        title: str,
        author_id: int | None = None,
        category_ids: list[int] | None = None,
    ) -> Book:
        """Update a book.  ``category_ids=None`` leaves associations unchanged."""

    @abstractmethod
    async def delete(self, book_id: int) -> None:
        """Delete a book."""


class ICategoryRepository(ABC):
    """Contract for category persistence."""

    @abstractmethod
    async def get(self, category_id: int) -> Category | None:
        """Return the category with *category_id*, or ``None``."""

    @abstractmethod
    async def list_all(self) -> list[Category]:
        """Return every category ordered by id."""

    @abstractmethod
    async def find_by_name(self, name: str) -> list[Category]:
        """Return categories whose name contains *name* (case-insensitive)."""

    @abstractmethod
    async def find_by_book_title(self, title: str) -> list[Category]:
        """Return categories holding a book whose title contains *title*."""

    @abstractmethod
    async def find_by_book_id(self, book_id: int) -> list[Category]:
        """Return the categories the book with *book_id* is filed under."""

    @abstractmethod
    async def exists_by_name(self, name: str) -> bool:
        """Return ``True`` if a category with exactly this name exists (case-insensitive)."""

    @abstractmethod
    async def save(self, name: str, book_ids: list[int] | None = None) -> Category:
        """Create a category, optionally filing existing books under it."""

    @abstractmethod
    async def update(
        self,
        category_id: int,
        name: str,
        book_ids: list[int] | None = None,
    ) -> Category:
        """Rename a category.  ``book_ids`` replaces its book list when given."""

    @abstractmethod
    async def delete(self, category_id: int) -> None:
        """Delete a category and remove it from every book."""
