"""Book use cases with read-through caching.

Every book mutation is reported as ``BOOK`` and ``AUTHOR``.  The policy
extends ``BOOK`` to the category cache because category results embed
book summaries; ``AUTHOR`` covers the author lookup by book category.
"""

from __future__ import annotations

from typing import Any

from library_catalog.interfaces.catalog_repository import IBookRepository
from library_catalog.models.catalog import Book, EntityType
from library_catalog.services.cache_coordinator import CacheCoordinator
from library_catalog.services.cached_service import CachedService
from library_catalog.utils.cache_keys import cache_key

_BOOK_CHANGE = (EntityType.BOOK, EntityType.AUTHOR)


class BookService(CachedService[Book]):
    """Reads and writes books, keeping every cache that reflects books consistent."""

    entity_type = EntityType.BOOK

    def __init__(self, repository: IBookRepository, coordinator: CacheCoordinator) -> None:
        super().__init__(coordinator)
        self._repository = repository

    # -- Queries ---------------------------------------------------------

    async def get_book(self, book_id: int) -> Book:
        return await self._read_one(
            cache_key("bookById", book_id),
            lambda: self._repository.get(book_id),
            f"Book not found with id: {book_id}",
        )

    async def list_books(self) -> list[Book]:
        return await self._read_many(cache_key("allBooks"), self._repository.list_all)

    async def search_books(self, title: str) -> list[Book]:
        return await self._read_many(
            cache_key("booksByTitle", title),
            lambda: self._repository.find_by_title(title),
            f"No books found with title containing: {title}",
        )

    async def find_books_by_author_id(self, author_id: int) -> list[Book]:
        return await self._read_many(
            cache_key("booksByAuthorId", author_id),
            lambda: self._repository.find_by_author_id(author_id),
            f"No books found for author id: {author_id}",
        )

    async def find_books_by_author(self, author_name: str) -> list[Book]:
        return await self._read_many(
            cache_key("booksByAuthorName", author_name),
            lambda: self._repository.find_by_author_name(author_name),
            f"No books found for author name containing: {author_name}",
        )

    async def find_books_by_category(self, category_name: str) -> list[Book]:
        return await self._read_many(
            cache_key("booksByCategory", category_name),
            lambda: self._repository.find_by_category_name(category_name),
            f"No books found in category: {category_name}",
        )

    async def find_books_by_category_id(self, category_id: int) -> list[Book]:
        return await self._read_many(
            cache_key("booksByCategoryId", category_id),
            lambda: self._repository.find_by_category_id(category_id),
            f"No books found for category id: {category_id}",
        )

    # -- Mutations -------------------------------------------------------

    async def create_book(
        self,
        title: str,
        author_id: int | None = None,
        category_ids: list[int] | None = None,
    ) -> Book:
        book = await self._repository.save(title, author_id, category_ids)
        self._mutated(*_BOOK_CHANGE)
        self._logger.info("book_created", book_id=book.book_id)
        return book

    async def create_books(self, books: list[dict[str, Any]]) -> list[Book]:
        """Create several books at once.

        Either every entry is valid and all are stored, or nothing is
        stored.  Caches are invalidated once for the whole batch.
        """
        if not books:
            return []
        created = await self._repository.save_all(books)
        self._mutated(*_BOOK_CHANGE)
        self._logger.info("books_created", count=len(created))
        return created

    async def update_book(
        self,
        book_id: int,
        title: str,
        author_id: int | None = None,
        category_ids: list[int] | None = None,
    ) -> Book:
        book = await self._repository.update(book_id, title, author_id, category_ids)
        self._mutated(*_BOOK_CHANGE)
        self._logger.info("book_updated", book_id=book_id)
        return book

    async def delete_book(self, book_id: int) -> None:
        await self._repository.delete(book_id)
        self._mutated(*_BOOK_CHANGE)
        self._logger.info("book_deleted", book_id=book_id)
