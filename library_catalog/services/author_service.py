"""Author use cases with read-through caching.

The by-category lookup resolves authors through their books' categories,
so book and category mutations also report ``AUTHOR``.  Renaming an
author changes the book lookup by author name, so it reports ``BOOK``.
"""

from __future__ import annotations

from library_catalog.interfaces.catalog_repository import IAuthorRepository
from library_catalog.models.catalog import Author, EntityType
from library_catalog.services.cache_coordinator import CacheCoordinator
from library_catalog.services.cached_service import CachedService
from library_catalog.utils.cache_keys import cache_key
from library_catalog.utils.errors import AlreadyExistsError


class AuthorService(CachedService[Author]):
    """Reads and writes authors, keeping the author cache consistent."""

    entity_type = EntityType.AUTHOR

    def __init__(self, repository: IAuthorRepository, coordinator: CacheCoordinator) -> None:
        super().__init__(coordinator)
        self._repository = repository

    async def get_author(self, author_id: int) -> Author:
        return await self._read_one(
            cache_key("authorById", author_id),
            lambda: self._repository.get(author_id),
            f"Author not found with id: {author_id}",
        )

    async def list_authors(self) -> list[Author]:
        return await self._read_many(cache_key("allAuthors"), self._repository.list_all)

    async def find_authors_by_name(self, name: str) -> list[Author]:
        return await self._read_many(
            cache_key("authorsByName", name),
            lambda: self._repository.find_by_name(name),
            f"No authors found with name containing: {name}",
        )

    async def find_authors_by_category(self, category_name: str) -> list[Author]:
        return await self._read_many(
            cache_key("authorsByCategory", category_name),
            lambda: self._repository.find_by_book_category(category_name),
            f"No authors found with books in category: {category_name}",
        )

    async def create_author(self, name: str) -> Author:
        if await self._repository.exists_by_name(name):
            raise AlreadyExistsError(
                f"Author with name '{name}' already exists", entity_name="author"
            )
        author = await self._repository.save(name)
        self._mutated()
        self._logger.info("author_created", author_id=author.author_id)
        return author

    async def update_author(self, author_id: int, name: str) -> Author:
        author = await self._repository.update(author_id, name)
        self._mutated(EntityType.AUTHOR, EntityType.BOOK)
        self._logger.info("author_updated", author_id=author_id)
        return author

    async def delete_author(self, author_id: int) -> None:
        detached = await self._repository.delete(author_id)
        if detached:
            self._mutated(EntityType.AUTHOR, EntityType.BOOK)
        else:
            self._mutated()
        self._logger.info("author_deleted", author_id=author_id, detached_books=len(detached))
