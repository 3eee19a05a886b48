"""Category use cases with read-through caching.

A category carries the book associations, so changing which books belong
to it, renaming it or deleting it also changes book query results
(``category_ids`` on each book, and the by-category-name lookup) and the
author lookup by book category.  Those mutations are reported as
``CATEGORY``, ``BOOK`` and ``AUTHOR``.
"""

from __future__ import annotations

from library_catalog.interfaces.catalog_repository import ICategoryRepository
from library_catalog.models.catalog import Category, EntityType
from library_catalog.services.cache_coordinator import CacheCoordinator
from library_catalog.services.cached_service import CachedService
from library_catalog.utils.cache_keys import cache_key
from library_catalog.utils.errors import AlreadyExistsError

_ASSOCIATION_CHANGE = (EntityType.CATEGORY, EntityType.BOOK, EntityType.AUTHOR)


class CategoryService(CachedService[Category]):
    entity_type = EntityType.CATEGORY

    def __init__(self, repository: ICategoryRepository, coordinator: CacheCoordinator) -> None:
        super().__init__(coordinator)
        self._repository = repository

    async def get_category(self, category_id: int) -> Category:
        return await self._read_one(
            cache_key("categoryById", category_id),
            lambda: self._repository.get(category_id),
            f"Category not found with id: {category_id}",
        )

    async def list_categories(self) -> list[Category]:
        return await self._read_many(cache_key("allCategories"), self._repository.list_all)

    async def find_categories_by_name(self, name: str) -> list[Category]:
        return await self._read_many(
            cache_key("categoriesByName", name),
            lambda: self._repository.find_by_name(name),
            f"No categories found with name containing: {name}",
        )

    async def find_categories_by_book(self, title: str) -> list[Category]:
        return await self._read_many(
            cache_key("categoriesByBookTitle", title),
            lambda: self._repository.find_by_book_title(title),
            f"No categories found for book title containing: {title}",
        )

    async def find_categories_by_book_id(self, book_id: int) -> list[Category]:
        return await self._read_many(
            cache_key("categoriesByBookId", book_id),
            lambda: self._repository.find_by_book_id(book_id),
            f"No categories found for book id: {book_id}",
        )

    async def create_category(self, name: str, book_ids: list[int] | None = None) -> Category:
        if await self._repository.exists_by_name(name):
            raise AlreadyExistsError(
                f"Category with name '{name}' already exists", entity_name="category"
            )
        category = await self._repository.save(name, book_ids)
        if book_ids:
            self._mutated(*_ASSOCIATION_CHANGE)
        else:
            self._mutated()
        self._logger.info(
            "category_created", category_id=category.category_id, books=len(category.books)
        )
        return category

    async def update_category(
        self,
        category_id: int,
        name: str,
        book_ids: list[int] | None = None,
    ) -> Category:
        category = await self._repository.update(category_id, name, book_ids)
        self._mutated(*_ASSOCIATION_CHANGE)
        self._logger.info("category_updated", category_id=category_id)
        return category

    async def delete_category(self, category_id: int) -> None:
        await self._repository.delete(category_id)
        self._mutated(*_ASSOCIATION_CHANGE)
        self._logger.info("category_deleted", category_id=category_id)
