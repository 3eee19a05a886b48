"""In-memory catalogue repository.

A dict-backed store for development, tests and single-process deployments.
Authors, books and categories share one store and one lock because their
associations cross: deleting an author detaches its books, filing books
under a category rewrites those books' ``category_ids``.

Categories are stored as bare names; the embedded book summaries on a
:class:`Category` are derived from the books on every read, so there is
exactly one source of truth for each association.

All methods are ``async`` to honour the repository contracts, but none of
them awaits: every operation is one critical section under a
``threading.Lock``, which keeps the store consistent when it is also
reached from thread-pool code.
"""

from __future__ import annotations

import itertools
import threading
from collections.abc import Iterable

import structlog

from library_catalog.interfaces.catalog_repository import (
    IAuthorRepository,
    IBookRepository,
    ICategoryRepository,
)
from library_catalog.models.catalog import Author, Book, Category
from library_catalog.utils.errors import (
    AlreadyExistsError,
    InvalidReferenceError,
    NotFoundError,
)
from library_catalog.utils.logging import get_logger


def _contains(haystack: str, needle: str) -> bool:
    return needle.strip().casefold() in haystack.casefold()


def _unique(ids: Iterable[int]) -> list[int]:
    return list(dict.fromkeys(ids))


class _CatalogStore:
    """Shared state behind the three repository facades."""

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.authors: dict[int, Author] = {}
        self.books: dict[int, Book] = {}
        self.categories: dict[int, str] = {}
        self.author_ids = itertools.count(1)
        self.book_ids = itertools.count(1)
        self.category_ids = itertools.count(1)

    # -- helpers; callers must hold ``lock`` --------------------------------

    def category_view(self, category_id: int) -> Category:
        books = tuple(
            book.summary()
            for book in self.books.values()
            if category_id in book.category_ids
        )
        return Category(
            category_id=category_id,
            name=self.categories[category_id],
            books=books,
        )

    def check_author(self, author_id: int | None) -> None:
        if author_id is not None and author_id not in self.authors:
            raise InvalidReferenceError(
                f"Author not found with id: {author_id}",
                entity_name="author",
                missing_ids=[author_id],
            )

    def check_categories(self, category_ids: Iterable[int]) -> None:
        missing = [cid for cid in category_ids if cid not in self.categories]
        if missing:
            raise InvalidReferenceError(
                f"Categories not found with IDs: {missing}",
                entity_name="category",
                missing_ids=missing,
            )

    def check_books(self, book_ids: Iterable[int]) -> None:
        missing = [bid for bid in book_ids if bid not in self.books]
        if missing:
            raise InvalidReferenceError(
                f"Books not found with IDs: {missing}",
                entity_name="book",
                missing_ids=missing,
            )

    def categories_matching(self, category_name: str) -> set[int]:
        return {
            cid for cid, name in self.categories.items() if _contains(name, category_name)
        }

    def name_taken(self, names: Iterable[str], name: str) -> bool:
        wanted = name.strip().casefold()
        return any(existing.casefold() == wanted for existing in names)


class _AuthorRepository(IAuthorRepository):
    def __init__(self, store: _CatalogStore) -> None:
        self._store = store

    async def get(self, author_id: int) -> Author | None:
        with self._store.lock:
            return self._store.authors.get(author_id)

    async def list_all(self) -> list[Author]:
        with self._store.lock:
            return [self._store.authors[k] for k in sorted(self._store.authors)]

    async def find_by_name(self, name: str) -> list[Author]:
        with self._store.lock:
            return [a for a in self._store.authors.values() if _contains(a.name, name)]

    async def find_by_book_category(self, category_name: str) -> list[Author]:
        with self._store.lock:
            matching = self._store.categories_matching(category_name)
            author_ids = {
                b.author_id for b in self._store.books.values()
                if b.author_id is not None and matching.intersection(b.category_ids)
            }
            return [self._store.authors[aid] for aid in sorted(author_ids)]

    async def exists_by_name(self, name: str) -> bool:
        with self._store.lock:
            return self._store.name_taken((a.name for a in self._store.authors.values()), name)

    async def save(self, name: str) -> Author:
        with self._store.lock:
            if self._store.name_taken((a.name for a in self._store.authors.values()), name):
                raise AlreadyExistsError(
                    f"Author with name '{name}' already exists", entity_name="author"
                )
            author = Author(author_id=next(self._store.author_ids), name=name.strip())
            self._store.authors[author.author_id] = author
            return author

    async def update(self, author_id: int, name: str) -> Author:
        with self._store.lock:
            current = self._store.authors.get(author_id)
            if current is None:
                raise NotFoundError(f"Author not found with id: {author_id}", entity_name="author")
            others = (a.name for a in self._store.authors.values() if a.author_id != author_id)
            if self._store.name_taken(others, name):
                raise AlreadyExistsError(
                    f"Author with name '{name}' already exists", entity_name="author"
                )
            updated = current.model_copy(update={"name": name.strip()})
            self._store.authors[author_id] = updated
            return updated

    async def delete(self, author_id: int) -> list[int]:
        with self._store.lock:
            if self._store.authors.pop(author_id, None) is None:
                raise NotFoundError(f"Author not found with id: {author_id}", entity_name="author")
            detached: list[int] = []
            for book_id, book in list(self._store.books.items()):
                if book.author_id == author_id:
                    self._store.books[book_id] = book.model_copy(update={"author_id": None})
                    detached.append(book_id)
            return detached


class _BookRepository(IBookRepository):
    def __init__(self, store: _CatalogStore) -> None:
        self._store = store

    async def get(self, book_id: int) -> Book | None:
        with self._store.lock:
            return self._store.books.get(book_id)

    async def list_all(self) -> list[Book]:
        with self._store.lock:
            return [self._store.books[k] for k in sorted(self._store.books)]

    async def find_by_title(self, title: str) -> list[Book]:
        with self._store.lock:
            return [b for b in self._store.books.values() if _contains(b.title, title)]

    async def find_by_author_id(self, author_id: int) -> list[Book]:
        with self._store.lock:
            return [b for b in self._store.books.values() if b.author_id == author_id]

    async def find_by_author_name(self, author_name: str) -> list[Book]:
        with self._store.lock:
            author_ids = {
                aid for aid, a in self._store.authors.items() if _contains(a.name, author_name)
            }
            return [b for b in self._store.books.values() if b.author_id in author_ids]

    async def find_by_category_name(self, category_name: str) -> list[Book]:
        with self._store.lock:
            matching = self._store.categories_matching(category_name)
            return [
                b for b in self._store.books.values()
                if matching.intersection(b.category_ids)
            ]

    async def find_by_category_id(self, category_id: int) -> list[Book]:
        with self._store.lock:
            return [b for b in self._store.books.values() if category_id in b.category_ids]

    async def save(
        self,
        title: str,
        author_id: int | None = None,
        category_ids: list[int] | None = None,
    ) -> Book:
        with self._store.lock:
            return self._insert(title, author_id, category_ids or [])

    async def save_all(self, books: list[dict]) -> list[Book]:
        with self._store.lock:
            # Validate everything first so a bad entry leaves the store untouched.
            for entry in books:
                self._store.check_author(entry.get("author_id"))
                self._store.check_categories(entry.get("category_ids") or [])
            return [
                self._insert(
                    entry["title"], entry.get("author_id"), entry.get("category_ids") or []
                )
                for entry in books
            ]

    async def update(
        self,
        book_id: int,
        title: str,
        author_id: int | None = None,
        category_ids: list[int] | None = None,
    ) -> Book:
        with self._store.lock:
            current = self._store.books.get(book_id)
            if current is None:
                raise NotFoundError(f"Book not found with id: {book_id}", entity_name="book")
            self._store.check_author(author_id)
            changes: dict = {"title": title.strip(), "author_id": author_id}
            if category_ids is not None:
                self._store.check_categories(category_ids)
                changes["category_ids"] = tuple(_unique(category_ids))
            updated = current.model_copy(update=changes)
            self._store.books[book_id] = updated
            return updated

    async def delete(self, book_id: int) -> None:
        with self._store.lock:
            if self._store.books.pop(book_id, None) is None:
                raise NotFoundError(f"Book not found with id: {book_id}", entity_name="book")

    def _insert(self, title: str, author_id: int | None, category_ids: list[int]) -> Book:
        self._store.check_author(author_id)
        self._store.check_categories(category_ids)
        book = Book(
            book_id=next(self._store.book_ids),
            title=title.strip(),
            author_id=author_id,
            category_ids=tuple(_unique(category_ids)),
        )
        self._store.books[book.book_id] = book
        return book


class _CategoryRepository(ICategoryRepository):
    def __init__(self, store: _CatalogStore) -> None:
        self._store = store

    async def get(self, category_id: int) -> Category | None:
        with self._store.lock:
            if category_id not in self._store.categories:
                return None
            return self._store.category_view(category_id)

    async def list_all(self) -> list[Category]:
        with self._store.lock:
            return [self._store.category_view(cid) for cid in sorted(self._store.categories)]

    async def find_by_name(self, name: str) -> list[Category]:
        with self._store.lock:
            return [
                self._store.category_view(cid)
                for cid, cname in self._store.categories.items()
                if _contains(cname, name)
            ]

    async def find_by_book_title(self, title: str) -> list[Category]:
        with self._store.lock:
            ids = _unique(
                cid
                for book in self._store.books.values()
                if _contains(book.title, title)
                for cid in book.category_ids
            )
            return [self._store.category_view(cid) for cid in sorted(ids)]

    async def find_by_book_id(self, book_id: int) -> list[Category]:
        with self._store.lock:
            book = self._store.books.get(book_id)
            if book is None:
                return []
            return [self._store.category_view(cid) for cid in sorted(book.category_ids)]

    async def exists_by_name(self, name: str) -> bool:
        with self._store.lock:
            return self._store.name_taken(self._store.categories.values(), name)

    async def save(self, name: str, book_ids: list[int] | None = None) -> Category:
        with self._store.lock:
            if self._store.name_taken(self._store.categories.values(), name):
                raise AlreadyExistsError(
                    f"Category with name '{name}' already exists", entity_name="category"
                )
            self._store.check_books(book_ids or [])
            category_id = next(self._store.category_ids)
            self._store.categories[category_id] = name.strip()
            self._file_books(category_id, book_ids or [])
            return self._store.category_view(category_id)

    async def update(
        self,
        category_id: int,
        name: str,
        book_ids: list[int] | None = None,
    ) -> Category:
        with self._store.lock:
            if category_id not in self._store.categories:
                raise NotFoundError(
                    f"Category not found with id: {category_id}", entity_name="category"
                )
            others = (n for cid, n in self._store.categories.items() if cid != category_id)
            if self._store.name_taken(others, name):
                raise AlreadyExistsError(
                    f"Category with name '{name}' already exists", entity_name="category"
                )
            if book_ids is not None:
                self._store.check_books(book_ids)
            self._store.categories[category_id] = name.strip()
            if book_ids is not None:
                self._unfile_all(category_id)
                self._file_books(category_id, book_ids)
            return self._store.category_view(category_id)

    async def delete(self, category_id: int) -> None:
        with self._store.lock:
            if self._store.categories.pop(category_id, None) is None:
                raise NotFoundError(
                    f"Category not found with id: {category_id}", entity_name="category"
                )
            self._unfile_all(category_id)

    def _file_books(self, category_id: int, book_ids: list[int]) -> None:
        for book_id in _unique(book_ids):
            book = self._store.books[book_id]
            if category_id not in book.category_ids:
                self._store.books[book_id] = book.model_copy(
                    update={"category_ids": (*book.category_ids, category_id)}
                )

    def _unfile_all(self, category_id: int) -> None:
        for book_id, book in list(self._store.books.items()):
            if category_id in book.category_ids:
                remaining = tuple(c for c in book.category_ids if c != category_id)
                self._store.books[book_id] = book.model_copy(update={"category_ids": remaining})


class MemoryCatalogRepository:
    """Bundle of author, book and category repositories over one shared store."""

    def __init__(self) -> None:
        store = _CatalogStore()
        self.authors: IAuthorRepository = _AuthorRepository(store)
        self.books: IBookRepository = _BookRepository(store)
        self.categories: ICategoryRepository = _CategoryRepository(store)
        self._logger: structlog.BoundLogger = get_logger(__name__)
        self._logger.debug("memory_catalog_repository_created")
