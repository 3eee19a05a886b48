"""Unit tests for MemoryCatalogRepository."""

from __future__ import annotations

import pytest

from library_catalog.providers.catalog.memory_repository import MemoryCatalogRepository
from library_catalog.utils.errors import (
    AlreadyExistsError,
    InvalidReferenceError,
    NotFoundError,
)


# ======================================================================
# Authors
# ======================================================================


class TestAuthors:
    @pytest.mark.asyncio
    async def test_save_assigns_increasing_ids(self, repository: MemoryCatalogRepository) -> None:
        first = await repository.authors.save("Ursula K. Le Guin")
        second = await repository.authors.save("Terry Pratchett")
        assert second.author_id > first.author_id
        assert await repository.authors.get(first.author_id) == first

    @pytest.mark.asyncio
    async def test_duplicate_name_rejected_case_insensitively(
        self, repository: MemoryCatalogRepository
    ) -> None:
        await repository.authors.save("Terry Pratchett")
        with pytest.raises(AlreadyExistsError):
            await repository.authors.save("terry pratchett")

    @pytest.mark.asyncio
    async def test_find_by_name_substring(self, repository: MemoryCatalogRepository) -> None:
        await repository.authors.save("Terry Pratchett")
        await repository.authors.save("Terry Brooks")
        await repository.authors.save("Neil Gaiman")
        found = await repository.authors.find_by_name("TERRY")
        assert {a.name for a in found} == {"Terry Pratchett", "Terry Brooks"}

    @pytest.mark.asyncio
    async def test_update_unknown_raises(self, repository: MemoryCatalogRepository) -> None:
        with pytest.raises(NotFoundError):
            await repository.authors.update(99, "Nobody")

    @pytest.mark.asyncio
    async def test_delete_detaches_books(self, repository: MemoryCatalogRepository) -> None:
        author = await repository.authors.save("Iain M. Banks")
        book = await repository.books.save("Excession", author.author_id)

        detached = await repository.authors.delete(author.author_id)

        assert detached == [book.book_id]
        assert (await repository.books.get(book.book_id)).author_id is None
        assert await repository.authors.get(author.author_id) is None

    @pytest.mark.asyncio
    async def test_find_by_book_category(self, repository: MemoryCatalogRepository) -> None:
        banks = await repository.authors.save("Iain M. Banks")
        beard = await repository.authors.save("Mary Beard")
        scifi = await repository.categories.save("Science Fiction")
        history = await repository.categories.save("History")
        await repository.books.save("Excession", banks.author_id, [scifi.category_id])
        await repository.books.save("SPQR", beard.author_id, [history.category_id])
        await repository.books.save("Anonymous", None, [scifi.category_id])

        found = await repository.authors.find_by_book_category("SCIENCE")
        assert found == [banks]
        assert await repository.authors.find_by_book_category("poetry") == []


# ======================================================================
# Books
# ======================================================================


class TestBooks:
    @pytest.mark.asyncio
    async def test_unknown_author_rejected(self, repository: MemoryCatalogRepository) -> None:
        with pytest.raises(InvalidReferenceError) as exc_info:
            await repository.books.save("Orphan", author_id=42)
        assert exc_info.value.missing_ids == [42]

    @pytest.mark.asyncio
    async def test_unknown_categories_rejected(self, repository: MemoryCatalogRepository) -> None:
        with pytest.raises(InvalidReferenceError) as exc_info:
            await repository.books.save("Lost", category_ids=[5, 6])
        assert exc_info.value.missing_ids == [5, 6]

    @pytest.mark.asyncio
    async def test_save_all_is_all_or_nothing(self, repository: MemoryCatalogRepository) -> None:
        with pytest.raises(InvalidReferenceError):
            await repository.books.save_all(
                [{"title": "Good"}, {"title": "Bad", "author_id": 7}]
            )
        assert await repository.books.list_all() == []

    @pytest.mark.asyncio
    async def test_find_by_category_name(self, repository: MemoryCatalogRepository) -> None:
        fantasy = await repository.categories.save("Fantasy")
        await repository.categories.save("History")
        book = await repository.books.save("Mort", category_ids=[fantasy.category_id])
        await repository.books.save("SPQR")

        found = await repository.books.find_by_category_name("fant")
        assert found == [book]

    @pytest.mark.asyncio
    async def test_find_by_author_name(self, repository: MemoryCatalogRepository) -> None:
        pratchett = await repository.authors.save("Terry Pratchett")
        gaiman = await repository.authors.save("Neil Gaiman")
        mort = await repository.books.save("Mort", pratchett.author_id)
        await repository.books.save("Coraline", gaiman.author_id)
        await repository.books.save("Orphan")

        assert await repository.books.find_by_author_name("pratch") == [mort]

    @pytest.mark.asyncio
    async def test_update_keeps_categories_when_omitted(
        self, repository: MemoryCatalogRepository
    ) -> None:
        cat = await repository.categories.save("Fantasy")
        book = await repository.books.save("Mort", category_ids=[cat.category_id])
        updated = await repository.books.update(book.book_id, "Mort (revised)")
        assert updated.category_ids == (cat.category_id,)

    @pytest.mark.asyncio
    async def test_delete_unknown_raises(self, repository: MemoryCatalogRepository) -> None:
        with pytest.raises(NotFoundError):
            await repository.books.delete(1)


# ======================================================================
# Categories
# ======================================================================


class TestCategories:
    @pytest.mark.asyncio
    async def test_save_files_books(self, repository: MemoryCatalogRepository) -> None:
        book = await repository.books.save("Small Gods")
        category = await repository.categories.save("Satire", [book.book_id])

        assert [b.title for b in category.books] == ["Small Gods"]
        assert (await repository.books.get(book.book_id)).category_ids == (category.category_id,)

    @pytest.mark.asyncio
    async def test_save_with_unknown_book_stores_nothing(
        self, repository: MemoryCatalogRepository
    ) -> None:
        with pytest.raises(InvalidReferenceError):
            await repository.categories.save("Satire", [123])
        assert await repository.categories.list_all() == []

    @pytest.mark.asyncio
    async def test_update_replaces_book_list(self, repository: MemoryCatalogRepository) -> None:
        first = await repository.books.save("Guards! Guards!")
        second = await repository.books.save("Night Watch")
        category = await repository.categories.save("Watch", [first.book_id])

        updated = await repository.categories.update(
            category.category_id, "City Watch", [second.book_id]
        )

        assert updated.name == "City Watch"
        assert [b.book_id for b in updated.books] == [second.book_id]
        assert (await repository.books.get(first.book_id)).category_ids == ()

    @pytest.mark.asyncio
    async def test_delete_removes_category_from_books(
        self, repository: MemoryCatalogRepository
    ) -> None:
        book = await repository.books.save("Hogfather")
        category = await repository.categories.save("Holiday", [book.book_id])

        await repository.categories.delete(category.category_id)

        assert (await repository.books.get(book.book_id)).category_ids == ()
        assert await repository.categories.get(category.category_id) is None

    @pytest.mark.asyncio
    async def test_category_view_reflects_book_rename(
        self, repository: MemoryCatalogRepository
    ) -> None:
        book = await repository.books.save("Draft")
        category = await repository.categories.save("Drafts", [book.book_id])
        await repository.books.update(book.book_id, "Final")

        refreshed = await repository.categories.get(category.category_id)
        assert [b.title for b in refreshed.books] == ["Final"]

    @pytest.mark.asyncio
    async def test_find_by_book_title(self, repository: MemoryCatalogRepository) -> None:
        book = await repository.books.save("The Colour of Magic")
        category = await repository.categories.save("Discworld", [book.book_id])
        await repository.categories.save("Unrelated")

        found = await repository.categories.find_by_book_title("colour")
        assert [c.category_id for c in found] == [category.category_id]

    @pytest.mark.asyncio
    async def test_find_by_book_id(self, repository: MemoryCatalogRepository) -> None:
        book = await repository.books.save("Good Omens")
        comedy = await repository.categories.save("Comedy", [book.book_id])
        fantasy = await repository.categories.save("Fantasy", [book.book_id])
        await repository.categories.save("Unrelated")

        found = await repository.categories.find_by_book_id(book.book_id)
        assert [c.category_id for c in found] == [comedy.category_id, fantasy.category_id]
        assert await repository.categories.find_by_book_id(999) == []
