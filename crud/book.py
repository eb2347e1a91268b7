# crud/book.py: catalog operations, every mutation holds db.guard for its whole run
import asyncio
import logging
from typing import Iterable, Iterator, List, Optional

from database import Catalog
from errors import DuplicateRecord, NotFound, StorageIOError
from models import FIELDS, book_to_line, line_to_book
from schemas import Book, BookCreate

logger = logging.getLogger(__name__)

# compared as exact strings; any other field matches on a case-insensitive substring
EXACT_FIELDS = ("year", "width", "height")
MODES = ("update", "delete")


def _iter_books(db: Catalog) -> Iterator[Book]:
    for line in db.iter_lines():
        yield line_to_book(line)


def _next_id(db: Catalog) -> int:
    last = None
    for line in db.iter_lines():
        last = line
    if last is None:
        return 1
    book = line_to_book(last)
    try:
        return int(book.id) + 1
    except ValueError:
        raise StorageIOError(f"invalid id in catalog file: {book.id!r}")


def _is_unique(db: Catalog, book: BookCreate, ignore_id: Optional[str] = None) -> bool:
    for existing in _iter_books(db):
        if existing.id == ignore_id:
            continue
        if existing.name == book.name and existing.authors == book.authors:
            return False
    return True


def _create_book(db: Catalog, book: BookCreate) -> Book:
    with db.guard:
        db.backup()
        book_id = _next_id(db)
        logger.info("Creating book ID %s", book_id)
        if not _is_unique(db, book):
            logger.info("Book already exists: %s, %s", book.name, book.authors)
            raise DuplicateRecord(book.name, book.authors)
        stored = Book(id=str(book_id), **book.model_dump())
        db.append_line(book_to_line(stored))
    logger.info("Book created: %s (ID: %s)", stored.name, stored.id)
    return stored


def _search_books(db: Catalog, field: str, value: str) -> List[Book]:
    if field not in FIELDS:
        return []
    needle = value.lower()
    results = []
    for book in _iter_books(db):
        current = getattr(book, field)
        if field == "id":
            if current == value:
                return [book]
        elif field in EXACT_FIELDS:
            if current == value:
                results.append(book)
        elif needle in current.lower():
            results.append(book)
    return results


def _modify_books(db: Catalog, books: Iterable[Book], mode: str) -> List[str]:
    if mode not in MODES:
        raise ValueError(f"unknown modify mode: {mode}")
    targets = {book.id: book for book in books}
    report = []

    def rewritten() -> Iterator[str]:
        for line in db.iter_lines():
            current = line_to_book(line)
            target = targets.get(current.id)
            if target is None:
                yield line
            elif mode == "update":
                report.append(f"Updated book: {target.name} (ID: {target.id})")
                yield book_to_line(target)
            else:
                report.append(f"Deleted book: {current.name} (ID: {current.id})")

    with db.guard:
        db.backup()
        db.write_temp(rewritten())
        if not report:
            db.discard_temp()
            raise NotFound("No books found to change")
        db.commit_temp()
    logger.info("%s: %s", mode, "; ".join(report))
    return report


def _update_book(db: Catalog, book: Book) -> str:
    with db.guard:
        books = list(_iter_books(db))
        for i, existing in enumerate(books):
            if existing.id == book.id:
                books[i] = book
                break
        else:
            raise NotFound(f"Book with ID {book.id} not found")
        if not _is_unique(db, book, ignore_id=book.id):
            raise DuplicateRecord(book.name, book.authors)
        db.backup()
        db.rewrite(book_to_line(b) for b in books)
    logger.info("Book updated: %s (ID: %s)", book.name, book.id)
    return f"Book with ID {book.id} updated"


async def next_id(db: Catalog) -> int:
    return await asyncio.to_thread(_next_id, db)


async def is_unique(db: Catalog, book: BookCreate) -> bool:
    return await asyncio.to_thread(_is_unique, db, book)


async def create_book(db: Catalog, book: BookCreate) -> Book:
    """Assign the next id and append the book; raises DuplicateRecord on a (name, authors) clash."""
    return await asyncio.to_thread(_create_book, db, book)


async def get_books(db: Catalog) -> List[Book]:
    return await asyncio.to_thread(lambda: list(_iter_books(db)))


async def get_book(db: Catalog, book_id: str) -> Optional[Book]:
    found = await search_books(db, "id", book_id)
    return found[0] if found else None


async def get_books_by_ids(db: Catalog, ids: Iterable[str]) -> List[Book]:
    wanted = set(ids)
    return [book for book in await get_books(db) if book.id in wanted]


async def search_books(db: Catalog, field: str, value: str) -> List[Book]:
    return await asyncio.to_thread(_search_books, db, field, value)


async def modify_books(db: Catalog, books: Iterable[Book], mode: str) -> List[str]:
    """
    Rewrite the catalog, replacing ("update") or dropping ("delete") the
    lines whose id is among ``books``. Raises NotFound and leaves the file
    untouched when none of the ids is stored.
    """
    return await asyncio.to_thread(_modify_books, db, list(books), mode)


async def update_book(db: Catalog, book: Book) -> str:
    return await asyncio.to_thread(_update_book, db, book)


async def delete_books(db: Catalog, ids: Iterable[str]) -> List[str]:
    return await modify_books(db, await get_books_by_ids(db, ids), "delete")
