# services/session.py: one client's walk through the catalog menus
import logging
import re
from dataclasses import dataclass
from functools import partial
from typing import Awaitable, Callable, Dict, Iterable, Mapping, Optional

from pydantic import ValidationError as SchemaError

from crud.book import (
    create_book, delete_books as remove_books, get_book, get_books, get_books_by_ids, search_books, update_book,
)
from database import Catalog
from errors import CatalogError, StorageIOError
from models import FIELDS
from schemas import Book, BookCreate
from services.menus import (
    MAIN_MENU, CREATE_MENU, READ_MENU, SEARCH_MENU, DELETE_MENU, UPDATE_MENU, FILTER_MENU,
    format_book_list, format_summary,
)
from services.transport import LineTransport, SessionClosed
from services.validators import (
    ValidationError,
    validate_name, validate_authors, validate_genres, validate_year,
    validate_height_width, validate_cover, validate_source,
    validate_added, validate_read, validate_rating,
)

logger = logging.getLogger(__name__)

YES = ("д", "y")
INTEGER_FIELDS = ("id", "width", "height")
INTEGER = re.compile(r"^[+-]?[0-9]+$")
BACK_TO_MENU = "Send '0' to view the menu"

Action = Callable[[], Awaitable[None]]


@dataclass(frozen=True)
class FieldSpec:
    name: str
    prompt: str
    # (value, fields collected so far) -> value to store
    check: Callable[[str, Mapping[str, str]], str]
    optional: bool = False


BOOK_FIELDS = [
    FieldSpec("name", "Enter the book name:", lambda v, d: validate_name(v)),
    FieldSpec("authors", "Enter the authors (comma separated):", lambda v, d: validate_authors(v)),
    FieldSpec("genres", "Enter the genres (comma separated):", lambda v, d: validate_genres(v)),
    FieldSpec("year", "Enter the publication year:", lambda v, d: validate_year(v)),
    FieldSpec("width", "Enter the book width (mm):", lambda v, d: validate_height_width(v, "width")),
    FieldSpec("height", "Enter the book height (mm):", lambda v, d: validate_height_width(v, "height")),
    FieldSpec("cover", "Enter the cover type (soft/hard):", lambda v, d: validate_cover(v)),
    FieldSpec("source", "Enter the source (purchase/gift/inheritance):", lambda v, d: validate_source(v)),
    FieldSpec("added", "Enter the date added (DD-MM-YYYY):", lambda v, d: validate_added(v, d.get("year", ""))),
    FieldSpec(
        "read", "Enter the date read (DD-MM-YYYY) or leave empty:",
        lambda v, d: validate_read(v, d.get("added", "")), optional=True,
    ),
    FieldSpec(
        "rating", "Enter the rating (X/10 - comment) or leave empty:",
        lambda v, d: validate_rating(v), optional=True,
    ),
]


class FieldCollector:
    """
    Collects a book one field at a time.

    Holds no I/O: the session shows ``prompt``, passes the client's answer to
    ``feed`` and repeats until ``done``. A rejected answer leaves the
    collector on the same field. With ``keep_current`` an empty answer keeps
    the value already in ``draft`` (used when editing a stored book).
    """

    def __init__(self, fields: Iterable[FieldSpec], draft: Optional[Mapping[str, str]] = None,
                 keep_current: bool = False):
        self.fields = list(fields)
        self.draft: Dict[str, str] = dict(draft or {})
        self.keep_current = keep_current
        self.index = 0

    @property
    def done(self) -> bool:
        return self.index >= len(self.fields)

    @property
    def current(self) -> FieldSpec:
        return self.fields[self.index]

    @property
    def prompt(self) -> str:
        if self.keep_current:
            return f"{self.current.prompt} (current: {self.draft.get(self.current.name, '')})"
        return self.current.prompt

    def feed(self, line: str) -> Optional[str]:
        """Returns the rejection message, or None when the field was accepted."""
        spec = self.current
        if line == "" and (self.keep_current or spec.optional):
            self.draft.setdefault(spec.name, "")
            self.index += 1
            return None
        try:
            self.draft[spec.name] = spec.check(line, self.draft)
        except ValidationError as e:
            return str(e)
        self.index += 1
        return None


class Session:
    def __init__(self, transport: LineTransport, db: Catalog, peer: str = "client"):
        self.transport = transport
        self.db = db
        self.peer = peer

    async def send(self, text: str) -> None:
        await self.transport.write_line(text)

    async def receive(self) -> str:
        return (await self.transport.read_line()).strip()

    async def run(self) -> None:
        logger.info("Session started for %s", self.peer)
        try:
            await self.send("Connected to the book catalog!")
            await self.menu(MAIN_MENU, {
                "1": partial(self.menu, CREATE_MENU, {"1": self.enter_book}),
                "2": partial(self.menu, READ_MENU, {"1": self.list_books}),
                "3": partial(self.menu, SEARCH_MENU, {"1": self.filter_menu}, submenus=True),
                "4": partial(self.menu, DELETE_MENU, {"1": self.delete_books}),
                "5": partial(self.menu, UPDATE_MENU, {"1": self.update_book}),
            }, submenus=True, top=True)
        except SessionClosed:
            logger.info("Connection with %s closed", self.peer)
            return
        logger.info("Connection with %s closed by exit", self.peer)

    async def menu(self, text: str, actions: Dict[str, Action], submenus: bool = False,
                   top: bool = False, exit_text: str = "Back to the main menu") -> None:
        """
        Run one menu level until the client sends ``exit``.

        ``0`` redisplays ``text``. With ``submenus`` the actions are nested
        menus and ``text`` is shown again once one of them returns.
        """
        await self.send(text)
        while True:
            choice = await self.receive()
            if choice == "exit":
                await self.send("Goodbye!" if top else exit_text)
                return
            if choice == "0":
                await self.send(text)
                continue
            action = actions.get(choice)
            if action is None:
                await self.send("Invalid choice. Try again.")
                continue
            await action()
            if submenus:
                await self.send(text)

    async def collect(self, collector: FieldCollector) -> Dict[str, str]:
        while not collector.done:
            await self.send(collector.prompt)
            error = collector.feed(await self.receive())
            if error:
                await self.send(f"Invalid input: {error}")
        return collector.draft

    async def confirm(self, question: str) -> bool:
        await self.send(question)
        return (await self.receive()).lower() in YES

    async def report_failure(self, e: CatalogError) -> None:
        if isinstance(e, StorageIOError):
            logger.error("Storage failure for %s: %s", self.peer, e, exc_info=e)
            await self.send(f"Operation failed: {e}")
        else:
            await self.send(str(e))

    async def enter_book(self) -> None:
        draft = await self.collect(FieldCollector(BOOK_FIELDS))
        await self.send(format_summary(draft))
        if not await self.confirm("Add this book? (y/n):"):
            await self.send(f"Adding cancelled. {BACK_TO_MENU}")
            return
        await self.send("Adding the book...")
        try:
            stored = await create_book(self.db, BookCreate(**draft))
        except SchemaError as e:
            await self.send(f"Invalid input: {e.errors()[0]['msg']}")
        except CatalogError as e:
            await self.report_failure(e)
        else:
            await self.send(f"Book added: {stored.name} (ID: {stored.id})")
        await self.send(BACK_TO_MENU)

    async def list_books(self) -> None:
        try:
            books = await get_books(self.db)
        except CatalogError as e:
            await self.report_failure(e)
        else:
            await self.send(format_book_list(books))
        await self.send(BACK_TO_MENU)

    async def filter_menu(self) -> None:
        actions = {str(i): partial(self.search_by, field) for i, field in enumerate(FIELDS, 1)}
        await self.menu(FILTER_MENU, actions, exit_text="Back to the search menu")

    async def search_by(self, field: str) -> None:
        await self.send(f"Enter the value to search by field '{field}':")
        value = await self.receive()
        while field in INTEGER_FIELDS and not INTEGER.match(value):
            await self.send("Must be a whole number. Try again:")
            value = await self.receive()
        try:
            books = await search_books(self.db, field, value)
        except CatalogError as e:
            await self.report_failure(e)
            return
        if not books:
            await self.send("No books found")
            return
        await self.send("Books found:")
        await self.send(format_book_list(books))

    async def delete_books(self) -> None:
        await self.send("Enter the IDs of the books to delete (comma separated):")
        ids = [part.strip() for part in (await self.receive()).split(",") if part.strip()]
        try:
            books = await get_books_by_ids(self.db, ids)
        except CatalogError as e:
            await self.report_failure(e)
            return
        if not books:
            await self.send(f"No books found to delete. {BACK_TO_MENU}")
            return
        listing = ["Books found for deletion:"]
        listing += [f"ID: {b.id}, Name: {b.name}, Authors: {b.authors}" for b in books]
        await self.send("\n".join(listing))
        if await self.confirm("Confirm deletion (y/n):"):
            try:
                report = await remove_books(self.db, [b.id for b in books])
            except CatalogError as e:
                await self.report_failure(e)
            else:
                await self.send("\n".join(report))
        else:
            await self.send("Deletion cancelled")
        await self.send(BACK_TO_MENU)

    async def update_book(self) -> None:
        await self.send("Enter the ID of the book to update:")
        book_id = await self.receive()
        try:
            book = await get_book(self.db, book_id)
        except CatalogError as e:
            await self.report_failure(e)
            return
        if book is None:
            await self.send(f"Book not found. {BACK_TO_MENU}")
            return
        await self.send(f"Found book: {book.name}")
        await self.send("Enter new values (leave empty to keep the current one)")
        draft = await self.collect(FieldCollector(BOOK_FIELDS, draft=book.model_dump(), keep_current=True))
        await self.send("Changes:")
        await self.send(format_summary(draft))
        if await self.confirm("Confirm update (y/n):"):
            try:
                checked = BookCreate(**draft)
                result = await update_book(self.db, Book(id=book.id, **checked.model_dump()))
            except SchemaError as e:
                await self.send(f"Invalid input: {e.errors()[0]['msg']}")
            except CatalogError as e:
                await self.report_failure(e)
            else:
                await self.send(result)
        else:
            await self.send("Update cancelled")
        await self.send(BACK_TO_MENU)
