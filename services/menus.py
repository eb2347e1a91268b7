# services/menus.py: static menu text and the renderers for books
from typing import List, Mapping

from models import FIELDS
from schemas import Book

RULE = "-" * 50

MAIN_MENU = """
 -----------------
| Choose an action |
 -----------------
0 - Menu
1 - Create
2 - Read
3 - Search
4 - Delete
5 - Update
exit - Quit
"""

CREATE_MENU = """
 ------------
| Add a book |
 ------------
1/
|---- 0 - Menu
|---- 1 - Enter a book
|---- exit - Back
"""

READ_MENU = """
 ------------
| View books |
 ------------
2/
|---- 0 - Menu
|---- 1 - List books
|---- exit - Back
"""

SEARCH_MENU = """
 --------------
| Search books |
 --------------
3/
|---- 0 - Menu
|---- 1 - Find books
|---- exit - Back
"""

DELETE_MENU = """
 --------------
| Delete books |
 --------------
4/
|---- 0 - Menu
|---- 1 - Delete books
|---- exit - Back
"""

UPDATE_MENU = """
 --------------
| Update books |
 --------------
5/
|---- 0 - Menu
|---- 1 - Update a book
|---- exit - Back
"""

FILTER_MENU = (
    "\n -----------\n| Find books |\n -----------\n---- */\n|---- ---- 0 - Menu\n"
    + "".join(f"|---- ---- {i} - By field '{f}'\n" for i, f in enumerate(FIELDS, 1))
    + "|---- ---- exit - Back\n"
)


def format_book(book: Book) -> str:
    return (
        f"ID: {book.id}\n"
        f"Name: {book.name}\n"
        f"Authors: {book.authors}\n"
        f"Year: {book.year}\n"
        f"Genres: {book.genres}\n"
        f"Size: {book.width}x{book.height} mm\n"
        f"Cover: {book.cover}\n"
        f"Source: {book.source}\n"
        f"Added: {book.added}\n"
        f"Read: {book.read}\n"
        f"Rating: {book.rating}\n"
    )


def format_book_list(books: List[Book]) -> str:
    if not books:
        return "The book list is empty"
    parts = ["\nBooks:", RULE]
    for book in books:
        parts.append(format_book(book) + RULE)
    parts.append(f"Total books: {len(books)}")
    return "\n".join(parts)


def format_summary(fields: Mapping[str, str]) -> str:
    """Confirmation block shown before a create or update is committed."""
    book = Book(**{"id": "", **fields})
    return (
        f"\nID: {book.id}\n"
        f"Name: {book.name}\n"
        f"Authors: {book.authors}\n"
        f"Genres: {book.genres}\n"
        f"Year: {book.year}\n"
        f"Size: {book.width}x{book.height} mm\n"
        f"Cover: {book.cover}\n"
        f"Source: {book.source}\n"
        f"Added: {book.added}\n"
        f"Read: {book.read}\n"
        f"Rating: {book.rating}\n"
    )
