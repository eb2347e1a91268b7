# models.py: how a Book is laid out on one line of the catalog file
from schemas import Book
from errors import MalformedRecord

DELIMITER = "|"
FIELDS = (
    "id", "name", "year", "authors", "genres", "width", "height",
    "cover", "source", "added", "read", "rating",
)
FIELD_COUNT = len(FIELDS)


def book_to_line(book: Book) -> str:
    return DELIMITER.join(getattr(book, field) for field in FIELDS)


def line_to_book(line: str) -> Book:
    parts = line.strip().split(DELIMITER)
    if len(parts) < FIELD_COUNT:
        raise MalformedRecord(line, len(parts))
    # stored lines are taken as is, without the BookCreate rules
    return Book(**dict(zip(FIELDS, parts)))
