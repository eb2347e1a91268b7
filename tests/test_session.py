from datetime import date

import pytest

from crud.book import create_book, get_books
from schemas import BookCreate
from services.menus import CREATE_MENU, FILTER_MENU, MAIN_MENU, SEARCH_MENU
from services.session import BOOK_FIELDS, FieldCollector, Session


def create_lines(book_data):
    return [
        book_data["name"], book_data["authors"], book_data["genres"], book_data["year"],
        book_data["width"], book_data["height"], book_data["cover"], book_data["source"],
        book_data["added"], book_data["read"], book_data["rating"],
    ]


async def run(catalog, scripted, lines):
    transport = scripted(lines)
    await Session(transport, catalog).run()
    return transport


# --- field collector ---

def test_collector_stays_on_rejected_field():
    collector = FieldCollector(BOOK_FIELDS)
    assert collector.prompt == "Enter the book name:"
    assert "double spaces" in collector.feed("Bad  name")
    assert collector.current.name == "name"
    assert collector.feed("Good name") is None
    assert collector.current.name == "authors"


def test_collector_stores_normalized_values(book_data):
    collector = FieldCollector(BOOK_FIELDS)
    for line in create_lines({**book_data, "authors": "Ivanov ,  Petrov", "rating": ""}):
        assert collector.feed(line) is None
    assert collector.done
    assert collector.draft["authors"] == "Ivanov, Petrov"
    assert collector.draft["read"] == ""
    assert collector.draft["rating"] == ""


def test_collector_checks_added_against_collected_year(book_data):
    collector = FieldCollector(BOOK_FIELDS)
    for line in create_lines(book_data)[:8]:
        collector.feed(line)
    assert collector.current.name == "added"
    assert "publication year" in collector.feed("01-01-1999")
    assert collector.feed("01-01-2020") is None


def test_required_field_rejects_empty_line():
    collector = FieldCollector(BOOK_FIELDS)
    assert collector.feed("") is not None
    assert collector.index == 0


def test_collector_keep_current(book_data):
    collector = FieldCollector(BOOK_FIELDS, draft={"id": "3", **book_data}, keep_current=True)
    assert collector.prompt == "Enter the book name: (current: Book A)"
    assert collector.feed("") is None
    assert collector.draft["name"] == "Book A"
    assert collector.feed("Tolstoy") is None
    assert collector.draft["authors"] == "Tolstoy"


# --- scripted sessions ---

async def test_create_flow_with_retries(catalog, scripted, book_data):
    fields = create_lines({**book_data, "authors": "Ivanov ,  Petrov"})
    fields[8:9] = ["01-01-1999", "01-01-2020"]
    fields[-1:] = ["11/10 - test", "8/10 - Good book"]
    transport = await run(catalog, scripted, ["1", "1", *fields, "y", "exit", "exit"])

    out = transport.output
    assert out[0] == "Connected to the book catalog!"
    assert out[1] == MAIN_MENU
    assert out[2] == CREATE_MENU
    assert "Invalid input: added date cannot be earlier than the publication year" in out
    assert any(line.startswith("Invalid input: rating must look like") for line in out)
    assert "Book added: Book A (ID: 1)" in out
    assert out[-3:] == ["Back to the main menu", MAIN_MENU, "Goodbye!"]

    books = await get_books(catalog)
    assert [(b.id, b.authors, b.rating) for b in books] == [("1", "Ivanov, Petrov", "8/10 - Good book")]


async def test_create_cancelled(catalog, scripted, book_data):
    transport = await run(catalog, scripted, ["1", "1", *create_lines(book_data), "n"])
    assert "Adding cancelled. Send '0' to view the menu" in transport.output
    assert await get_books(catalog) == []


async def test_create_duplicate_is_reported(catalog, scripted, book_data):
    await create_book(catalog, BookCreate(**book_data))
    transport = await run(catalog, scripted, ["1", "1", *create_lines(book_data), "Y"])
    assert "Book already in the catalog: Book A, written by Ivanov, Petrov" in transport.output
    assert len(await get_books(catalog)) == 1


async def test_menu_navigation(catalog, scripted):
    transport = await run(catalog, scripted, ["0", "9", "1", "0", "7", "exit", "exit"])
    out = transport.output
    assert out[1:3] == [MAIN_MENU, MAIN_MENU]
    assert out[3] == "Invalid choice. Try again."
    assert out[4:6] == [CREATE_MENU, CREATE_MENU]
    assert out[6] == "Invalid choice. Try again."
    assert out[7:] == ["Back to the main menu", MAIN_MENU, "Goodbye!"]


async def test_session_ends_quietly_when_client_disconnects(catalog, scripted):
    transport = await run(catalog, scripted, ["1", "1", "Half entered"])
    assert transport.output[-1] == "Enter the authors (comma separated):"


async def test_read_flow(catalog, scripted, book_data):
    transport = await run(catalog, scripted, ["2", "1"])
    assert "The book list is empty" in transport.output

    await create_book(catalog, BookCreate(**book_data))
    transport = await run(catalog, scripted, ["2", "1"])
    listing = transport.output[-2]
    assert "Name: Book A" in listing
    assert "Size: 150x200 mm" in listing
    assert listing.endswith("Total books: 1")


async def test_read_reports_storage_failure(catalog, scripted):
    with open(catalog.path, "w", encoding="utf-8") as f:
        f.write("1|broken\n")
    transport = await run(catalog, scripted, ["2", "1", "exit", "exit"])
    assert any(line.startswith("Operation failed: cannot parse stored line") for line in transport.output)
    assert transport.output[-1] == "Goodbye!"


async def test_search_flow(catalog, scripted, book_data):
    await create_book(catalog, BookCreate(**book_data))
    lines = ["3", "1", "3", "2000", "1", "abc", "1", "2", "missing", "exit", "exit", "exit"]
    transport = await run(catalog, scripted, lines)
    out = transport.output

    assert out[2] == SEARCH_MENU
    assert out[3] == FILTER_MENU
    assert "Enter the value to search by field 'year':" in out
    assert "Must be a whole number. Try again:" in out
    assert out.count("Books found:") == 2
    assert "No books found" in out
    assert out[-5:] == [
        "Back to the search menu", SEARCH_MENU, "Back to the main menu", MAIN_MENU, "Goodbye!",
    ]


async def test_delete_flow(catalog, scripted, book_data):
    await create_book(catalog, BookCreate(**book_data))
    await create_book(catalog, BookCreate(**{**book_data, "name": "Book B"}))
    transport = await run(catalog, scripted, ["4", "1", " 1 , 5", "д"])
    out = transport.output
    assert "Books found for deletion:\nID: 1, Name: Book A, Authors: Ivanov, Petrov" in out
    assert "Deleted book: Book A (ID: 1)" in out
    assert [b.id for b in await get_books(catalog)] == ["2"]


async def test_delete_cancelled_and_not_found(catalog, scripted, book_data):
    await create_book(catalog, BookCreate(**book_data))
    transport = await run(catalog, scripted, ["4", "1", "1", "no", "1", "42"])
    assert "Deletion cancelled" in transport.output
    assert "No books found to delete. Send '0' to view the menu" in transport.output
    assert len(await get_books(catalog)) == 1


async def test_update_flow(catalog, scripted, book_data):
    await create_book(catalog, BookCreate(**book_data))
    edits = [""] * 9 + ["31-12-2019", "05-05-2021", ""]
    transport = await run(catalog, scripted, ["5", "1", "1", *edits, "y"])
    out = transport.output
    assert "Found book: Book A" in out
    assert "Invalid input: read date cannot be earlier than the added date" in out
    assert "Book with ID 1 updated" in out
    [book] = await get_books(catalog)
    assert book.read == "05-05-2021"
    assert book.name == "Book A"


async def test_update_unknown_book(catalog, scripted):
    transport = await run(catalog, scripted, ["5", "1", "8"])
    assert "Book not found. Send '0' to view the menu" in transport.output


@pytest.mark.parametrize("answer", ["n", "maybe", ""])
async def test_update_cancelled(catalog, scripted, book_data, answer):
    await create_book(catalog, BookCreate(**book_data))
    transport = await run(catalog, scripted, ["5", "1", "1", "New name", *[""] * 10, answer])
    assert "Update cancelled" in transport.output
    [book] = await get_books(catalog)
    assert book.name == "Book A"


async def test_update_rechecks_dates_before_saving(catalog, scripted, book_data):
    await create_book(catalog, BookCreate(**book_data))
    this_year = str(date.today().year)
    edits = ["", "", "", this_year] + [""] * 7
    transport = await run(catalog, scripted, ["5", "1", "1", *edits, "y"])
    out = transport.output
    assert any(
        line.startswith("Invalid input:") and "added date cannot be earlier than the publication year" in line
        for line in out
    )
    assert not any(line.endswith("updated") for line in out)
    [book] = await get_books(catalog)
    assert (book.year, book.added) == ("2000", "01-01-2020")
