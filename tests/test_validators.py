from datetime import date, timedelta

import pytest

from services.validators import (
    ValidationError, normalize_list,
    validate_name, validate_authors, validate_genres, validate_year,
    validate_height_width, validate_added, validate_read, validate_rating,
    validate_cover, validate_source,
)


def test_name_accepts_latin_cyrillic_and_digits():
    assert validate_name("Война и мир 2") == "Война и мир 2"
    assert validate_name("War and Peace") == "War and Peace"


@pytest.mark.parametrize("name", ["", "Two  spaces", "Pipe|name", "Comma, name", "x" * 101])
def test_name_rejects(name):
    with pytest.raises(ValidationError):
        validate_name(name)


def test_name_double_space_message():
    with pytest.raises(ValidationError, match="double spaces"):
        validate_name("a  b")


def test_authors_are_normalized():
    assert validate_authors("Ivanov ,  Petrov") == "Ivanov, Petrov"
    assert validate_authors("Толстой,Пушкин") == "Толстой, Пушкин"
    assert normalize_list("A , B ,C") == "A, B, C"


def test_normalized_value_is_stable():
    once = validate_genres("Drama ,Comedy")
    assert validate_genres(once) == once


@pytest.mark.parametrize("authors", ["Ivanov,,Petrov", "A , , B", "Ivanov  Petrov", "Ivanov1", "O'Neil"])
def test_authors_rejects(authors):
    with pytest.raises(ValidationError):
        validate_authors(authors)


@pytest.mark.parametrize("value", ["Ivanov,", ", Ivanov", "Ivanov , "])
def test_list_rejects_edge_commas(value):
    with pytest.raises(ValidationError, match="start or end with a comma"):
        validate_authors(value)
    with pytest.raises(ValidationError, match="start or end with a comma"):
        validate_genres(value)


def test_genres_rejects_empty_item():
    with pytest.raises(ValidationError, match="double commas"):
        validate_genres("Novel , , Drama")


def test_list_length_limits():
    assert validate_authors("a" * 130)
    with pytest.raises(ValidationError, match="130"):
        validate_authors("a" * 131)
    with pytest.raises(ValidationError, match="genres"):
        validate_genres("a" * 101)


def test_year_bounds():
    this_year = date.today().year
    assert validate_year("1500") == "1500"
    assert validate_year(str(this_year)) == str(this_year)
    with pytest.raises(ValidationError, match="earlier than 1500"):
        validate_year("1499")
    with pytest.raises(ValidationError, match="later than the current year"):
        validate_year(str(this_year + 1))
    with pytest.raises(ValidationError, match="four digits"):
        validate_year("99")


def test_size_names_the_axis():
    assert validate_height_width("148.5", "width") == "148.5"
    assert validate_height_width("1000", "height") == "1000"
    with pytest.raises(ValidationError, match="height"):
        validate_height_width("1000.1", "height")
    with pytest.raises(ValidationError, match="width must be greater than zero"):
        validate_height_width("0", "width")
    with pytest.raises(ValidationError, match="width"):
        validate_height_width("-5", "width")


def test_added_rules():
    assert validate_added("01-01-2020", "2000") == "01-01-2020"
    with pytest.raises(ValidationError, match="earlier than the publication year"):
        validate_added("01-01-1999", "2000")
    tomorrow = (date.today() + timedelta(days=1)).strftime("%d-%m-%Y")
    with pytest.raises(ValidationError, match="future"):
        validate_added(tomorrow, "2000")
    with pytest.raises(ValidationError, match="real calendar date"):
        validate_added("31-02-2020", "2000")
    with pytest.raises(ValidationError, match="DD-MM-YYYY"):
        validate_added("2020-01-01", "2000")


def test_read_rules():
    assert validate_read("", "01-01-2020") == ""
    assert validate_read("01-01-2020", "01-01-2020") == "01-01-2020"
    with pytest.raises(ValidationError, match="earlier than the added date"):
        validate_read("31-12-2019", "01-01-2020")


def test_rating():
    assert validate_rating("") == ""
    assert validate_rating("8/10 - Good book") == "8/10 - Good book"
    assert validate_rating("10/10 - Wow, great!") == "10/10 - Wow, great!"
    for bad in ("11/10 - test", "0/10 - bad", "8/10 -", "8/10 Good", "8/10 - " + "a" * 201):
        with pytest.raises(ValidationError):
            validate_rating(bad)


def test_enums_are_exact():
    assert validate_cover("soft") == "soft"
    assert validate_source("inheritance") == "inheritance"
    with pytest.raises(ValidationError):
        validate_cover("Soft")
    with pytest.raises(ValidationError):
        validate_source("stolen")
