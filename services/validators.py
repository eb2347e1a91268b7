"""
Field validation for book records

Every validator takes the raw text a client typed (already stripped) and
either returns the value to store or raises ValidationError with a message
that can be shown to the client as is.

"""
import re
from datetime import date, datetime
from typing import Union

DATE_FORMAT = "%d-%m-%Y"
MIN_YEAR = 1500
MAX_SIZE_MM = 1000
COVERS = ("soft", "hard")
SOURCES = ("purchase", "gift", "inheritance")

LETTERS = "А-Яа-яЁёA-Za-z"
PATTERNS = {
    "name": re.compile(rf"^[{LETTERS}0-9 ]{{1,100}}$"),
    "authors": re.compile(rf"^[{LETTERS} ,]{{1,130}}$"),
    "genres": re.compile(rf"^[{LETTERS} ,]{{1,100}}$"),
    "year": re.compile(r"^[0-9]{4}$"),
    "size": re.compile(r"^[0-9]+(\.[0-9]+)?$"),
    "date": re.compile(r"^[0-9]{2}-[0-9]{2}-[0-9]{4}$"),
    "rating": re.compile(rf"^([1-9]|10)/10 - [{LETTERS}0-9 ,.!?]{{1,200}}$"),
}
SEPARATOR = re.compile(r"\s*,\s*")
EMPTY_ITEM = re.compile(r",\s*,")

VALIDATION_ERRORS = {
    "name_spaces": "name must not contain double spaces",
    "name_chars": "name may contain only letters, digits and spaces (1-100 characters)",
    "list_doubles": "{} must not contain double spaces or double commas",
    "list_edges": "{} must not start or end with a comma",
    "list_chars": "{} may contain only letters, spaces and commas (up to {} characters)",
    "year_format": "year must be four digits",
    "year_future": "year cannot be later than the current year",
    "year_past": "year cannot be earlier than {}".format(MIN_YEAR),
    "size_format": "{} must be a positive number of millimetres",
    "size_positive": "{} must be greater than zero",
    "size_max": "{} cannot be more than a metre ({} mm)",
    "date_format": "{} date must be in the DD-MM-YYYY format",
    "date_invalid": "{} date is not a real calendar date",
    "added_future": "added date cannot be in the future",
    "added_before_year": "added date cannot be earlier than the publication year",
    "added_year": "publication year must be set before the added date",
    "read_before_added": "read date cannot be earlier than the added date",
    "rating": "rating must look like 'X/10 - comment' (for example '8/10 - Good book')",
    "cover": "cover must be 'soft' or 'hard'",
    "source": "source must be 'purchase', 'gift' or 'inheritance'",
}


class ValidationError(ValueError):
    """A field value breaks one of the catalog rules."""


def normalize_list(value: str) -> str:
    """Collapse whitespace around every comma into a single ', '."""
    return SEPARATOR.sub(", ", value)


def parse_date(value: str, label: str) -> date:
    if not PATTERNS["date"].match(value):
        raise ValidationError(VALIDATION_ERRORS["date_format"].format(label))
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except ValueError:
        raise ValidationError(VALIDATION_ERRORS["date_invalid"].format(label))


def validate_name(name: str) -> str:
    if "  " in name:
        raise ValidationError(VALIDATION_ERRORS["name_spaces"])
    if not PATTERNS["name"].match(name):
        raise ValidationError(VALIDATION_ERRORS["name_chars"])
    return name


def _validate_list(value: str, field: str, max_length: int) -> str:
    if EMPTY_ITEM.search(value):
        raise ValidationError(VALIDATION_ERRORS["list_doubles"].format(field))
    if value.strip().startswith(",") or value.strip().endswith(","):
        raise ValidationError(VALIDATION_ERRORS["list_edges"].format(field))
    normalized = normalize_list(value)
    if "  " in normalized or ",," in normalized:
        raise ValidationError(VALIDATION_ERRORS["list_doubles"].format(field))
    if not PATTERNS[field].match(normalized):
        raise ValidationError(VALIDATION_ERRORS["list_chars"].format(field, max_length))
    return normalized


def validate_authors(authors: str) -> str:
    """
    Validates and normalizes a comma separated list of authors

    Parameters
    ----------
    authors : str
        Raw input, e.g. ``"Ivanov ,  Petrov"``

    Returns
    -------
    str
        The normalized list, e.g. ``"Ivanov, Petrov"``. This is the value
        that must be stored.

    Raises
    ------
    ValidationError
        On doubled, leading or trailing separators, or characters other
        than letters, spaces and commas.

    """
    return _validate_list(authors, "authors", 130)


def validate_genres(genres: str) -> str:
    """Same rules as validate_authors, limited to 100 characters."""
    return _validate_list(genres, "genres", 100)


def validate_year(year: str) -> str:
    if not PATTERNS["year"].match(year):
        raise ValidationError(VALIDATION_ERRORS["year_format"])
    value = int(year)
    if value > date.today().year:
        raise ValidationError(VALIDATION_ERRORS["year_future"])
    if value < MIN_YEAR:
        raise ValidationError(VALIDATION_ERRORS["year_past"])
    return year


def validate_height_width(value: str, axis: str) -> str:
    """
    Validates a cover dimension in millimetres

    Parameters
    ----------
    value : str
        Decimal text such as ``"150"`` or ``"148.5"``
    axis : str
        ``"width"`` or ``"height"``, used in the error message

    Returns
    -------
    str
        The value unchanged.

    Raises
    ------
    ValidationError
        If the value is not a decimal number or is outside (0, 1000].

    """
    if not PATTERNS["size"].match(value):
        raise ValidationError(VALIDATION_ERRORS["size_format"].format(axis))
    size = float(value)
    if size <= 0:
        raise ValidationError(VALIDATION_ERRORS["size_positive"].format(axis))
    if size > MAX_SIZE_MM:
        raise ValidationError(VALIDATION_ERRORS["size_max"].format(axis, MAX_SIZE_MM))
    return value


def validate_added(added: str, year: Union[str, int]) -> str:
    """
    Validates the date the book joined the catalog

    The date must parse as DD-MM-YYYY, must not be in the future and its
    calendar year must not precede the publication ``year``.

    """
    added_date = parse_date(added, "added")
    try:
        year_value = int(year)
    except (TypeError, ValueError):
        raise ValidationError(VALIDATION_ERRORS["added_year"])
    if added_date > date.today():
        raise ValidationError(VALIDATION_ERRORS["added_future"])
    if added_date.year < year_value:
        raise ValidationError(VALIDATION_ERRORS["added_before_year"])
    return added


def validate_read(read: str, added: str) -> str:
    if read == "":
        return read
    read_date = parse_date(read, "read")
    if read_date < parse_date(added, "added"):
        raise ValidationError(VALIDATION_ERRORS["read_before_added"])
    return read


def validate_rating(rating: str) -> str:
    if rating == "":
        return rating
    if not PATTERNS["rating"].match(rating):
        raise ValidationError(VALIDATION_ERRORS["rating"])
    return rating


def validate_cover(cover: str) -> str:
    if cover not in COVERS:
        raise ValidationError(VALIDATION_ERRORS["cover"])
    return cover


def validate_source(source: str) -> str:
    if source not in SOURCES:
        raise ValidationError(VALIDATION_ERRORS["source"])
    return source
