from pydantic import BaseModel, field_validator, model_validator

from services.validators import (
    validate_name, validate_authors, validate_genres, validate_year,
    validate_height_width, validate_cover, validate_source,
    validate_added, validate_read, validate_rating,
)

class BookBase(BaseModel):
    name: str
    year: str
    authors: str
    genres: str
    width: str
    height: str
    cover: str
    source: str
    added: str
    read: str = ""
    rating: str = ""

class BookCreate(BookBase):
    """A book that passed every field rule and may be written to the catalog."""

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        return validate_name(v)

    @field_validator("authors")
    @classmethod
    def check_authors(cls, v: str) -> str:
        return validate_authors(v)

    @field_validator("genres")
    @classmethod
    def check_genres(cls, v: str) -> str:
        return validate_genres(v)

    @field_validator("year")
    @classmethod
    def check_year(cls, v: str) -> str:
        return validate_year(v)

    @field_validator("width", "height")
    @classmethod
    def check_size(cls, v: str, info) -> str:
        return validate_height_width(v, info.field_name)

    @field_validator("cover")
    @classmethod
    def check_cover(cls, v: str) -> str:
        return validate_cover(v)

    @field_validator("source")
    @classmethod
    def check_source(cls, v: str) -> str:
        return validate_source(v)

    @field_validator("rating")
    @classmethod
    def check_rating(cls, v: str) -> str:
        return validate_rating(v)

    @model_validator(mode="after")
    def check_dates(self):
        validate_added(self.added, self.year)
        validate_read(self.read, self.added)
        return self

class Book(BookBase):
    id: str
