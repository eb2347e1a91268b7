# errors.py: failures the catalog store reports back to a session


class CatalogError(Exception):
    """Base class for everything the store raises on purpose."""


class DuplicateRecord(CatalogError):
    def __init__(self, name: str, authors: str):
        super().__init__(f"Book already in the catalog: {name}, written by {authors}")
        self.name = name
        self.authors = authors


class NotFound(CatalogError):
    pass


class StorageIOError(CatalogError):
    pass


class MalformedRecord(StorageIOError):
    def __init__(self, line: str, parts: int):
        super().__init__(f"cannot parse stored line (expected 12 fields, got {parts}): {line!r}")
        self.line = line
