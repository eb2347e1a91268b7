import pytest

from database import Catalog
from services.transport import SessionClosed


class ScriptedTransport:
    """Feeds a fixed list of client lines and records everything the server writes."""

    def __init__(self, lines):
        self.lines = list(lines)
        self.output = []

    async def read_line(self):
        if not self.lines:
            raise SessionClosed("script finished")
        return self.lines.pop(0)

    async def write_line(self, text):
        self.output.append(text)

    @property
    def text(self):
        return "\n".join(self.output)


@pytest.fixture
def catalog(tmp_path):
    return Catalog(str(tmp_path / "books"), backup_dir=str(tmp_path / "backups"))


@pytest.fixture
def book_data():
    return {
        "name": "Book A",
        "year": "2000",
        "authors": "Ivanov, Petrov",
        "genres": "Novel",
        "width": "150",
        "height": "200",
        "cover": "hard",
        "source": "purchase",
        "added": "01-01-2020",
        "read": "",
        "rating": "8/10 - Good book",
    }


@pytest.fixture
def scripted():
    return ScriptedTransport
