# client.py: opens a few connections at once and adds one test book through each
import asyncio
import logging
import sys
from datetime import date, datetime

import config

logger = logging.getLogger("bookcatalog.client")

DONE_MARKERS = ("Book added", "Book already in the catalog", "Operation failed", "Invalid input")


def create_script(client_name: str) -> list:
    """Lines that walk the create flow from the main menu to the confirmation."""
    today = date.today()
    return [
        "1",  # Create
        "1",  # Enter a book
        f"Test book from {client_name} {datetime.now():%H%M%S}",
        "Author ",
        "Genre,  Other genre",
        str(today.year - 1),
        "150",
        "200",
        "hard",
        "purchase",
        today.strftime("%d-%m-%Y"),
        "",
        "8/10 - Good book",
        "y",
    ]


async def add_test_book(client_name: str, host: str, port: int, delay: float = 0.1,
                       timeout: float = 10.0) -> None:
    try:
        reader, writer = await asyncio.open_connection(host, port)
    except OSError as e:
        logger.error("[%s] connection failed: %s", client_name, e)
        return

    for line in create_script(client_name):
        logger.info("[%s] sending: %s", client_name, line)
        writer.write((line + "\n").encode("utf-8"))
        await writer.drain()
        await asyncio.sleep(delay)

    while True:
        try:
            raw = await asyncio.wait_for(reader.readline(), timeout)
        except asyncio.TimeoutError:
            logger.warning("[%s] no reply within %s s, giving up", client_name, timeout)
            break
        if not raw:
            break
        response = raw.decode("utf-8", errors="replace").rstrip("\n")
        logger.info("[%s] server: %s", client_name, response)
        if response.startswith(DONE_MARKERS):
            break

    writer.write(b"exit\nexit\n")
    await writer.drain()
    writer.close()
    await writer.wait_closed()
    logger.info("[%s] finished", client_name)


async def run(clients: int, host: str, port: int) -> None:
    await asyncio.gather(*(add_test_book(f"Client {n}", host, port) for n in range(1, clients + 1)))


def main():
    logging.basicConfig(level=logging.INFO, format=config.LOG_FORMAT)
    clients = int(sys.argv[1]) if len(sys.argv) > 1 else 2
    host = "127.0.0.1" if config.HOST == "0.0.0.0" else config.HOST
    asyncio.run(run(clients, host, config.PORT))
    logger.info("All clients finished")


if __name__ == "__main__":
    main()
