# main.py: TCP entry point, one Session task per connection
import asyncio
import logging

import config
from database import Catalog, init_db
from services.session import Session
from services.transport import StreamTransport

logger = logging.getLogger("bookcatalog")


def make_handler(db: Catalog):
    async def handle_client(reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        transport = StreamTransport(reader, writer)
        logger.info("New connection: %s", transport.peer)
        try:
            await Session(transport, db, peer=transport.peer).run()
        except Exception:
            logger.exception("Session with %s failed", transport.peer)
        finally:
            await transport.close()

    return handle_client


async def serve(db: Catalog, host: str = config.HOST, port: int = config.PORT):
    server = await asyncio.start_server(make_handler(db), host, port)
    addresses = ", ".join(str(sock.getsockname()) for sock in server.sockets)
    logger.info("Server listening on %s (catalog file: %s)", addresses, db.path)
    async with server:
        await server.serve_forever()


def main():
    logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)
    db = init_db()
    try:
        asyncio.run(serve(db))
    except KeyboardInterrupt:
        logger.info("Server stopped")


if __name__ == "__main__":
    main()
