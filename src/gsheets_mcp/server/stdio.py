"""Line-delimited stdio transport.

One JSON request per input line, one JSON response per output line.
Malformed lines are logged and skipped; notifications get no reply.
"""

import asyncio
import logging
from typing import TextIO

from gsheets_mcp.protocol.dispatcher import RequestDispatcher
from gsheets_mcp.protocol.envelopes import decode_request, encode_response
from gsheets_mcp.protocol.errors import RequestDecodeError

logger = logging.getLogger(__name__)


async def handle_line(dispatcher: RequestDispatcher, line: str | bytes) -> str | None:
    """Decode, dispatch and encode one transport line.

    Returns:
        The response line, or None when nothing should be written.
    """
    try:
        request = decode_request(line)
    except RequestDecodeError as e:
        logger.warning(f"Error parsing request: {e}")
        return None

    response = await dispatcher.dispatch(request)
    if request.is_notification:
        return None

    try:
        return encode_response(response)
    except (TypeError, ValueError) as e:
        logger.error(f"Error encoding response: {e}")
        return None


async def serve_lines(dispatcher: RequestDispatcher, reader: TextIO, writer: TextIO) -> None:
    """Serve requests from reader until EOF.

    Requests are handled one at a time, in arrival order. Lines are read as
    bytes when the reader has a binary buffer, so invalid UTF-8 is rejected
    per line by the decoder instead of failing the stream.
    """
    loop = asyncio.get_running_loop()
    readline = getattr(reader, "buffer", reader).readline

    while True:
        line = await loop.run_in_executor(None, readline)
        if not line:
            break

        line = line.strip()
        if not line:
            continue

        reply = await handle_line(dispatcher, line)
        if reply is not None:
            writer.write(reply + "\n")
            writer.flush()
