# addinproxy/bodies.py
"""Readers that drain an upstream response body into a single string.

Bedrock hands back a botocore ``StreamingBody``; tests and other transports
may hand back plain text, bytes or an (async) iterable of chunks. Each shape
gets its own ``ResponseBody`` variant and ``body_from`` picks one by type.
"""
import asyncio
import codecs
import json
from abc import ABC, abstractmethod
from collections.abc import AsyncIterable, Iterable, Iterator

from botocore.response import StreamingBody

_STREAM_CHUNK_SIZE = 64 * 1024
_EXHAUSTED = object()


class ResponseBody(ABC):
    @abstractmethod
    async def read_text(self) -> str:
        """Drain the body and return it as UTF-8 decoded text."""


class StringBody(ResponseBody):
    def __init__(self, text: str) -> None:
        self.text = text

    async def read_text(self) -> str:
        return self.text


class BytesBody(ResponseBody):
    def __init__(self, data: bytes | bytearray | memoryview) -> None:
        self.data = bytes(data)

    async def read_text(self) -> str:
        return self.data.decode("utf-8")


class ChunkStreamBody(ResponseBody):
    """A sync or async iterable of ``str``/``bytes`` chunks.

    Sync iterators are advanced in a worker thread so a blocking socket read
    never stalls the event loop.
    """

    def __init__(self, chunks: Iterable | AsyncIterable) -> None:
        self.chunks = chunks

    async def read_text(self) -> str:
        decoder = codecs.getincrementaldecoder("utf-8")()
        parts: list[str] = []

        if isinstance(self.chunks, AsyncIterable):
            async for chunk in self.chunks:
                parts.append(_decode_chunk(chunk, decoder))
        else:
            it: Iterator = iter(self.chunks)
            while True:
                chunk = await asyncio.to_thread(next, it, _EXHAUSTED)
                if chunk is _EXHAUSTED:
                    break
                parts.append(_decode_chunk(chunk, decoder))

        # Raises on a truncated multi-byte sequence at end of stream.
        parts.append(decoder.decode(b"", final=True))
        return "".join(parts)


def _decode_chunk(chunk, decoder: codecs.IncrementalDecoder) -> str:
    if isinstance(chunk, str):
        return chunk
    if isinstance(chunk, (bytes, bytearray, memoryview)):
        return decoder.decode(bytes(chunk))
    return json.dumps(chunk)


def body_from(value) -> ResponseBody:
    """Wrap an upstream body in the matching reader variant."""
    if value is None:
        return StringBody("")
    if isinstance(value, ResponseBody):
        return value
    if isinstance(value, str):
        return StringBody(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return BytesBody(value)
    if isinstance(value, StreamingBody):
        return ChunkStreamBody(value.iter_chunks(_STREAM_CHUNK_SIZE))
    if isinstance(value, (Iterable, AsyncIterable)):
        return ChunkStreamBody(value)
    raise TypeError(f"Unsupported response body type: {type(value).__name__}")
