from typing import IO, Iterable, Iterator

from tsbench.query_generation.codec import HTTPQueryCodec
from tsbench.query_generation.query import HTTPQuery
from tsbench.utils.metrics.util import with_span


class QueryWriter:
    """Writes query records to a binary stream, one encoded record per line."""

    def __init__(
        self, stream: IO[bytes], codec: HTTPQueryCodec = HTTPQueryCodec()
    ) -> None:
        self.__stream = stream
        self.__codec = codec
        self.written = 0

    def write(self, query: HTTPQuery) -> None:
        self.__stream.write(self.__codec.encode(query))
        self.__stream.write(b"\n")
        self.written += 1

    @with_span(op="write_queries")
    def write_all(self, queries: Iterable[HTTPQuery]) -> int:
        for query in queries:
            self.write(query)
        self.__stream.flush()
        return self.written


def read_queries(
    stream: IO[bytes], codec: HTTPQueryCodec = HTTPQueryCodec()
) -> Iterator[HTTPQuery]:
    for line in stream:
        if line.strip():
            yield codec.decode(line)
