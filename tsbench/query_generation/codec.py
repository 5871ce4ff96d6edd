import rapidjson

from tsbench.query_generation.exceptions import QueryGenerationError
from tsbench.query_generation.query import HTTPQuery
from tsbench.utils.codecs import Codec


class InvalidQueryRecordError(QueryGenerationError):
    """A serialized query record could not be read back."""


class HTTPQueryCodec(Codec[bytes, HTTPQuery]):
    """One JSON object per query, text fields decoded as UTF-8."""

    def encode(self, value: HTTPQuery) -> bytes:
        return rapidjson.dumps(value.to_dict()).encode("utf-8")

    def decode(self, value: bytes) -> HTTPQuery:
        try:
            data = rapidjson.loads(value)
        except ValueError as error:
            raise InvalidQueryRecordError(
                f"cannot decode query record: {error}"
            ) from error

        if not isinstance(data, dict):
            raise InvalidQueryRecordError("query record must be a JSON object")
        return HTTPQuery.from_dict(data)
