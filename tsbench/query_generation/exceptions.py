from tsbench.utils.serializable_exception import SerializableException


class QueryGenerationError(SerializableException):
    """Base class for every error raised while generating queries."""


class InvalidParameterError(QueryGenerationError):
    """
    A domain parameter is out of range: a count below one or above the
    scale, more metrics than the catalog holds, a window larger than the
    simulation interval.
    """


class GeneratorMisuseError(QueryGenerationError):
    """The generator was called in a way its callers never should."""
