from typing import Sequence

from tsbench.query_generation.exceptions import GeneratorMisuseError


def _disjunction(column: str, values: Sequence[str]) -> str:
    if not values:
        raise GeneratorMisuseError(
            f"cannot build a filter on r.{column} from an empty list of values"
        )
    return "(" + " or ".join(f"r.{column} == '{value}'" for value in values) + ")"


def tag_filter_clause(tag: str, values: Sequence[str]) -> str:
    """
    ``(r.<tag> == 'v1' or r.<tag> == 'v2' ...)``; a single value is still
    wrapped in parentheses.
    """
    return _disjunction(tag, values)


def field_filter_clause(fields: Sequence[str]) -> str:
    return _disjunction("_field", fields)
