"""MongoDB-style filter evaluation over JSON-like documents.

Filters are compiled once into a predicate so that malformed filters are
rejected even when there is nothing to match against.

Supported operators:

- comparison: ``$eq $ne $gt $gte $lt $lte $in $nin``
- element: ``$exists``
- evaluation: ``$regex`` (with ``$options``)
- array: ``$all $size $elemMatch``
- negation: ``$not``
- logical (top level): ``$and $or $nor``
"""
import re
from typing import Any, Callable, Dict, Iterator, List, Mapping

from ..core.exceptions import BadRequestError
from .fields import collect_values
from .sorting import compare_values, type_rank

Predicate = Callable[[Any], bool]
ValuesPredicate = Callable[[List[Any]], bool]

LOGICAL_OPERATORS = ("$and", "$or", "$nor")
REGEX_FLAGS = {"i": re.IGNORECASE, "m": re.MULTILINE, "s": re.DOTALL, "x": re.VERBOSE}


def compile_filter(filter: Mapping[str, Any]) -> Predicate:
    """Compile a filter into a document predicate.

    Raises:
        BadRequestError: If the filter uses unknown operators or malformed operands
    """
    if not isinstance(filter, Mapping):
        raise BadRequestError(f"Filter must be a mapping, got {type(filter).__name__}")

    predicates: List[Predicate] = []
    for key, condition in filter.items():
        if key in LOGICAL_OPERATORS:
            predicates.append(_compile_logical(key, condition))
        elif not isinstance(key, str) or not key:
            raise BadRequestError("Filter keys must be non-empty strings", details={"key": repr(key)})
        elif key.startswith("$"):
            raise BadRequestError(f"Unknown top-level operator: {key}", details={"operator": key})
        else:
            predicates.append(_compile_field(key, condition))

    return lambda document: all(predicate(document) for predicate in predicates)


def matches(document: Any, filter: Mapping[str, Any]) -> bool:
    """Check a single document against a filter."""
    return compile_filter(filter)(document)


def _compile_logical(operator: str, operand: Any) -> Predicate:
    if not isinstance(operand, list) or not operand:
        raise BadRequestError(f"{operator} requires a non-empty list of filters")
    branches = [compile_filter(branch) for branch in operand]

    if operator == "$and":
        return lambda document: all(branch(document) for branch in branches)
    if operator == "$or":
        return lambda document: any(branch(document) for branch in branches)
    return lambda document: not any(branch(document) for branch in branches)


def _is_operator_map(condition: Any) -> bool:
    if not isinstance(condition, Mapping) or not condition:
        return False
    keys = [str(key) for key in condition]
    operator_keys = [key for key in keys if key.startswith("$")]
    if operator_keys and len(operator_keys) != len(keys):
        raise BadRequestError(
            "Cannot mix operators and literal fields in one condition",
            details={"keys": keys},
        )
    return bool(operator_keys)


def _compile_field(path: str, condition: Any) -> Predicate:
    values_predicate = _compile_condition(condition)
    return lambda document: values_predicate(collect_values(document, path))


def _compile_condition(condition: Any) -> ValuesPredicate:
    if _is_operator_map(condition):
        return _compile_operator_map(condition)
    return _eq(condition)


def _compile_operator_map(condition: Mapping[str, Any]) -> ValuesPredicate:
    predicates: List[ValuesPredicate] = []
    for operator, operand in condition.items():
        if operator == "$options":
            if "$regex" not in condition:
                raise BadRequestError("$options requires $regex")
            continue
        if operator == "$regex":
            predicates.append(_regex(operand, condition.get("$options", "")))
            continue
        factory = OPERATORS.get(operator)
        if factory is None:
            raise BadRequestError(f"Unknown operator: {operator}", details={"operator": operator})
        predicates.append(factory(operand))

    return lambda values: all(predicate(values) for predicate in predicates)


def _candidates(values: List[Any]) -> Iterator[Any]:
    """Each value, plus the elements of array values."""
    for value in values:
        yield value
        if isinstance(value, list):
            yield from value


def _equals(left: Any, right: Any) -> bool:
    if isinstance(left, bool) != isinstance(right, bool):
        return False
    if type_rank(left) != type_rank(right):
        return False
    return left == right


def _eq(operand: Any) -> ValuesPredicate:
    if operand is None:
        return lambda values: not values or any(value is None for value in _candidates(values))
    return lambda values: any(_equals(value, operand) for value in _candidates(values))


def _ne(operand: Any) -> ValuesPredicate:
    equal = _eq(operand)
    return lambda values: not equal(values)


def _comparison(test: Callable[[int], bool]) -> Callable[[Any], ValuesPredicate]:
    def factory(operand: Any) -> ValuesPredicate:
        rank = type_rank(operand)

        def predicate(values: List[Any]) -> bool:
            return any(
                type_rank(value) == rank and test(compare_values(value, operand))
                for value in _candidates(values)
            )
        return predicate
    return factory


def _in(operand: Any) -> ValuesPredicate:
    if not isinstance(operand, list):
        raise BadRequestError("$in requires a list")
    options = [_eq(option) for option in operand]
    return lambda values: any(option(values) for option in options)


def _nin(operand: Any) -> ValuesPredicate:
    if not isinstance(operand, list):
        raise BadRequestError("$nin requires a list")
    included = _in(operand)
    return lambda values: not included(values)


def _exists(operand: Any) -> ValuesPredicate:
    expected = bool(operand)
    return lambda values: bool(values) == expected


def _regex(operand: Any, options: Any) -> ValuesPredicate:
    if isinstance(operand, re.Pattern):
        pattern = operand
    else:
        if not isinstance(operand, str) or not isinstance(options, str):
            raise BadRequestError("$regex and $options must be strings")
        flags = 0
        for option in options:
            if option not in REGEX_FLAGS:
                raise BadRequestError(f"Unsupported regex option: {option}")
            flags |= REGEX_FLAGS[option]
        try:
            pattern = re.compile(operand, flags)
        except re.error as e:
            raise BadRequestError(f"Invalid regular expression: {e}") from e

    return lambda values: any(
        isinstance(value, str) and pattern.search(value) is not None
        for value in _candidates(values)
    )


def _all(operand: Any) -> ValuesPredicate:
    if not isinstance(operand, list):
        raise BadRequestError("$all requires a list")

    def predicate(values: List[Any]) -> bool:
        if not operand:
            return False
        return any(
            isinstance(value, list)
            and all(any(_equals(element, wanted) for element in value) for wanted in operand)
            for value in values
        ) or (len(operand) == 1 and _eq(operand[0])(values))
    return predicate


def _size(operand: Any) -> ValuesPredicate:
    if isinstance(operand, bool) or not isinstance(operand, int) or operand < 0:
        raise BadRequestError("$size requires a non-negative integer")
    return lambda values: any(isinstance(value, list) and len(value) == operand for value in values)


def _elem_match(operand: Any) -> ValuesPredicate:
    if not isinstance(operand, Mapping) or not operand:
        raise BadRequestError("$elemMatch requires a non-empty mapping")

    if _is_operator_map(operand):
        element_predicate = _compile_operator_map(operand)
        matches_element = lambda element: element_predicate([element])
    else:
        document_predicate = compile_filter(operand)
        matches_element = lambda element: isinstance(element, Mapping) and document_predicate(element)

    return lambda values: any(
        isinstance(value, list) and any(matches_element(element) for element in value)
        for value in values
    )


def _not(operand: Any) -> ValuesPredicate:
    if isinstance(operand, (str, re.Pattern)):
        inner = _regex(operand, "")
    elif _is_operator_map(operand):
        inner = _compile_operator_map(operand)
    else:
        raise BadRequestError("$not requires an operator expression or a regex")
    return lambda values: not inner(values)


OPERATORS: Dict[str, Callable[[Any], ValuesPredicate]] = {
    "$eq": _eq,
    "$ne": _ne,
    "$gt": _comparison(lambda result: result > 0),
    "$gte": _comparison(lambda result: result >= 0),
    "$lt": _comparison(lambda result: result < 0),
    "$lte": _comparison(lambda result: result <= 0),
    "$in": _in,
    "$nin": _nin,
    "$exists": _exists,
    "$all": _all,
    "$size": _size,
    "$elemMatch": _elem_match,
    "$not": _not,
}
