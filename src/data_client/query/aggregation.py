"""Aggregation pipeline evaluation over JSON-like documents.

Stages run in order, each consuming the documents produced by the previous
one. Supported stages: ``$match $sort $skip $limit $project $addFields
$group $unwind $count``.
"""
import copy
import json
import logging
from typing import Any, Callable, Dict, List, Mapping, Sequence

from ..core.exceptions import BadRequestError
from ..core.value_objects import SortOption, SortOrder
from .fields import MISSING, get_value, remove_value, set_value
from .matcher import compile_filter
from .sorting import compare_values, sort_documents

logger = logging.getLogger(__name__)

Documents = List[Dict[str, Any]]


def run_pipeline(documents: Sequence[Mapping[str, Any]], pipeline: Sequence[Mapping[str, Any]]) -> Documents:
    """Apply ``pipeline`` to copies of ``documents``.

    Raises:
        BadRequestError: For unknown stages, operators or malformed stage arguments
    """
    stages = [_compile_stage(index, stage) for index, stage in enumerate(pipeline)]
    results: Documents = [copy.deepcopy(dict(document)) for document in documents]
    for stage in stages:
        results = stage(results)
    return results


def _compile_stage(index: int, stage: Mapping[str, Any]) -> Callable[[Documents], Documents]:
    if not isinstance(stage, Mapping) or len(stage) != 1:
        raise BadRequestError(
            f"Pipeline stage {index} must contain exactly one operator",
            details={"stage_index": index},
        )
    name, spec = next(iter(stage.items()))
    factory = STAGES.get(name)
    if factory is None:
        raise BadRequestError(f"Unknown pipeline stage: {name}", details={"stage_index": index})
    logger.debug("Compiling pipeline stage %d: %s", index, name)
    return factory(spec)


# Expressions

def evaluate_expression(document: Mapping[str, Any], expression: Any) -> Any:
    """Evaluate an aggregation expression against a document.

    ``"$path"`` references a field, mappings build objects unless they hold a
    single operator, lists evaluate element-wise and anything else is a literal.
    """
    if isinstance(expression, str) and expression.startswith("$"):
        value = get_value(document, expression[1:])
        return None if value is MISSING else value
    if isinstance(expression, list):
        return [evaluate_expression(document, item) for item in expression]
    if isinstance(expression, Mapping):
        if len(expression) == 1:
            operator, operand = next(iter(expression.items()))
            if isinstance(operator, str) and operator.startswith("$"):
                return _evaluate_operator(document, operator, operand)
        return {key: evaluate_expression(document, value) for key, value in expression.items()}
    return expression


def _evaluate_operator(document: Mapping[str, Any], operator: str, operand: Any) -> Any:
    if operator == "$literal":
        return operand

    if operator == "$ifNull":
        arguments = _arguments(document, operator, operand, minimum=2)
        return next((value for value in arguments if value is not None), None)

    if operator in ("$toLower", "$toUpper", "$size"):
        value = evaluate_expression(document, operand[0] if isinstance(operand, list) else operand)
        if operator == "$size":
            if not isinstance(value, list):
                raise BadRequestError("$size requires an array")
            return len(value)
        if value is None:
            return ""
        return str(value).lower() if operator == "$toLower" else str(value).upper()

    if operator == "$concat":
        arguments = _arguments(document, operator, operand)
        if any(value is None for value in arguments):
            return None
        if not all(isinstance(value, str) for value in arguments):
            raise BadRequestError("$concat only supports strings")
        return "".join(arguments)

    if operator in ("$add", "$multiply", "$subtract", "$divide"):
        minimum = 2 if operator in ("$subtract", "$divide") else 1
        arguments = _arguments(document, operator, operand, minimum=minimum)
        if any(value is None for value in arguments):
            return None
        if not all(_is_number(value) for value in arguments):
            raise BadRequestError(f"{operator} only supports numbers")
        if operator == "$add":
            return sum(arguments)
        if operator == "$multiply":
            result = 1
            for value in arguments:
                result *= value
            return result
        if len(arguments) != 2:
            raise BadRequestError(f"{operator} takes exactly two arguments")
        left, right = arguments
        if operator == "$subtract":
            return left - right
        if right == 0:
            raise BadRequestError("$divide by zero")
        return left / right

    raise BadRequestError(f"Unknown expression operator: {operator}", details={"operator": operator})


def _arguments(document: Mapping[str, Any], operator: str, operand: Any, minimum: int = 1) -> List[Any]:
    if not isinstance(operand, list) or len(operand) < minimum:
        raise BadRequestError(f"{operator} requires a list of at least {minimum} arguments")
    return [evaluate_expression(document, item) for item in operand]


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_flag(value: Any, flag: int) -> bool:
    if isinstance(value, bool):
        return value is bool(flag)
    return isinstance(value, int) and value == flag


def _non_negative_int(name: str, value: Any, minimum: int = 0) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
        raise BadRequestError(f"{name} requires an integer >= {minimum}")
    return value


# Stages

def _match(spec: Any) -> Callable[[Documents], Documents]:
    predicate = compile_filter(spec)
    return lambda documents: [document for document in documents if predicate(document)]


def _sort(spec: Any) -> Callable[[Documents], Documents]:
    if not isinstance(spec, Mapping) or not spec:
        raise BadRequestError("$sort requires a non-empty mapping of field to direction")
    try:
        sort = [SortOption(field, SortOrder.parse(str(direction))) for field, direction in spec.items()]
    except ValueError as e:
        raise BadRequestError(f"Invalid $sort: {e}") from e
    return lambda documents: sort_documents(documents, sort)


def _skip(spec: Any) -> Callable[[Documents], Documents]:
    count = _non_negative_int("$skip", spec)
    return lambda documents: documents[count:]


def _limit(spec: Any) -> Callable[[Documents], Documents]:
    count = _non_negative_int("$limit", spec, minimum=1)
    return lambda documents: documents[:count]


def _project(spec: Any) -> Callable[[Documents], Documents]:
    if not isinstance(spec, Mapping) or not spec:
        raise BadRequestError("$project requires a non-empty mapping")

    excluded = [field for field, value in spec.items() if _is_flag(value, 0)]
    computed = {field: value for field, value in spec.items() if field not in excluded}
    included_flags = [field for field, value in computed.items() if _is_flag(value, 1)]

    # _id is the one field that may be excluded alongside inclusions
    if excluded == ["_id"] and computed:
        excluded = []

    if excluded and computed:
        raise BadRequestError("$project cannot mix inclusion and exclusion")

    if excluded:
        def exclude(documents: Documents) -> Documents:
            for document in documents:
                for field in excluded:
                    remove_value(document, field)
            return documents
        return exclude

    def include(documents: Documents) -> Documents:
        projected = []
        for document in documents:
            result: Dict[str, Any] = {}
            for field, expression in computed.items():
                if field in included_flags:
                    value = get_value(document, field)
                    if value is not MISSING:
                        set_value(result, field, value)
                else:
                    set_value(result, field, evaluate_expression(document, expression))
            projected.append(result)
        return projected
    return include


def _add_fields(spec: Any) -> Callable[[Documents], Documents]:
    if not isinstance(spec, Mapping) or not spec:
        raise BadRequestError("$addFields requires a non-empty mapping")

    def add_fields(documents: Documents) -> Documents:
        for document in documents:
            values = {field: evaluate_expression(document, expression) for field, expression in spec.items()}
            for field, value in values.items():
                set_value(document, field, value)
        return documents
    return add_fields


def _unwind(spec: Any) -> Callable[[Documents], Documents]:
    preserve = False
    path = spec
    if isinstance(spec, Mapping):
        path = spec.get("path")
        preserve = bool(spec.get("preserveNullAndEmptyArrays", False))
    if not isinstance(path, str) or not path.startswith("$") or len(path) < 2:
        raise BadRequestError("$unwind requires a field path like '$field'")
    field = path[1:]

    def unwind(documents: Documents) -> Documents:
        results = []
        for document in documents:
            value = get_value(document, field)
            if isinstance(value, list) and value:
                for element in value:
                    unwound = copy.deepcopy(document)
                    set_value(unwound, field, element)
                    results.append(unwound)
            elif isinstance(value, list) or value is MISSING or value is None:
                if preserve:
                    results.append(document)
            else:
                results.append(document)
        return results
    return unwind


def _count(spec: Any) -> Callable[[Documents], Documents]:
    if not isinstance(spec, str) or not spec or spec.startswith("$") or "." in spec:
        raise BadRequestError("$count requires a plain output field name")
    return lambda documents: [{spec: len(documents)}] if documents else []


# $group accumulators: (initial state, step, finalize)

def _sum_step(state: Any, value: Any) -> Any:
    return state + value if _is_number(value) else state


def _avg_step(state: Any, value: Any) -> Any:
    total, count = state
    if _is_number(value):
        return total + value, count + 1
    return state


def _min_step(state: Any, value: Any) -> Any:
    if value is None:
        return state
    return value if state is None or compare_values(value, state) < 0 else state


def _max_step(state: Any, value: Any) -> Any:
    if value is None:
        return state
    return value if state is None or compare_values(value, state) > 0 else state


def _add_to_set_step(state: Any, value: Any) -> Any:
    if not any(existing == value for existing in state):
        state.append(value)
    return state


ACCUMULATORS: Dict[str, Any] = {
    "$sum": (lambda: 0, _sum_step, lambda state: state),
    "$avg": (lambda: (0, 0), _avg_step, lambda state: state[0] / state[1] if state[1] else None),
    "$min": (lambda: None, _min_step, lambda state: state),
    "$max": (lambda: None, _max_step, lambda state: state),
    "$first": (lambda: MISSING, lambda state, value: value if state is MISSING else state,
               lambda state: None if state is MISSING else state),
    "$last": (lambda: None, lambda state, value: value, lambda state: state),
    "$push": (list, lambda state, value: state + [value], lambda state: state),
    "$addToSet": (list, _add_to_set_step, lambda state: state),
    "$count": (lambda: 0, lambda state, value: state + 1, lambda state: state),
}


def _group(spec: Any) -> Callable[[Documents], Documents]:
    if not isinstance(spec, Mapping) or "_id" not in spec:
        raise BadRequestError("$group requires an _id expression")

    key_expression = spec["_id"]
    accumulators = []
    for field, accumulator in spec.items():
        if field == "_id":
            continue
        if not isinstance(accumulator, Mapping) or len(accumulator) != 1:
            raise BadRequestError(f"$group field '{field}' must be a single accumulator")
        operator, expression = next(iter(accumulator.items()))
        if operator not in ACCUMULATORS:
            raise BadRequestError(f"Unknown accumulator: {operator}", details={"operator": operator})
        accumulators.append((field, expression, ACCUMULATORS[operator]))

    def group(documents: Documents) -> Documents:
        groups: Dict[str, Dict[str, Any]] = {}
        for document in documents:
            key = evaluate_expression(document, key_expression)
            group_key = json.dumps(key, sort_keys=True, default=str)
            if group_key not in groups:
                groups[group_key] = {
                    "_id": key,
                    "state": {field: initial() for field, _, (initial, _, _) in accumulators},
                }
            state = groups[group_key]["state"]
            for field, expression, (_, step, _) in accumulators:
                state[field] = step(state[field], evaluate_expression(document, expression))

        results = []
        for entry in groups.values():
            result = {"_id": entry["_id"]}
            for field, _, (_, _, finalize) in accumulators:
                result[field] = finalize(entry["state"][field])
            results.append(result)
        return results
    return group


STAGES: Dict[str, Callable[[Any], Callable[[Documents], Documents]]] = {
    "$match": _match,
    "$sort": _sort,
    "$skip": _skip,
    "$limit": _limit,
    "$project": _project,
    "$addFields": _add_fields,
    "$set": _add_fields,
    "$group": _group,
    "$unwind": _unwind,
    "$count": _count,
}
