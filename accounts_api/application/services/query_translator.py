"""Query translator — turns a list query string into a Mongo filter, sort and population.

Grammar (api-query-params style)::

    name=alice            equality
    role=admin,user       $in
    name=a&name=b         $in (repeated keys)
    gender!=male          $ne  (comma list -> $nin)
    age>18  age>=18       $gt / $gte
    age<65  age<=65       $lt / $lte
    phone                 $exists: true
    !phone                $exists: false
    name=/^ali/i          $regex (string fields only)
    sort=-createdAt,name  descending createdAt, then ascending name
    populate=role         expand the role reference

Only fields listed in FILTERABLE_FIELDS may appear; anything else is
rejected rather than forwarded to the database.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Tuple
from urllib.parse import unquote_plus

from accounts_api.core.exceptions import InvalidArgumentException

PAGINATION_KEYS = frozenset({"current", "pageSize"})
SORT_KEY = "sort"
POPULATE_KEY = "populate"


def _parse_datetime(value: str) -> datetime:
    return datetime.fromisoformat(value)


FILTERABLE_FIELDS: Dict[str, Callable[[str], Any]] = {
    "name": str,
    "email": str,
    "phone": str,
    "age": int,
    "gender": str,
    "address": str,
    "role": str,
    "createdAt": _parse_datetime,
    "updatedAt": _parse_datetime,
}

POPULATABLE_PATHS = frozenset({"role"})

COMPARISON_OPERATORS = {
    ">": "$gt",
    ">=": "$gte",
    "<": "$lt",
    "<=": "$lte",
}

LIST_OPERATORS = frozenset({"$in", "$nin"})

# Patterns are run by the database; keep them short enough to bound backtracking
MAX_REGEX_LENGTH = 100

_SEGMENT = re.compile(r"^(?P<negate>!?)(?P<key>[^=!<>]+)(?P<op>!=|>=|<=|=|>|<)?(?P<value>.*)$", re.DOTALL)
_REGEX_VALUE = re.compile(r"^/(?P<pattern>.*)/(?P<flags>[imsx]*)$", re.DOTALL)


@dataclass
class QueryDirective:
    filter: Dict[str, Any] = field(default_factory=dict)
    sort: List[Tuple[str, int]] = field(default_factory=list)
    population: List[str] = field(default_factory=list)


def _cast(key: str, raw: str) -> Any:
    try:
        return FILTERABLE_FIELDS[key](raw)
    except ValueError:
        raise InvalidArgumentException(
            f"Invalid value for '{key}'", details={"field": key, "value": raw}
        )


def _check_field(key: str) -> None:
    if key not in FILTERABLE_FIELDS:
        raise InvalidArgumentException(
            f"Unknown query field '{key}'",
            details={"field": key, "allowed": sorted(FILTERABLE_FIELDS)},
        )


def _merge(filter: Dict[str, Any], key: str, clause: Any) -> None:
    """Fold a clause into the filter. Repeated equalities on a key widen to $in."""
    existing = filter.get(key)
    if existing is None:
        filter[key] = clause
        return
    if not isinstance(existing, dict):
        existing = filter[key] = {"$in": [existing]}
    if not isinstance(clause, dict):
        clause = {"$in": [clause]}
    for operator, operand in clause.items():
        if operator in LIST_OPERATORS and operator in existing:
            existing[operator] = existing[operator] + operand
        else:
            existing[operator] = operand


def parse_sort(value: str) -> List[Tuple[str, int]]:
    sort = []
    for item in filter(None, (part.strip() for part in value.split(","))):
        direction = -1 if item.startswith("-") else 1
        name = item.lstrip("+-")
        _check_field(name)
        sort.append((name, direction))
    return sort


def parse_population(value: str) -> List[str]:
    paths = [part.strip() for part in value.split(",") if part.strip()]
    for path in paths:
        if path not in POPULATABLE_PATHS:
            raise InvalidArgumentException(
                f"Cannot populate '{path}'",
                details={"path": path, "allowed": sorted(POPULATABLE_PATHS)},
            )
    return paths


def _equality_clause(key: str, value: str) -> Any:
    regex = _REGEX_VALUE.match(value)
    if regex:
        if FILTERABLE_FIELDS[key] is not str:
            raise InvalidArgumentException(
                f"Regex filters are only allowed on text fields, not '{key}'",
                details={"field": key},
            )
        pattern = regex.group("pattern")
        if len(pattern) > MAX_REGEX_LENGTH:
            raise InvalidArgumentException(
                f"Regular expression for '{key}' is longer than {MAX_REGEX_LENGTH} characters",
                details={"field": key},
            )
        try:
            re.compile(pattern)
        except re.error as exc:
            raise InvalidArgumentException(
                f"Invalid regular expression for '{key}'",
                details={"field": key, "reason": str(exc)},
            )
        clause = {"$regex": pattern}
        if regex.group("flags"):
            clause["$options"] = regex.group("flags")
        return clause
    if "," in value:
        return {"$in": [_cast(key, v) for v in value.split(",")]}
    return _cast(key, value)


def parse_query(query_string: str) -> QueryDirective:
    """Translate a raw URL query string into a QueryDirective.

    Pagination keys are dropped. Empty values (``name=``) are ignored.
    """
    directive = QueryDirective()

    for segment in (query_string or "").split("&"):
        if not segment:
            continue
        match = _SEGMENT.match(unquote_plus(segment))
        if not match:
            raise InvalidArgumentException("Malformed query parameter", details={"parameter": segment})

        key = match.group("key").strip()
        op = match.group("op")
        value = match.group("value")
        negate = bool(match.group("negate"))

        if key in PAGINATION_KEYS:
            continue
        if key == SORT_KEY and op == "=":
            directive.sort.extend(parse_sort(value))
            continue
        if key == POPULATE_KEY and op == "=":
            directive.population.extend(parse_population(value))
            continue

        _check_field(key)

        if op is None:
            directive.filter[key] = {"$exists": not negate}
            continue
        if negate:
            raise InvalidArgumentException(
                "'!' prefix is only valid without a value", details={"parameter": segment}
            )
        if value == "":
            continue

        if op == "=":
            _merge(directive.filter, key, _equality_clause(key, value))
        elif op == "!=":
            if "," in value:
                clause = {"$nin": [_cast(key, v) for v in value.split(",")]}
            else:
                clause = {"$ne": _cast(key, value)}
            _merge(directive.filter, key, clause)
        else:
            _merge(directive.filter, key, {COMPARISON_OPERATORS[op]: _cast(key, value)})

    return directive
