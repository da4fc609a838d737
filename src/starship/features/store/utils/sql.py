"""SQL rendering of the document filter language.

Documents live in ``(id text, doc jsonb)`` tables. ``build_where_clause``
compiles a filter into a WHERE clause with ``$n`` placeholders:

* ``id`` conditions use the primary key column (``id = ANY($1::text[])``).
* Equality, ``$ne``, ``$in`` and ``$nin`` use jsonb containment, which also
  matches a scalar listed inside an array field.
* ``$lt``/``$lte``/``$gt``/``$gte`` compare numbers, strings (by code point)
  and datetimes; they apply to scalar fields.
* ``$exists``, ``$size`` and ``$elemMatch`` are rendered natively, and so
  are ``$or``, ``$and`` and ``$nor`` when every branch can be.

A condition that cannot be expressed exactly (dotted paths, ``$regex``,
embedded document equality) is left out, which only widens the selection.
The returned ``exact`` flag tells the caller whether rows still need to be
re-checked with ``match_document``; only exact filters may be combined with
ORDER BY, LIMIT, OFFSET and ``count(*)`` in SQL.
"""

import re
from datetime import datetime
from typing import Any, List, Optional, Tuple

from .codec import encode_value
from .documents import Filter, Sort

_FIELD_NAME = re.compile(r"^\w+$")

_COMPARISONS = {"$lt": "<", "$lte": "<=", "$gt": ">", "$gte": ">="}

# Text of a jsonb scalar
_SCALAR_TEXT = " #>> '{}'"


def _is_operator_dict(value: Any) -> bool:
    return isinstance(value, dict) and bool(value) and all(k.startswith("$") for k in value)


def _is_scalar(value: Any) -> bool:
    return isinstance(value, (str, int, float)) and not isinstance(value, bool)


class _WhereBuilder:
    """Accumulates placeholders while rendering one filter."""

    def __init__(self, param_offset: int = 0):
        self.params: List[Any] = []
        self.param_offset = param_offset
        self.exact = True
        self._aliases = 0

    def param(self, value: Any, cast: str = "") -> str:
        self.params.append(value)
        return f"${self.param_offset + len(self.params)}{cast}"

    def jsonb(self, value: Any) -> str:
        return self.param(encode_value(value), "::jsonb")

    def rollback(self, mark: int) -> None:
        del self.params[mark:]

    def conjunction(self, flt: Filter, base: str, strict: bool) -> Optional[str]:
        """AND of every condition; None when ``strict`` and one is inexpressible."""
        parts = []
        for key, condition in flt.items():
            mark = len(self.params)
            clause = self.clause(key, condition, base, strict)
            if clause is None:
                self.rollback(mark)
                if strict:
                    return None
                self.exact = False
                continue
            parts.append(clause)
        if not parts:
            return "TRUE"
        return parts[0] if len(parts) == 1 else " AND ".join(f"({part})" for part in parts)

    def clause(self, key: str, condition: Any, base: str, strict: bool) -> Optional[str]:
        if key in ("$or", "$nor"):
            branches = [self.conjunction(sub, base, strict=True) for sub in condition]
            if any(branch is None for branch in branches):
                return None
            if not branches:
                return "FALSE" if key == "$or" else "TRUE"
            joined = " OR ".join(f"({branch})" for branch in branches)
            return joined if key == "$or" else f"NOT ({joined})"
        if key == "$and":
            branches = [self.conjunction(sub, base, strict) for sub in condition]
            if any(branch is None for branch in branches):
                return None
            return " AND ".join(f"({branch})" for branch in branches) if branches else "TRUE"
        if not _FIELD_NAME.match(key):
            return None
        return self.field(key, condition, base)

    def field(self, key: str, condition: Any, base: str) -> Optional[str]:
        if base == "doc" and key == "id":
            clause = self.primary_key(condition)
            if clause is not None:
                return clause
        target = f"{base}->'{key}'"
        if not _is_operator_dict(condition):
            return self.equals(target, condition)
        parts = []
        for op, value in condition.items():
            clause = self.operator(target, op, value)
            if clause is None:
                return None
            parts.append(clause)
        return parts[0] if len(parts) == 1 else " AND ".join(f"({part})" for part in parts)

    def primary_key(self, condition: Any) -> Optional[str]:
        if isinstance(condition, str):
            return f"id = {self.param(condition)}"
        if not (_is_operator_dict(condition) and len(condition) == 1):
            return None
        op, value = next(iter(condition.items()))
        if op in ("$eq", "$ne") and isinstance(value, str):
            return f"id {'=' if op == '$eq' else '<>'} {self.param(value)}"
        if op in ("$in", "$nin") and isinstance(value, (list, tuple)) and all(isinstance(v, str) for v in value):
            clause = f"id = ANY({self.param(list(value), '::text[]')})"
            return clause if op == "$in" else f"NOT ({clause})"
        return None

    def equals(self, target: str, value: Any) -> Optional[str]:
        if value is None:
            # Missing, null, or an array holding null
            return f"COALESCE({target} @> 'null'::jsonb, TRUE)"
        if isinstance(value, bool) or _is_scalar(value):
            return f"COALESCE({target} @> {self.jsonb(value)}, FALSE)"
        if isinstance(value, datetime):
            return f"COALESCE(({target}->>'$date')::timestamptz = {self.param(value, '::timestamptz')}, FALSE)"
        if isinstance(value, (list, tuple)):
            return f"COALESCE({target} = {self.jsonb(list(value))}, FALSE)"
        return None

    def operator(self, target: str, op: str, value: Any) -> Optional[str]:
        if op == "$eq":
            return self.equals(target, value)
        if op == "$ne":
            clause = self.equals(target, value)
            return None if clause is None else f"NOT ({clause})"
        if op in ("$in", "$nin"):
            clause = self.any_of(target, value)
            if clause is None:
                return None
            return clause if op == "$in" else f"NOT ({clause})"
        if op in _COMPARISONS:
            return self.compare(target, _COMPARISONS[op], value)
        if op == "$exists":
            return f"{target} IS NOT NULL" if value else f"{target} IS NULL"
        if op == "$size" and isinstance(value, int) and not isinstance(value, bool):
            return (
                f"COALESCE(CASE WHEN jsonb_typeof({target}) = 'array' "
                f"THEN jsonb_array_length({target}) = {self.param(value, '::int')} END, FALSE)"
            )
        if op == "$elemMatch" and isinstance(value, dict):
            return self.elem_match(target, value)
        return None

    def any_of(self, target: str, values: Any) -> Optional[str]:
        if not isinstance(values, (list, tuple)):
            return None
        if not values:
            return "FALSE"
        if all(isinstance(v, str) for v in values):
            text = self.param(list(values), "::text[]")
            return (
                f"COALESCE(CASE jsonb_typeof({target}) "
                f"WHEN 'string' THEN ({target}{_SCALAR_TEXT}) = ANY({text}) "
                f"WHEN 'array' THEN {target} ?| {text} END, FALSE)"
            )
        clauses = [self.equals(target, v) for v in values]
        if any(clause is None for clause in clauses):
            return None
        return " OR ".join(f"({clause})" for clause in clauses)

    def compare(self, target: str, symbol: str, value: Any) -> Optional[str]:
        if isinstance(value, datetime):
            return (
                f"COALESCE(({target}->>'$date')::timestamptz {symbol} "
                f"{self.param(value, '::timestamptz')}, FALSE)"
            )
        if isinstance(value, str):
            return (
                f"COALESCE(CASE WHEN jsonb_typeof({target}) = 'string' "
                f"THEN ({target}{_SCALAR_TEXT}) COLLATE \"C\" {symbol} {self.param(value)} END, FALSE)"
            )
        if _is_scalar(value):
            return (
                f"COALESCE(CASE WHEN jsonb_typeof({target}) = 'number' "
                f"THEN {target} {symbol} {self.jsonb(value)} END, FALSE)"
            )
        return None

    def elem_match(self, target: str, condition: Filter) -> Optional[str]:
        self._aliases += 1
        alias = f"elem{self._aliases}"
        if _is_operator_dict(condition):
            inner = self.field_operators(alias, condition)
        else:
            inner = self.conjunction(condition, alias, strict=True)
            if inner is not None:
                inner = f"jsonb_typeof({alias}) = 'object' AND ({inner})"
        if inner is None:
            return None
        return (
            f"EXISTS (SELECT 1 FROM jsonb_array_elements(CASE WHEN jsonb_typeof({target}) = 'array' "
            f"THEN {target} ELSE '[]'::jsonb END) AS {alias} WHERE {inner})"
        )

    def field_operators(self, target: str, condition: Filter) -> Optional[str]:
        parts = []
        for op, value in condition.items():
            clause = self.operator(target, op, value)
            if clause is None:
                return None
            parts.append(clause)
        return " AND ".join(f"({part})" for part in parts)


def build_where_clause(flt: Optional[Filter], param_offset: int = 0) -> Tuple[str, List[Any], bool]:
    """
    Build a WHERE clause from a document filter.

    Args:
        flt: Filter in the document query language
        param_offset: Number of placeholders already used by the statement

    Returns:
        Tuple of (where_clause, parameters, exact)
    """
    builder = _WhereBuilder(param_offset)
    where = builder.conjunction(flt or {}, "doc", strict=False)
    return where, builder.params, builder.exact


def _sort_target(field: str) -> Optional[str]:
    parts = field.split(".")
    if not all(_FIELD_NAME.match(part) for part in parts):
        return None
    if len(parts) == 1:
        return f"doc->'{field}'"
    return "doc #> '{" + ",".join(parts) + "}'"


def build_order_clause(sort: Optional[Sort]) -> Optional[str]:
    """
    Build an ORDER BY clause matching ``sort_documents``.

    Missing and null values order first; numbers, booleans, datetimes and
    strings (by code point) each get a typed sort key. Ties fall back to
    the id so that pages never overlap. Returns "" when there is nothing
    to sort on and None when a key cannot be rendered.
    """
    if not sort:
        return ""
    terms = []
    for field, direction in sort:
        target = _sort_target(field)
        if target is None:
            return None
        order = "DESC" if direction < 0 else "ASC"
        terms.extend([
            f"({target} IS NOT NULL AND {target} <> 'null'::jsonb) {order}",
            f"CASE WHEN jsonb_typeof({target}) = 'number' THEN ({target}{_SCALAR_TEXT})::numeric END {order}",
            f"CASE WHEN jsonb_typeof({target}) = 'boolean' THEN ({target}{_SCALAR_TEXT})::boolean END {order}",
            f"({target}->>'$date')::timestamptz {order}",
            f"CASE WHEN jsonb_typeof({target}) = 'string' THEN {target}{_SCALAR_TEXT} END COLLATE \"C\" {order}",
        ])
    terms.append("id ASC")
    return "ORDER BY " + ", ".join(terms)
