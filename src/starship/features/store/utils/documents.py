"""Document matching and update operators.

Both store adapters evaluate filters and apply updates through these
functions, so the memory and PostgreSQL backends agree on semantics.
The supported language is a subset of the usual document-database query
language: equality (with list membership), ``$in``, ``$nin``, ``$ne``,
``$lt``/``$lte``/``$gt``/``$gte``, ``$exists``, ``$elemMatch``, ``$size``,
``$regex``, plus top level ``$or``/``$and``/``$nor``.

Updates support ``$set``, ``$unset``, ``$inc``, ``$push`` (with ``$each``
and ``$position``), ``$addToSet`` (with ``$each``) and ``$pull``. A path
segment ``$`` is resolved to the first array element matched by the filter.
"""

import copy
import re
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

Document = Dict[str, Any]
Filter = Dict[str, Any]
Update = Dict[str, Any]
Sort = Sequence[Tuple[str, int]]

_MISSING = object()


def _is_operator_dict(value: Any) -> bool:
    return isinstance(value, dict) and bool(value) and all(k.startswith("$") for k in value)


def _values(doc: Any, path: str) -> List[Any]:
    """Resolve a dotted path to every candidate value, descending into lists."""
    current = [doc]
    for part in path.split("."):
        found = []
        for item in current:
            if isinstance(item, dict):
                if part in item:
                    found.append(item[part])
            elif isinstance(item, list):
                if part.isdigit():
                    if int(part) < len(item):
                        found.append(item[int(part)])
                else:
                    for element in item:
                        if isinstance(element, dict) and part in element:
                            found.append(element[part])
        current = found
    return current


def get_path(doc: Document, path: str, default: Any = None) -> Any:
    """Return the single value at a dotted path, or ``default``."""
    current: Any = doc
    for part in path.split("."):
        if isinstance(current, dict) and part in current:
            current = current[part]
        elif isinstance(current, list) and part.isdigit() and int(part) < len(current):
            current = current[int(part)]
        else:
            return default
    return current


def _equals(candidate: Any, value: Any) -> bool:
    if candidate == value:
        return True
    return isinstance(candidate, list) and not isinstance(value, list) and value in candidate


def _compare(candidate: Any, op: str, value: Any) -> bool:
    items = candidate if isinstance(candidate, list) else [candidate]
    for item in items:
        if item is None or value is None:
            continue
        try:
            if op == "$lt" and item < value:
                return True
            if op == "$lte" and item <= value:
                return True
            if op == "$gt" and item > value:
                return True
            if op == "$gte" and item >= value:
                return True
        except TypeError:
            continue
    return False


def _match_element(element: Any, condition: Any) -> bool:
    if isinstance(condition, dict) and not _is_operator_dict(condition):
        return isinstance(element, dict) and match_document(element, condition)
    return _match_condition([element], condition)


def _match_condition(candidates: List[Any], condition: Any) -> bool:
    if not _is_operator_dict(condition):
        if condition is None and not candidates:
            return True
        return any(_equals(c, condition) for c in candidates)

    for op, value in condition.items():
        if op == "$eq":
            ok = _match_condition(candidates, value)
        elif op == "$ne":
            ok = not _match_condition(candidates, value)
        elif op == "$in":
            ok = any(_match_condition(candidates, v) for v in value)
        elif op == "$nin":
            ok = not any(_match_condition(candidates, v) for v in value)
        elif op in ("$lt", "$lte", "$gt", "$gte"):
            ok = any(_compare(c, op, value) for c in candidates)
        elif op == "$exists":
            ok = bool(candidates) == bool(value)
        elif op == "$size":
            ok = any(isinstance(c, list) and len(c) == value for c in candidates)
        elif op == "$elemMatch":
            ok = any(
                isinstance(c, list) and any(_match_element(e, value) for e in c)
                for c in candidates
            )
        elif op == "$regex":
            flags = re.IGNORECASE if "i" in condition.get("$options", "") else 0
            pattern = re.compile(value, flags)
            ok = any(isinstance(c, str) and pattern.search(c) is not None for c in candidates)
        elif op == "$options":
            continue
        else:
            raise ValueError(f"Unsupported query operator {op}")
        if not ok:
            return False
    return True


def match_document(doc: Document, flt: Optional[Filter]) -> bool:
    """Check whether a document satisfies a filter."""
    if not flt:
        return True
    for key, condition in flt.items():
        if key == "$or":
            if not any(match_document(doc, sub) for sub in condition):
                return False
        elif key == "$and":
            if not all(match_document(doc, sub) for sub in condition):
                return False
        elif key == "$nor":
            if any(match_document(doc, sub) for sub in condition):
                return False
        elif not _match_condition(_values(doc, key), condition):
            return False
    return True


def positional_index(doc: Document, flt: Optional[Filter], array_path: str) -> Optional[int]:
    """Index of the first element of ``array_path`` matched by the filter."""
    array = get_path(doc, array_path)
    if not flt or not isinstance(array, list):
        return None
    prefix = array_path + "."
    for key, condition in flt.items():
        if key == "$and":
            for sub in condition:
                index = positional_index(doc, sub, array_path)
                if index is not None:
                    return index
        elif key == array_path and _is_operator_dict(condition) and "$elemMatch" in condition:
            for index, element in enumerate(array):
                if _match_element(element, condition["$elemMatch"]):
                    return index
        elif key == array_path:
            for index, element in enumerate(array):
                if _match_condition([element], condition):
                    return index
        elif key.startswith(prefix):
            sub_path = key[len(prefix):]
            for index, element in enumerate(array):
                if _match_condition(_values(element, sub_path), condition):
                    return index
    return None


def _resolve_positional(doc: Document, path: str, flt: Optional[Filter]) -> str:
    if ".$" not in path:
        return path
    parts = path.split(".")
    position = parts.index("$")
    array_path = ".".join(parts[:position])
    index = positional_index(doc, flt, array_path)
    if index is None:
        raise ValueError(f"The positional operator did not find the match needed for {path}")
    parts[position] = str(index)
    return ".".join(parts)


def _container(doc: Document, path: str, create: bool) -> Tuple[Any, str]:
    parts = path.split(".")
    current: Any = doc
    for part in parts[:-1]:
        if isinstance(current, list):
            current = current[int(part)]
            continue
        if part not in current or current[part] is None:
            if not create:
                return None, parts[-1]
            current[part] = {}
        current = current[part]
    return current, parts[-1]


def _set(doc: Document, path: str, value: Any) -> None:
    container, key = _container(doc, path, create=True)
    if isinstance(container, list):
        container[int(key)] = value
    else:
        container[key] = value


def _unset(doc: Document, path: str) -> None:
    container, key = _container(doc, path, create=False)
    if isinstance(container, dict):
        container.pop(key, None)


def _array_at(doc: Document, path: str) -> List[Any]:
    current = get_path(doc, path, _MISSING)
    if current is _MISSING or current is None:
        current = []
        _set(doc, path, current)
    if not isinstance(current, list):
        raise ValueError(f"Cannot apply an array operator to non-array field {path}")
    return current


def _should_pull(element: Any, condition: Any) -> bool:
    if _is_operator_dict(condition):
        return _match_condition([element], condition)
    if isinstance(condition, dict):
        return isinstance(element, dict) and match_document(element, condition)
    return element == condition


def apply_update(doc: Document, update: Update, flt: Optional[Filter] = None) -> Document:
    """Apply update operators to a copy of ``doc`` and return the copy."""
    result = copy.deepcopy(doc)
    for op, fields in update.items():
        for raw_path, value in fields.items():
            path = _resolve_positional(result, raw_path, flt)
            if op == "$set":
                _set(result, path, copy.deepcopy(value))
            elif op == "$unset":
                _unset(result, path)
            elif op == "$inc":
                _set(result, path, (get_path(result, path) or 0) + value)
            elif op == "$push":
                array = _array_at(result, path)
                if _is_operator_dict(value) and "$each" in value:
                    items = copy.deepcopy(list(value["$each"]))
                    position = value.get("$position")
                    if position is None:
                        array.extend(items)
                    else:
                        array[position:position] = items
                else:
                    array.append(copy.deepcopy(value))
            elif op == "$addToSet":
                array = _array_at(result, path)
                items = value["$each"] if _is_operator_dict(value) and "$each" in value else [value]
                for item in items:
                    if item not in array:
                        array.append(copy.deepcopy(item))
            elif op == "$pull":
                array = get_path(result, path)
                if isinstance(array, list):
                    array[:] = [e for e in array if not _should_pull(e, value)]
            else:
                raise ValueError(f"Unsupported update operator {op}")
    return result


def sort_documents(docs: Iterable[Document], sort: Optional[Sort]) -> List[Document]:
    """Stable multi-key sort; missing values order before present ones."""
    result = list(docs)
    for field, direction in reversed(list(sort or [])):
        result.sort(
            key=lambda d: (get_path(d, field) is not None, get_path(d, field)),
            reverse=direction < 0,
        )
    return result


def paginate(docs: List[Document], skip: int = 0, limit: Optional[int] = None) -> List[Document]:
    end = None if limit is None else skip + limit
    return docs[skip:end]
