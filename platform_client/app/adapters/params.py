"""
Query string flattening in the bracket notation the platform API expects.

``{"filter": {"email": "a@b.c"}, "page": {"limit": 1}}`` becomes
``filter[email]=a@b.c&page[limit]=1``; sequences become ``key[]=v`` pairs.
"""

from typing import Any, List, Mapping, Optional, Tuple


QueryPairs = List[Tuple[str, str]]


def _scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def flatten_params(params: Optional[Mapping[str, Any]], prefix: Optional[str] = None) -> QueryPairs:
    """Flatten nested mappings and sequences into ordered query pairs. ``None`` values are dropped."""
    pairs: QueryPairs = []
    if not params:
        return pairs

    for key, value in params.items():
        name = f"{prefix}[{key}]" if prefix else str(key)
        if value is None:
            continue
        if isinstance(value, Mapping):
            pairs.extend(flatten_params(value, name))
        elif isinstance(value, (list, tuple, set)):
            pairs.extend((f"{name}[]", _scalar(item)) for item in value if item is not None)
        else:
            pairs.append((name, _scalar(value)))

    return pairs
