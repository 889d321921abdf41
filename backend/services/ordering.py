from dataclasses import dataclass
from functools import cmp_to_key
from typing import Any


@dataclass(frozen=True)
class OrderClause:
    field: str
    descending: bool = False


def parse_order_by(order_by: str | None) -> list[OrderClause]:
    """
    Parse "field [ASC|DESC], ..." into clauses. Missing or unknown direction is ASC.
    """
    clauses: list[OrderClause] = []
    for raw in (order_by or "").split(","):
        parts = raw.strip().split()
        if not parts:
            continue
        direction = parts[1].upper() if len(parts) > 1 else "ASC"
        clauses.append(OrderClause(field=parts[0], descending=direction == "DESC"))
    return clauses


def _compare_values(a: Any, b: Any) -> int:
    # None (or a missing key) goes after every present value
    if a is None:
        return 1
    if b is None:
        return -1
    try:
        return -1 if a < b else 1
    except TypeError:
        sa, sb = str(a), str(b)
        if sa == sb:
            return 0
        return -1 if sa < sb else 1


def _compare_items(clauses: list[OrderClause], a: dict, b: dict) -> int:
    for clause in clauses:
        a_val = a.get(clause.field)
        b_val = b.get(clause.field)
        if a_val == b_val:
            continue
        result = _compare_values(a_val, b_val)
        if result == 0:
            continue
        return -result if clause.descending else result
    return 0


def sort_items(items: list[dict], order_by: str | None) -> list[dict]:
    """Stable multi-key sort over entity dicts; ties keep their input order."""
    clauses = parse_order_by(order_by)
    if not clauses:
        return list(items)
    return sorted(items, key=cmp_to_key(lambda a, b: _compare_items(clauses, a, b)))
