"""Conditional field visibility.

``resolve_visible`` maps (schema, values) to the set of field ids that are
currently applicable. It is pure and total: it reads one snapshot of the
values, never raises, and never loops on cyclic rules.

Visibility cascades. A condition that reads a field which is itself not
visible sees ``None`` for it, so an answer hidden by one rule cannot keep
driving other fields. Hidden-typed fields always expose their value. Fields
are evaluated in dependency order; fields that sit on a dependency cycle are
treated as visible.
"""

import logging
from graphlib import TopologicalSorter
from types import MappingProxyType
from typing import Iterator, Mapping

from formengine.schemas.forms import (
    ConditionalLogic,
    ConditionGroup,
    FieldCondition,
    FormField,
    FormSchema,
)
from formengine.services.form_validation_service import is_empty
from formengine.types import FieldValue

logger = logging.getLogger(__name__)


# =============================================================================
# Condition evaluation
# =============================================================================


def _stringify(value: FieldValue) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return ",".join(_stringify(item) for item in value)
    return str(value)


def _to_number(value: FieldValue) -> float | None:
    if value is None or value == "":
        return 0.0
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def _compare_numbers(left: FieldValue, right: FieldValue) -> tuple[float, float] | None:
    # An unanswered field counts as 0; a missing operand never compares.
    if right is None:
        return None
    left_number = _to_number(left)
    right_number = _to_number(right)
    if left_number is None or right_number is None:
        return None
    return left_number, right_number


def evaluate_condition(condition: FieldCondition, values: Mapping[str, FieldValue]) -> bool:
    operator = condition.operator
    expected = condition.value
    value = values.get(condition.field_id)

    if operator == "is_empty":
        return is_empty(value)
    if operator == "is_not_empty":
        return not is_empty(value)

    if operator == "equals":
        return _stringify(value) == _stringify(expected)
    if operator == "not_equals":
        return _stringify(value) != _stringify(expected)

    if operator == "contains":
        if expected is None:
            return False
        if isinstance(value, (list, tuple)):
            return _stringify(expected) in [_stringify(item) for item in value]
        return _stringify(expected) in _stringify(value)

    if operator == "is_one_of":
        candidates = expected if isinstance(expected, list) else [expected]
        allowed = {_stringify(item) for item in candidates if item is not None}
        if isinstance(value, (list, tuple)):
            return any(_stringify(item) in allowed for item in value)
        return _stringify(value) in allowed

    if operator in {"greater_than", "less_than"}:
        numbers = _compare_numbers(value, expected)
        if numbers is None:
            return False
        left, right = numbers
        return left > right if operator == "greater_than" else left < right

    return True


def _evaluate_conditions(
    logic_type: str,
    conditions: list[FieldCondition | ConditionGroup],
    values: Mapping[str, FieldValue],
) -> bool:
    results = (
        evaluate_condition(item, values)
        if isinstance(item, FieldCondition)
        else _evaluate_conditions(item.logic_type, item.conditions, values)
        for item in conditions
    )
    if logic_type == "any":
        return any(results)
    return all(results)


def evaluate_logic(logic: ConditionalLogic, values: Mapping[str, FieldValue]) -> bool:
    """Whether a field carrying ``logic`` is visible for ``values``."""
    conditions_met = _evaluate_conditions(logic.logic_type, logic.conditions, values)
    return conditions_met if logic.action == "show" else not conditions_met


def condition_field_ids(logic: ConditionalLogic | ConditionGroup) -> Iterator[str]:
    """Every field id referenced by a logic block, nested groups included."""
    for item in logic.conditions:
        if isinstance(item, FieldCondition):
            yield item.field_id
        else:
            yield from condition_field_ids(item)


def _has_rule(field: FormField) -> bool:
    return bool(field.conditional_logic and field.conditional_logic.conditions)


# =============================================================================
# Dependency graph
# =============================================================================


def visibility_dependencies(schema: FormSchema) -> dict[str, set[str]]:
    """Map every field id to the known field ids its visibility reads."""
    known = {field.id for field in schema.iter_fields()}
    graph: dict[str, set[str]] = {}
    for field in schema.iter_fields():
        deps: set[str] = set()
        if _has_rule(field):
            deps = {ref for ref in condition_field_ids(field.conditional_logic) if ref in known}
        graph[field.id] = deps
    return graph


def _strongly_connected(graph: Mapping[str, set[str]]) -> list[list[str]]:
    """Tarjan's algorithm, iterative so deep chains cannot hit the recursion limit."""
    index: dict[str, int] = {}
    low: dict[str, int] = {}
    stack: list[str] = []
    on_stack: set[str] = set()
    components: list[list[str]] = []
    counter = 0

    for root in graph:
        if root in index:
            continue
        index[root] = low[root] = counter
        counter += 1
        stack.append(root)
        on_stack.add(root)
        work = [(root, iter(sorted(graph[root])))]

        while work:
            node, children = work[-1]
            descended = False
            for child in children:
                if child not in index:
                    index[child] = low[child] = counter
                    counter += 1
                    stack.append(child)
                    on_stack.add(child)
                    work.append((child, iter(sorted(graph[child]))))
                    descended = True
                    break
                if child in on_stack:
                    low[node] = min(low[node], index[child])
            if descended:
                continue

            work.pop()
            if work:
                parent = work[-1][0]
                low[parent] = min(low[parent], low[node])
            if low[node] == index[node]:
                component: list[str] = []
                while True:
                    member = stack.pop()
                    on_stack.discard(member)
                    component.append(member)
                    if member == node:
                        break
                components.append(component)

    return components


def find_visibility_cycles(schema: FormSchema) -> list[list[str]]:
    """Groups of fields whose visibility rules depend on each other.

    Each group is listed in schema order; a self-referencing field is a
    group of one.
    """
    graph = visibility_dependencies(schema)
    order = {field_id: position for position, field_id in enumerate(graph)}
    cycles = []
    for component in _strongly_connected(graph):
        if len(component) > 1 or component[0] in graph[component[0]]:
            cycles.append(sorted(component, key=order.__getitem__))
    cycles.sort(key=lambda group: order[group[0]])
    return cycles


# =============================================================================
# Resolver
# =============================================================================


def _is_visible(
    field: FormField,
    snapshot: Mapping[str, FieldValue],
    visible: set[str],
    fields: Mapping[str, FormField],
) -> bool:
    if not _has_rule(field):
        return True
    logic = field.conditional_logic
    refs = set(condition_field_ids(logic))
    if any(ref not in fields for ref in refs):
        return False
    effective = {
        ref: snapshot.get(ref) if ref in visible or fields[ref].type == "hidden" else None
        for ref in refs
    }
    return evaluate_logic(logic, effective)


def resolve_visible(schema: FormSchema, values: Mapping[str, FieldValue]) -> frozenset[str]:
    """Field ids currently applicable for ``values``."""
    snapshot = MappingProxyType(dict(values))
    fields = {field.id: field for field in schema.iter_fields()}
    graph = visibility_dependencies(schema)

    cyclic = {field_id for group in find_visibility_cycles(schema) for field_id in group}
    if cyclic:
        logger.debug(f"Visibility cycle detected, failing open for {len(cyclic)} field(s)")

    acyclic = {
        field_id: {dep for dep in deps if dep not in cyclic}
        for field_id, deps in graph.items()
        if field_id not in cyclic
    }

    visible: set[str] = set(cyclic)
    for field_id in TopologicalSorter(acyclic).static_order():
        field = fields[field_id]
        try:
            if _is_visible(field, snapshot, visible, fields):
                visible.add(field_id)
        except Exception as exc:
            logger.warning(f"Visibility rule for field {field_id} failed to evaluate: {exc}")
    return frozenset(visible)
