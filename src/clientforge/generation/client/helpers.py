from __future__ import annotations

from ...description import OperationDescription
from ..naming import operation_method_name, pascal_case, unique_name
from ..settings import OperationGrouping


def controller_name(operation: OperationDescription, grouping: OperationGrouping) -> str:
    """Grouping key of the client class an operation belongs to.

    Example:
        >>> controller_name(OperationDescription(method="get", path="/pets", tags=("pets",)), OperationGrouping.TAG)
        'Pets'
    """
    if grouping is OperationGrouping.TAG:
        return pascal_case(operation.tags[0]) if operation.tags else ""
    if grouping is OperationGrouping.OPERATION_ID:
        operation_id = operation.operation_id or ""
        if "_" in operation_id:
            return pascal_case(operation_id.split("_", 1)[0])
        return ""
    return ""


def group_operations(
    operations: list[OperationDescription],
    grouping: OperationGrouping,
) -> dict[str, list[OperationDescription]]:
    """Group operations by controller, keeping first-seen order."""
    grouped: dict[str, list[OperationDescription]] = {}
    for operation in operations:
        grouped.setdefault(controller_name(operation, grouping), []).append(operation)
    return grouped


def method_names(operations: list[OperationDescription], grouping: OperationGrouping) -> list[str]:
    """Client method names, made unique within one client class."""
    strip_controller = grouping is OperationGrouping.OPERATION_ID
    used: set[str] = set()
    return [unique_name(operation_method_name(operation, strip_controller), used) for operation in operations]
