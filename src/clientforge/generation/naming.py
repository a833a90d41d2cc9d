from __future__ import annotations

import keyword

from ..description import OperationDescription


def pascal_case(raw: str) -> str:
    """Convert an arbitrary name to a PascalCase identifier.

    Example:
        >>> pascal_case("get_/users/{id}")
        'GetUsersId'
        >>> pascal_case("PetOwner")
        'PetOwner'
    """
    words = _words(raw)
    name = "".join(word[:1].upper() + word[1:] for word in words)
    if not name:
        return ""
    if name[0].isdigit():
        name = f"_{name}"
    return name


def snake_case(raw: str) -> str:
    """Convert an arbitrary name to a snake_case identifier.

    Example:
        >>> snake_case("listPets")
        'list_pets'
        >>> snake_case("created-at")
        'created_at'
    """
    cleaned: list[str] = []
    prev_lower = False
    for word in _words(raw):
        for ch in word:
            if ch.isupper() and prev_lower:
                cleaned.append("_")
            cleaned.append(ch.lower())
            prev_lower = ch.islower() or ch.isdigit()
        cleaned.append("_")
        prev_lower = False
    name = "".join(cleaned).strip("_")
    if not name:
        return "value"
    if name[0].isdigit():
        name = f"_{name}"
    if keyword.iskeyword(name):
        name = f"{name}_"
    return name


def unique_name(name: str, used: set[str]) -> str:
    """Return ``name`` or ``name`` with the lowest free numeric suffix, and reserve it."""
    candidate = name
    counter = 2
    while candidate in used:
        candidate = f"{name}{counter}"
        counter += 1
    used.add(candidate)
    return candidate


def _words(raw: str) -> list[str]:
    words: list[str] = []
    current: list[str] = []
    for ch in raw:
        if ch.isalnum():
            current.append(ch)
        elif current:
            words.append("".join(current))
            current = []
    if current:
        words.append("".join(current))
    return words


def operation_method_name(operation: OperationDescription, strip_controller: bool = False) -> str:
    """Name of the client method generated for an operation.

    The operationId wins. With ``strip_controller`` an operationId of the
    form "Controller_action" contributes only its action part. Without an
    operationId the name is built from the HTTP method and path.

    Example:
        >>> operation_method_name(OperationDescription(method="get", path="/pets/{id}"))
        'get_pets_id'
    """
    if operation.operation_id:
        operation_id = operation.operation_id
        if strip_controller and "_" in operation_id:
            operation_id = operation_id.split("_", 1)[1]
        return snake_case(operation_id)
    return snake_case(f"{operation.method}_{operation.path}")
