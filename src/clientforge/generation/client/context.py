from __future__ import annotations

from dataclasses import dataclass

from ..operations import OperationModel


@dataclass
class ClientOutput:
    """One rendered client class."""

    class_name: str
    controller: str
    operations: tuple[OperationModel, ...]
    code: str
