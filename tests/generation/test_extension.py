from __future__ import annotations

import logging

import pytest

from clientforge.generation.extension import ExtensionCode


class TestExtensionCode:
    def test_extended_class_is_renamed_and_merged(self) -> None:
        extension = ExtensionCode(extension_classes={"Pets": "X"}, extended_classes=frozenset({"Pets"}))
        assert extension.class_name_for("Pets") == "PetsBase"
        generated = "class PetsBase:\n    pass"
        assert extension.append("Pets", generated) == generated + "\n\nX"

    def test_class_not_extended_is_unchanged(self) -> None:
        extension = ExtensionCode(extension_classes={"Pets": "X"})
        assert extension.class_name_for("Pets") == "Pets"
        generated = "class Pets:\n    pass"
        assert extension.append("Pets", generated) == generated

    def test_extended_without_code_passes_through(self, caplog: pytest.LogCaptureFixture) -> None:
        extension = ExtensionCode(extended_classes=frozenset({"Pets"}))
        with caplog.at_level(logging.DEBUG, logger="clientforge.generation.extension"):
            assert extension.append("Pets", "class PetsBase: ...") == "class PetsBase: ..."
        assert "has no extension code" in caplog.text

    def test_base_class_code(self) -> None:
        extension = ExtensionCode(
            extension_classes={"ClientBase": "class ClientBase: ...", "Other": "class Other: ..."},
            base_classes=frozenset({"ClientBase", "Missing"}),
        )
        assert extension.base_class_code() == ["class ClientBase: ..."]
