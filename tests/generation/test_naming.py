from __future__ import annotations

from clientforge.description import OperationDescription
from clientforge.generation.naming import operation_method_name, pascal_case, snake_case, unique_name


class TestNaming:
    def test_pascal_case(self) -> None:
        assert pascal_case("get_/users/{id}") == "GetUsersId"
        assert pascal_case("PetOwner") == "PetOwner"
        assert pascal_case("pet-owner") == "PetOwner"
        assert pascal_case("2fa") == "_2fa"
        assert pascal_case("$$") == ""

    def test_snake_case(self) -> None:
        assert snake_case("listPets") == "list_pets"
        assert snake_case("created-at") == "created_at"
        assert snake_case("class") == "class_"
        assert snake_case("X-Request-Id") == "x_request_id"
        assert snake_case("") == "value"

    def test_unique_name(self) -> None:
        used: set[str] = set()
        assert unique_name("pet", used) == "pet"
        assert unique_name("pet", used) == "pet2"
        assert unique_name("pet", used) == "pet3"
        assert used == {"pet", "pet2", "pet3"}

    def test_operation_method_name(self) -> None:
        assert operation_method_name(OperationDescription(method="get", path="/pets/{id}")) == "get_pets_id"
        operation = OperationDescription(method="get", path="/pets", operation_id="Pets_ListAll")
        assert operation_method_name(operation) == "pets_list_all"
        assert operation_method_name(operation, strip_controller=True) == "list_all"
