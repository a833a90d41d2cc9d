from __future__ import annotations

import importlib.util
import sys
from pathlib import Path
from types import ModuleType
from typing import Any, Iterator

import pytest

from clientforge import ApiDescription, ClientGenerator, GenerationProfile, GeneratorSettings, TypeStyle


class FakeResponse:
    def __init__(self, status_code: int, payload: Any = None) -> None:
        self.status_code = status_code
        self.payload = payload
        self.text = repr(payload)

    def json(self) -> Any:
        return self.payload


class FakeTransport:
    def __init__(self, response: FakeResponse) -> None:
        self.response = response
        self.requests: list[dict[str, Any]] = []

    def send(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        self.requests.append({"method": method, "url": url, **kwargs})
        return self.response


def _load(source: str, directory: Path, name: str) -> ModuleType:
    path = directory / f"{name}.py"
    path.write_text(source)
    spec = importlib.util.spec_from_file_location(name, path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Could not load spec for {path}")
    module = importlib.util.module_from_spec(spec)
    sys.modules[name] = module
    spec.loader.exec_module(module)
    return module


@pytest.fixture()
def settings() -> GeneratorSettings:
    return GeneratorSettings(
        type_styles={"NotFound": TypeStyle.STRUCTURAL},
        profile=GenerationProfile.from_version(sys.version_info[:2]),
    )


@pytest.fixture()
def source(petstore: ApiDescription, settings: GeneratorSettings) -> str:
    return ClientGenerator(petstore, settings).generate_file()


@pytest.fixture()
def generated(source: str, tmp_path: Path, request: pytest.FixtureRequest) -> Iterator[ModuleType]:
    name = f"petstore_client_{request.node.name.replace('[', '_').replace(']', '_')}"
    module = _load(source, tmp_path, name)
    yield module
    sys.modules.pop(name, None)


class TestPythonRendererSource:
    def test_prelude(self, source: str) -> None:
        assert source.startswith("# Generated by clientforge from 'Petstore'. Do not edit by hand.\n")
        assert "from __future__ import annotations" in source
        assert "class ApiException(Exception):" in source
        assert "class Transport(Protocol):" in source

    def test_types(self, source: str) -> None:
        assert "class Pet:" in source
        assert "class Dog(Pet):" in source
        assert "PetStatus = Literal['available', 'sold']" in source
        assert "NotFound = TypedDict(" in source
        assert (
            "values['owner'] = Owner.from_dict(data.get('owner')) if data.get('owner') is not None else None"
            in source
        )

    def test_client_methods(self, source: str) -> None:
        assert "class PetsClient:" in source
        assert "class PhotosClient:" in source
        assert "def show_pet_by_id(self, pet_id: str) -> Pet:" in source
        assert "ApiException: Error payload is NotFound | Error | str." in source
        assert "query_.extend(('tags', item) for item in tags)" in source
        assert "files_.append(('file', file))" in source

    def test_legacy_profile(self, petstore: ApiDescription) -> None:
        settings = GeneratorSettings(profile=GenerationProfile.from_version("3.9"))
        source = ClientGenerator(petstore, settings).generate_file()
        assert "from typing_extensions import Required, TypedDict" in source
        assert "@dataclass(kw_only=True)" not in source
        assert "tag: Optional[str] = None" in source
        assert "id: Optional[int] = None" in source


class TestGeneratedModule:
    def test_round_trips_models(self, generated: ModuleType) -> None:
        pet = generated.Pet.from_dict({"id": 1, "name": "Rex", "owner": {"name": "Ann", "pets": []}})
        assert pet.owner.name == "Ann"
        assert pet.owner.pets == []
        assert pet.to_dict() == {
            "id": 1,
            "name": "Rex",
            "tag": None,
            "status": None,
            "owner": {"name": "Ann", "pets": []},
        }

    def test_inherited_model(self, generated: ModuleType) -> None:
        dog = generated.Dog.from_dict({"id": 2, "name": "Fido", "barks": True})
        assert isinstance(dog, generated.Pet)
        assert dog.barks is True
        assert dog.to_dict()["name"] == "Fido"

    def test_list_pets(self, generated: ModuleType) -> None:
        transport = FakeTransport(FakeResponse(200, [{"id": 1, "name": "Rex"}]))
        client = generated.PetsClient(transport, "https://example.com/")
        pets = client.list_pets(limit=10, tags=["a", "b"])
        assert [pet.name for pet in pets] == ["Rex"]
        (request,) = transport.requests
        assert request["method"] == "GET"
        assert request["url"] == "https://example.com/v1/pets"
        assert request["params"] == [("limit", 10), ("tags", "a"), ("tags", "b")]

    def test_create_pet_sends_json(self, generated: ModuleType) -> None:
        transport = FakeTransport(FakeResponse(201))
        client = generated.PetsClient(transport)
        assert client.create_pet(generated.Pet(id=3, name="Tom")) is None
        assert transport.requests[0]["json"]["name"] == "Tom"

    def test_typed_error(self, generated: ModuleType) -> None:
        transport = FakeTransport(FakeResponse(404, {"resource": "pet"}))
        client = generated.PetsClient(transport)
        with pytest.raises(generated.ApiException) as excinfo:
            client.show_pet_by_id("a b")
        assert excinfo.value.status == 404
        assert excinfo.value.result == {"resource": "pet"}
        assert transport.requests[0]["url"] == "/v1/pets/a%20b"

    def test_default_response(self, generated: ModuleType) -> None:
        transport = FakeTransport(FakeResponse(503, {"code": 503, "message": "down"}))
        with pytest.raises(generated.ApiException) as excinfo:
            generated.PetsClient(transport).list_pets()
        assert isinstance(excinfo.value.result, generated.Error)
        assert excinfo.value.result.message == "down"

    def test_unexpected_status(self, generated: ModuleType) -> None:
        transport = FakeTransport(FakeResponse(418))
        with pytest.raises(generated.ApiException) as excinfo:
            generated.PhotosClient(transport).upload_photo("1", generated.FileParameter(b"data"))
        assert excinfo.value.result is None
        assert transport.requests[0]["files"][0][0] == "file"
