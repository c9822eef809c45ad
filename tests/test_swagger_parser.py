import json
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml
from openapi_spec_validator.versions.exceptions import OpenAPIVersionNotFound

from swagger_endpoints.errors import ParseError, SchemaValidationError
from swagger_endpoints.parser.detect import detect_format
from swagger_endpoints.parser.swagger import load_document

FIXTURES = Path(__file__).parent / "fixtures"


def _write_yaml(tmp_path: Path, data: dict, name: str = "swagger.yaml") -> Path:
    path = tmp_path / name
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return path


def _fixture_data() -> dict:
    return yaml.safe_load((FIXTURES / "swagger.yaml").read_text(encoding="utf-8"))


class TestDetectFormat:
    def test_detect_swagger(self):
        assert detect_format({"swagger": "2.0"}) == "swagger"

    def test_detect_openapi(self):
        assert detect_format({"openapi": "3.0.3"}) == "openapi"

    def test_unsupported_versions(self):
        with pytest.raises(SchemaValidationError):
            detect_format({"swagger": "1.2"})
        with pytest.raises(SchemaValidationError):
            detect_format({"openapi": "2.0"})

    def test_not_a_description(self):
        with pytest.raises(SchemaValidationError):
            detect_format({"info": {}})

    def test_unquoted_version(self):
        with pytest.raises(SchemaValidationError, match="quoted string"):
            detect_format({"swagger": 2.0})
        with pytest.raises(SchemaValidationError, match="quoted string"):
            detect_format({"openapi": 3.0})

    def test_not_a_mapping(self):
        with pytest.raises(SchemaValidationError, match="mapping"):
            detect_format(["a", "b"])


class TestLoadDocument:
    def test_load_swagger_fixture(self):
        doc = load_document(FIXTURES / "swagger.yaml")
        assert doc.version == "2.0"
        assert doc.title == "demo"
        assert [str(r) for r in doc.routes()] == ["/users~GET", "/users~POST", "/orders~GET"]
        assert "Unused" in doc.definitions
        assert doc.extras["basePath"] == "/v1"

    def test_status_codes_become_strings(self):
        doc = load_document(FIXTURES / "swagger.yaml")
        assert set(doc.paths["/users"]["get"]["responses"]) == {"200", "default"}

    def test_refs_are_kept(self):
        doc = load_document(FIXTURES / "swagger.yaml")
        schema = doc.paths["/users"]["get"]["responses"]["200"]["schema"]
        assert schema == {"$ref": "#/definitions/UserList"}

    def test_load_openapi_fixture(self):
        doc = load_document(FIXTURES / "openapi.yaml")
        assert doc.is_openapi3
        assert set(doc.definitions) == {"Pet", "Tag", "NewPet", "Problem"}
        assert set(doc.shared) == {"parameters", "requestBodies", "responses", "securitySchemes"}

    def test_load_json(self, tmp_path):
        path = tmp_path / "swagger.json"
        path.write_text(json.dumps(_fixture_data()), encoding="utf-8")
        doc = load_document(path)
        assert doc.title == "demo"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ParseError):
            load_document(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "swagger.yaml"
        path.write_text("swagger: '2.0'\npaths: [unclosed\n", encoding="utf-8")
        with pytest.raises(ParseError):
            load_document(path)

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "swagger.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ParseError):
            load_document(path)

    def test_dangling_references_are_all_listed(self, tmp_path):
        data = _fixture_data()
        data["definitions"]["User"]["properties"]["address"] = {"$ref": "#/definitions/Missing"}
        data["definitions"]["Order"]["properties"]["lines"]["items"] = {"$ref": "#/definitions/Gone"}
        with pytest.raises(SchemaValidationError) as excinfo:
            load_document(_write_yaml(tmp_path, data))
        assert len(excinfo.value.problems) == 2
        assert "#/definitions/Missing" in str(excinfo.value)
        assert "#/definitions/Gone" in str(excinfo.value)

    def test_external_reference_rejected(self, tmp_path):
        data = _fixture_data()
        data["definitions"]["User"]["properties"]["address"] = {"$ref": "common.yaml#/Address"}
        with pytest.raises(SchemaValidationError, match="external"):
            load_document(_write_yaml(tmp_path, data))

    def test_missing_required_field(self, tmp_path):
        data = _fixture_data()
        del data["info"]
        with pytest.raises(SchemaValidationError):
            load_document(_write_yaml(tmp_path, data))

    def test_wrong_type(self, tmp_path):
        data = _fixture_data()
        data["paths"]["/users"]["get"]["responses"] = "everything"
        with pytest.raises(SchemaValidationError):
            load_document(_write_yaml(tmp_path, data))

    def test_unquoted_version_header(self, tmp_path):
        for header in ("swagger: 2.0\n", "openapi: 3.0\n"):
            path = tmp_path / "swagger.yaml"
            path.write_text(header + "info: {title: t, version: '1'}\npaths: {}\n", encoding="utf-8")
            with pytest.raises(SchemaValidationError, match="quoted string"):
                load_document(path)

    def test_validator_errors_are_wrapped(self, tmp_path):
        with patch("swagger_endpoints.parser.swagger.validate", side_effect=OpenAPIVersionNotFound()):
            with pytest.raises(SchemaValidationError, match="validation"):
                load_document(FIXTURES / "swagger.yaml")
