from pathlib import Path

from swagger_endpoints.parser.base import ApiDocument
from swagger_endpoints.parser.swagger import load_document
from swagger_endpoints.transform.prune import ConstraintPruner

FIXTURES = Path(__file__).parent / "fixtures"


def _pruned(name: str = "swagger.yaml", resource_name: str = "proj-api"):
    return ConstraintPruner(resource_name).prune(load_document(FIXTURES / name))


class TestTitleCorrection:
    def test_title_forced_to_resource_name(self):
        doc, record = _pruned(resource_name="Bar")
        assert doc.title == "Bar"
        assert record.entries[0].location == "/info/title"

    def test_matching_title_untouched(self):
        doc, record = _pruned(resource_name="demo")
        assert doc.title == "demo"
        assert all(e.location != "/info/title" for e in record.entries)

    def test_other_info_fields_kept(self):
        doc, _ = _pruned()
        assert doc.info == {"version": "1.0.0", "description": "Users and orders"}


class TestDefaultResponses:
    def test_default_removed_other_codes_kept(self):
        original = load_document(FIXTURES / "swagger.yaml")
        doc, _ = ConstraintPruner("proj-api").prune(original)
        responses = doc.paths["/users"]["get"]["responses"]
        assert "default" not in responses
        assert responses["200"] == original.paths["/users"]["get"]["responses"]["200"]

    def test_every_operation_visited(self):
        doc, record = _pruned()
        assert "default" not in doc.paths["/users"]["post"]["responses"]
        locations = [e.location for e in record.entries]
        assert "/paths/~1users/get/responses/default" in locations
        assert "/paths/~1users/post/responses/default" in locations

    def test_shared_responses_are_not_operation_responses(self):
        doc, _ = _pruned()
        assert "NotFound" in doc.shared["responses"]

    def test_openapi_default_reference_removed(self):
        doc, _ = _pruned("openapi.yaml")
        assert set(doc.paths["/pets"]["get"]["responses"]) == {"200"}


class TestFreeFormObjects:
    def test_true_and_empty_schema_removed(self):
        doc, _ = _pruned()
        assert "additionalProperties" not in doc.definitions["Address"]
        assert "additionalProperties" not in doc.definitions["NewUser"]["properties"]["metadata"]

    def test_closed_and_constrained_objects_kept(self):
        doc, _ = _pruned()
        assert doc.definitions["User"]["additionalProperties"] is False
        attributes = doc.definitions["LineItem"]["properties"]["attributes"]
        assert attributes["additionalProperties"] == {"type": "string"}

    def test_openapi_component_schema(self):
        doc, _ = _pruned("openapi.yaml")
        assert "additionalProperties" not in doc.definitions["Tag"]


class TestPruneContract:
    def test_full_record(self):
        _, record = _pruned()
        assert [e.location for e in record.entries] == [
            "/info/title",
            "/paths/~1users/get/responses/default",
            "/paths/~1users/post/responses/default",
            "/definitions/Address/additionalProperties",
            "/definitions/NewUser/properties/metadata/additionalProperties",
        ]

    def test_idempotent(self):
        once, _ = _pruned()
        twice, record = ConstraintPruner("proj-api").prune(once)
        assert twice == once
        assert len(record) == 0

    def test_routes_never_removed(self):
        original = load_document(FIXTURES / "swagger.yaml")
        doc, _ = ConstraintPruner("proj-api").prune(original)
        assert list(doc.routes()) == list(original.routes())

    def test_input_not_mutated(self):
        original = load_document(FIXTURES / "swagger.yaml")
        snapshot = original.to_dict()
        ConstraintPruner("proj-api").prune(original)
        assert original.to_dict() == snapshot

    def test_nothing_to_prune(self):
        doc = ApiDocument.from_dict({
            "swagger": "2.0",
            "info": {"title": "clean", "version": "1"},
            "paths": {"/a": {"get": {"responses": {"200": {"description": "ok"}}}}},
        })
        pruned, record = ConstraintPruner("clean").prune(doc)
        assert pruned == doc
        assert len(record) == 0
