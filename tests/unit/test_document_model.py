"""Unit tests for the Document base model."""

from bson import ObjectId

from mongokit.domain.models import Document

HEX_ID = "507f1f77bcf86cd799439011"


class Order(Document):
    customer: str
    total: int = 0


class TestDocument:
    """Tests for Document id handling."""

    def test_id_defaults_to_none(self):
        assert Order(customer="alice").id is None

    def test_object_id_is_kept(self):
        oid = ObjectId(HEX_ID)
        order = Order.model_validate({"_id": oid, "customer": "alice"})
        assert order.id == oid
        assert isinstance(order.id, ObjectId)

    def test_object_id_survives_python_dump(self):
        oid = ObjectId(HEX_ID)
        order = Order.model_validate({"_id": oid, "customer": "alice"})

        assert order.model_dump(by_alias=True)["_id"] == oid

    def test_object_id_rendered_as_hex_in_json(self):
        order = Order(id=ObjectId(HEX_ID), customer="alice")

        assert order.model_dump(mode="json", by_alias=True)["_id"] == HEX_ID
        assert f'"_id":"{HEX_ID}"' in order.model_dump_json(by_alias=True)

    def test_external_string_id(self):
        order = Order.model_validate({"_id": "order-1", "customer": "alice"})
        assert order.id == "order-1"

    def test_hex_string_stays_string(self):
        assert Order(id=HEX_ID, customer="alice").id == HEX_ID

    def test_populate_by_field_name(self):
        order = Order(id="order-2", customer="bob")
        assert order.id == "order-2"

    def test_dump_by_alias(self):
        order = Order(id="order-3", customer="carol", total=5)
        assert order.model_dump(by_alias=True) == {
            "_id": "order-3",
            "customer": "carol",
            "total": 5,
        }
