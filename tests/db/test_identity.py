"""Tests for timeline key derivation (status_recorder/db/identity.py)."""

import pytest

from status_recorder.db.identity import entity_ref_for, entity_type_of
from status_recorder.domain.dtos import EntityRef


class Ticket:
    """Plain object that supplies its own timeline key."""

    def __init__(self, number):
        self.number = number

    def status_entity_ref(self):
        return EntityRef("support.Ticket", str(self.number) if self.number else None)


class BrokenTicket:
    def status_entity_ref(self):
        return ("support.Ticket", "1")


class TestEntityRefFor:
    def test_entity_ref_passes_through(self):
        ref = EntityRef("Order", "1")
        assert entity_ref_for(ref) is ref

    def test_provider_method(self):
        assert entity_ref_for(Ticket(7)) == EntityRef("support.Ticket", "7")
        assert not entity_ref_for(Ticket(None)).is_persisted

    def test_provider_must_return_entity_ref(self):
        with pytest.raises(TypeError, match="must return an EntityRef"):
            entity_ref_for(BrokenTicket())

    def test_unsupported_object(self):
        with pytest.raises(TypeError, match="Cannot derive a status timeline key"):
            entity_ref_for(object())

    def test_transient_instance_has_no_identity(self, order_model):
        ref = entity_ref_for(order_model(reference="SO-1"))
        assert ref == EntityRef("Order", None)

    def test_pending_instance_has_no_identity(self, session, order_model):
        order = order_model(reference="SO-1")
        session.add(order)
        assert entity_ref_for(order).entity_id is None

    def test_flushed_instance_keyed_on_primary_key(self, session, order_model):
        order = order_model(reference="SO-1")
        session.add(order)
        session.flush()

        assert entity_ref_for(order) == EntityRef("Order", str(order.id))

    def test_type_override(self, session, shipment_model):
        shipment = shipment_model(carrier="UPS")
        session.add(shipment)
        session.flush()

        assert entity_ref_for(shipment).entity_type == "logistics.Shipment"


class TestEntityTypeOf:
    def test_class_name(self, order_model):
        assert entity_type_of(order_model(reference="x")) == "Order"

    def test_override(self, shipment_model):
        assert entity_type_of(shipment_model(carrier="x")) == "logistics.Shipment"

    def test_entity_ref(self):
        assert entity_type_of(EntityRef("Invoice", "1")) == "Invoice"
