"""Domain Types - id generation and discriminator values."""

import uuid

from reviewdb.core.domain_types import EntityClass, new_id


def test_new_id_is_uuid4_string():
    value = new_id()
    assert isinstance(value, str)
    assert uuid.UUID(value).version == 4


def test_new_id_is_random():
    assert len({new_id() for _ in range(50)}) == 50


def test_entity_class_values_match_table_roles():
    assert [c.value for c in EntityClass] == ["review", "buffer", "path", "comment"]
