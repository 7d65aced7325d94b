"""
Unit tests for the topic catalog.
"""

import pytest

from storefront_webhooks.webhooks.errors import ValidationError
from storefront_webhooks.webhooks.topics import Topic, get_topic, is_known_topic, list_topics


def test_catalog_covers_every_resource_and_action():
    ids = [info.id for info in list_topics()]
    assert ids == [
        f"{resource}.{action}"
        for resource in ("order", "product", "customer", "coupon")
        for action in ("created", "updated", "deleted")
    ]
    assert set(ids) == {t.value for t in Topic}


def test_topics_have_labels_and_descriptions():
    for info in list_topics():
        assert info.label
        assert info.description


def test_list_topics_returns_a_copy():
    topics = list_topics()
    topics.clear()
    assert len(list_topics()) == 12


def test_lookup():
    assert get_topic("coupon.deleted").label == "Coupon Deleted"
    assert is_known_topic("order.created")
    assert not is_known_topic("order.refunded")


def test_unknown_topic_raises_validation_error():
    with pytest.raises(ValidationError) as exc_info:
        get_topic("order.refunded")

    assert exc_info.value.code == "validation_error"
    assert "order.created" in exc_info.value.details["allowed_topics"]
