"""
Catalog of supported webhook topics.

Topics are ``<resource>.<action>`` pairs over the storefront's order,
product, customer and coupon resources. The set is closed and fixed
for the lifetime of the process.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List

from .errors import ValidationError


class Topic(str, Enum):
    """Event topics a subscription can listen to."""

    ORDER_CREATED = "order.created"
    ORDER_UPDATED = "order.updated"
    ORDER_DELETED = "order.deleted"

    PRODUCT_CREATED = "product.created"
    PRODUCT_UPDATED = "product.updated"
    PRODUCT_DELETED = "product.deleted"

    CUSTOMER_CREATED = "customer.created"
    CUSTOMER_UPDATED = "customer.updated"
    CUSTOMER_DELETED = "customer.deleted"

    COUPON_CREATED = "coupon.created"
    COUPON_UPDATED = "coupon.updated"
    COUPON_DELETED = "coupon.deleted"


@dataclass(frozen=True)
class TopicInfo:
    """Human-readable metadata for a topic."""

    id: str
    label: str
    description: str

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.id, "label": self.label, "description": self.description}


_TOPICS: List[TopicInfo] = [
    TopicInfo(Topic.ORDER_CREATED.value, "Order Created", "Fired when a new order is placed"),
    TopicInfo(Topic.ORDER_UPDATED.value, "Order Updated", "Fired when an order is updated"),
    TopicInfo(Topic.ORDER_DELETED.value, "Order Deleted", "Fired when an order is deleted"),
    TopicInfo(Topic.PRODUCT_CREATED.value, "Product Created", "Fired when a new product is created"),
    TopicInfo(Topic.PRODUCT_UPDATED.value, "Product Updated", "Fired when a product is updated"),
    TopicInfo(Topic.PRODUCT_DELETED.value, "Product Deleted", "Fired when a product is deleted"),
    TopicInfo(
        Topic.CUSTOMER_CREATED.value, "Customer Created", "Fired when a new customer registers"
    ),
    TopicInfo(
        Topic.CUSTOMER_UPDATED.value, "Customer Updated", "Fired when customer details are updated"
    ),
    TopicInfo(Topic.CUSTOMER_DELETED.value, "Customer Deleted", "Fired when a customer is deleted"),
    TopicInfo(Topic.COUPON_CREATED.value, "Coupon Created", "Fired when a new coupon is created"),
    TopicInfo(Topic.COUPON_UPDATED.value, "Coupon Updated", "Fired when a coupon is updated"),
    TopicInfo(Topic.COUPON_DELETED.value, "Coupon Deleted", "Fired when a coupon is deleted"),
]

_TOPICS_BY_ID: Dict[str, TopicInfo] = {info.id: info for info in _TOPICS}


def list_topics() -> List[TopicInfo]:
    """Return all supported topics in catalog order."""
    return list(_TOPICS)


def is_known_topic(value: str) -> bool:
    return value in _TOPICS_BY_ID


def get_topic(value: str) -> TopicInfo:
    """
    Look up metadata for a topic.

    Raises:
        ValidationError: If the topic is not part of the catalog
    """
    info = _TOPICS_BY_ID.get(value)
    if info is None:
        raise ValidationError(
            f"Invalid topic: {value}",
            details={"topic": value, "allowed_topics": list(_TOPICS_BY_ID)},
        )
    return info
