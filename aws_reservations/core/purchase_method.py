"""
Purchase methods and the tag based classifier.

A resource claims how its capacity should be paid for with the
``ReservationPurchaseMethod`` tag. Resources without the tag are ``Undefined``.
"""
from enum import Enum
from typing import Dict, Iterable, Mapping, Optional, Type, TypeVar

from .exceptions import UnknownPurchaseMethodError


PURCHASE_METHOD_TAG = 'ReservationPurchaseMethod'


class EC2PurchaseMethod(str, Enum):
    """Purchase methods for EC2 capacity (instances, ASGs, EKS node groups)."""
    COMPUTE_SAVINGS_PLANS = 'ComputeSavingsPlans'
    EC2_INSTANCE_SAVINGS_PLANS = 'EC2InstanceSavingsPlans'
    SPOT_INSTANCES = 'SpotInstances'
    NEEDLESS = 'Needless'
    UNDEFINED = 'Undefined'


class RDSPurchaseMethod(str, Enum):
    """Purchase methods for RDS DB instances."""
    RESERVED_INSTANCE = 'ReservedInstance'
    NEEDLESS = 'Needless'
    UNDEFINED = 'Undefined'


M = TypeVar('M', EC2PurchaseMethod, RDSPurchaseMethod)


def tags_from_list(tag_list: Optional[Iterable[Mapping[str, str]]]) -> Dict[str, str]:
    """Convert AWS ``[{'Key': ..., 'Value': ...}]`` tags into a dict."""
    tags = {}
    for tag in tag_list or []:
        tags[tag['Key']] = tag.get('Value', '')
    return tags


def _classify(tags: Mapping[str, str], method_type: Type[M]) -> M:
    value = tags.get(PURCHASE_METHOD_TAG)
    if value is None:
        return method_type('Undefined')

    for method in method_type:
        if method.value == value and method.value != 'Undefined':
            return method

    raise UnknownPurchaseMethodError(value)


def classify_ec2_purchase_method(tags: Mapping[str, str]) -> EC2PurchaseMethod:
    """Classify an EC2 instance, ASG or EKS node group by its tags.

    Args:
        tags: Resource tags as a key/value mapping

    Returns:
        The claimed purchase method, ``UNDEFINED`` when the tag is absent

    Raises:
        UnknownPurchaseMethodError: If the tag value is not a known method
    """
    return _classify(tags, EC2PurchaseMethod)


def classify_rds_purchase_method(tags: Mapping[str, str]) -> RDSPurchaseMethod:
    """Classify an RDS DB instance by its tags.

    Args:
        tags: Resource tags as a key/value mapping

    Returns:
        The claimed purchase method, ``UNDEFINED`` when the tag is absent

    Raises:
        UnknownPurchaseMethodError: If the tag value is not a known method
    """
    return _classify(tags, RDSPurchaseMethod)
