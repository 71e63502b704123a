"""
Normalized units for RDS reserved instance size flexibility.
"""
from types import MappingProxyType

from ..core.exceptions import CalculationNotImplementedError
from ..services.models import DBInstance, ReservedDBInstance


NORMALIZED_UNITS = MappingProxyType({
    'micro': 0.5,
    'small': 1,
    'medium': 2,
    'large': 4,
    'xlarge': 8,
    '2xlarge': 16,
    '4xlarge': 32,
    '8xlarge': 64,
    '10xlarge': 80,
    '16xlarge': 128,
})


def get_instance_size(instance_class: str) -> str:
    """Return the size token: ``db.r5.2xlarge`` -> ``2xlarge``."""
    return instance_class.rsplit('.', 1)[-1]


def get_normalized_unit_from_instance_class(instance_class: str) -> float:
    size = get_instance_size(instance_class)
    if size not in NORMALIZED_UNITS:
        raise CalculationNotImplementedError(f"Not implemented: {instance_class}")
    return NORMALIZED_UNITS[size]


def get_normalized_unit_from_db_instance(instance: DBInstance) -> float:
    unit = get_normalized_unit_from_instance_class(instance.instance_class)
    return unit * 2 if instance.multi_az else unit


def get_normalized_unit_from_reserved_db_instance(reserved: ReservedDBInstance) -> float:
    unit = get_normalized_unit_from_instance_class(reserved.instance_class)
    return (unit * 2 if reserved.multi_az else unit) * reserved.instance_count
