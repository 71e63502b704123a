"""Reservation reconciliation calculations."""

from .group_key import EngineDescriptionMapping, build_group_key, get_instance_class_family
from .models import (
    CalculationUnit,
    ComputeSavingsPlansBalance,
    CoverageStatus,
    PricedEC2Resources,
    PricedResource,
    ReservedDBBalance,
)
from .grouping import (
    group_by_instance_family,
    group_db_instances_by_purchase_method,
    group_ec2_resources_by_purchase_method,
)
from .normalization import NORMALIZED_UNITS
from .reconciliation import (
    append_savings_plan_offering_rate,
    reconcile_compute_savings_plans,
    reconcile_reserved_db_instances,
)

__all__ = [
    'EngineDescriptionMapping',
    'build_group_key',
    'get_instance_class_family',
    'CalculationUnit',
    'ComputeSavingsPlansBalance',
    'CoverageStatus',
    'PricedEC2Resources',
    'PricedResource',
    'ReservedDBBalance',
    'group_by_instance_family',
    'group_db_instances_by_purchase_method',
    'group_ec2_resources_by_purchase_method',
    'NORMALIZED_UNITS',
    'append_savings_plan_offering_rate',
    'reconcile_compute_savings_plans',
    'reconcile_reserved_db_instances',
]
