"""
Reconciliation of running capacity against held commitments.

RDS capacity is compared in normalized units per equivalence class. Compute
Savings Plans capacity is compared in USD per hour across the whole bucket.
A positive delta means more must be purchased, a negative delta means the
commitments exceed what is running.
"""
from decimal import Decimal
from typing import Dict, Iterable, List, Mapping, Optional, Sequence
import logging

from .group_key import EngineDescriptionMapping, get_group_key_from_db_instance
from .models import (
    CalculationUnit,
    ComputeSavingsPlansBalance,
    NormalizedDBInstance,
    NormalizedReservedDBInstance,
    PricedEC2Resources,
    PricedResource,
    ReservedDBBalance,
)
from .normalization import (
    get_normalized_unit_from_db_instance,
    get_normalized_unit_from_reserved_db_instance,
)
from ..core.exceptions import OfferingNotFoundError
from ..core.purchase_method import RDSPurchaseMethod
from ..services.models import (
    DBInstance,
    EC2Resources,
    PricedCapacity,
    ReservedDBInstance,
    SavingsPlan,
    SavingsPlanOffering,
)


logger = logging.getLogger(__name__)


def group_calculation_units(
    db_instances: Iterable[DBInstance],
    reserved_db_instances: Iterable[ReservedDBInstance],
    mapping: Optional[EngineDescriptionMapping] = None,
) -> Dict[str, CalculationUnit]:
    """Group running instances and reservations by their shared key.

    The result is keyed by the union of both sides: keys with only running
    instances or only reservations are kept.
    """
    running: Dict[str, List[DBInstance]] = {}
    held: Dict[str, List[ReservedDBInstance]] = {}

    for instance in db_instances:
        key = get_group_key_from_db_instance(instance, mapping)
        running.setdefault(key, []).append(instance)
        held.setdefault(key, [])

    for reserved in reserved_db_instances:
        running.setdefault(reserved.group_key, [])
        held.setdefault(reserved.group_key, []).append(reserved)

    return {
        key: CalculationUnit(
            db_instances=tuple(running[key]),
            reserved_db_instances=tuple(held[key]),
        )
        for key in running
    }


def calculate_reserved_db_balance(group_key: str, unit: CalculationUnit) -> ReservedDBBalance:
    """Sum normalized units on both sides of one equivalence class."""
    db_instances = tuple(
        NormalizedDBInstance(instance, get_normalized_unit_from_db_instance(instance))
        for instance in unit.db_instances
    )
    reserved_db_instances = tuple(
        NormalizedReservedDBInstance(reserved, get_normalized_unit_from_reserved_db_instance(reserved))
        for reserved in unit.reserved_db_instances
    )

    return ReservedDBBalance(
        group_key=group_key,
        db_instances=db_instances,
        reserved_db_instances=reserved_db_instances,
        running_units=sum(item.normalized_unit for item in db_instances),
        purchased_units=sum(item.normalized_unit for item in reserved_db_instances),
    )


def reconcile_reserved_db_instances(
    db_instances: Iterable[DBInstance],
    reserved_db_instances: Iterable[ReservedDBInstance],
    mapping: Optional[EngineDescriptionMapping] = None,
) -> Dict[str, ReservedDBBalance]:
    """Compute the reserved instance balance of every RDS equivalence class.

    Only instances tagged ``ReservedInstance`` count as running demand.

    Raises:
        CalculationNotImplementedError: If an instance size has no normalized unit
        InvalidResourceError: If an instance class is malformed
    """
    reserved_demand = [
        instance for instance in db_instances
        if instance.purchase_method == RDSPurchaseMethod.RESERVED_INSTANCE
    ]
    units = group_calculation_units(reserved_demand, reserved_db_instances, mapping)

    balances = {key: calculate_reserved_db_balance(key, unit) for key, unit in units.items()}
    logger.debug(f"Reconciled {len(balances)} RDS reservation groups")
    return balances


def _price(resource: PricedCapacity, offerings: Mapping[str, SavingsPlanOffering]) -> PricedResource:
    offering = offerings.get(resource.instance_type)
    if offering is None:
        raise OfferingNotFoundError(resource.instance_type, resource.identity_label)

    return PricedResource(
        resource=resource,
        rate=offering.rate,
        hourly_cost=offering.rate * resource.concurrent_unit_count,
    )


def append_savings_plan_offering_rate(
    resources: EC2Resources,
    offerings: Mapping[str, SavingsPlanOffering],
) -> PricedEC2Resources:
    """Attach the Savings Plans rate and hourly cost to every resource.

    Raises:
        OfferingNotFoundError: If any resource's instance type has no offering.
            Nothing is returned in that case.
    """
    return PricedEC2Resources(
        ec2=tuple(_price(instance, offerings) for instance in resources.ec2),
        asg=tuple(_price(asg, offerings) for asg in resources.asg),
        eks=tuple(_price(node_group, offerings) for node_group in resources.eks),
    )


def calculate_compute_savings_plans_balance(
    priced_resources: PricedEC2Resources,
    savings_plans: Sequence[SavingsPlan],
) -> ComputeSavingsPlansBalance:
    return ComputeSavingsPlansBalance(
        resources=priced_resources,
        savings_plans=tuple(savings_plans),
        running_cost=sum((priced.hourly_cost for priced in priced_resources), Decimal(0)),
        purchased_cost=sum((plan.commitment for plan in savings_plans), Decimal(0)),
    )


def reconcile_compute_savings_plans(
    resources: EC2Resources,
    offerings: Mapping[str, SavingsPlanOffering],
    savings_plans: Sequence[SavingsPlan],
) -> ComputeSavingsPlansBalance:
    """Price the Compute Savings Plans bucket and compare it with active plans.

    Raises:
        OfferingNotFoundError: If any resource's instance type has no offering
    """
    priced = append_savings_plan_offering_rate(resources, offerings)
    balance = calculate_compute_savings_plans_balance(priced, savings_plans)
    logger.debug(
        f"Compute Savings Plans: running ${balance.running_cost}/hour, "
        f"purchased ${balance.purchased_cost}/hour"
    )
    return balance
