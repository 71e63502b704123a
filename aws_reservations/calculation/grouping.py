"""
Partitioning of resources by purchase method and instance family.
"""
from typing import Dict, Iterable, List, Tuple

from ..core.exceptions import CalculationNotImplementedError, InvalidResourceError
from ..core.purchase_method import EC2PurchaseMethod, RDSPurchaseMethod
from ..services.models import (
    AutoScalingGroup,
    DBInstance,
    EC2Instance,
    EC2Resources,
    EKSNodeGroup,
)


GroupedEC2Resources = Dict[EC2PurchaseMethod, EC2Resources]
GroupedDBInstances = Dict[RDSPurchaseMethod, Tuple[DBInstance, ...]]


def group_ec2_resources_by_purchase_method(
    instances: Iterable[EC2Instance] = (),
    asgs: Iterable[AutoScalingGroup] = (),
    node_groups: Iterable[EKSNodeGroup] = (),
) -> GroupedEC2Resources:
    """Bucket compute resources by their purchase method.

    Every purchase method gets a bucket, possibly empty. Input order is kept
    within each bucket.
    """
    buckets: Dict[EC2PurchaseMethod, Dict[str, List]] = {
        method: {'ec2': [], 'asg': [], 'eks': []} for method in EC2PurchaseMethod
    }

    for instance in instances:
        buckets[instance.purchase_method]['ec2'].append(instance)
    for asg in asgs:
        buckets[asg.purchase_method]['asg'].append(asg)
    for node_group in node_groups:
        buckets[node_group.purchase_method]['eks'].append(node_group)

    return {
        method: EC2Resources(ec2=tuple(kinds['ec2']), asg=tuple(kinds['asg']), eks=tuple(kinds['eks']))
        for method, kinds in buckets.items()
    }


def group_db_instances_by_purchase_method(instances: Iterable[DBInstance]) -> GroupedDBInstances:
    """Bucket DB instances by their purchase method, keeping input order."""
    buckets: Dict[RDSPurchaseMethod, List[DBInstance]] = {method: [] for method in RDSPurchaseMethod}

    for instance in instances:
        buckets[instance.purchase_method].append(instance)

    return {method: tuple(items) for method, items in buckets.items()}


def get_instance_family(instance: EC2Instance) -> str:
    """``m5.2xlarge`` -> ``m5``."""
    family, separator, size = instance.instance_type.partition('.')
    if not (family and separator and size):
        raise InvalidResourceError(f"Invalid instance type: {instance.instance_type}: {instance.id}")
    return family


def group_by_instance_family(resources: EC2Resources) -> Dict[str, EC2Resources]:
    """Group EC2 Instance Savings Plans resources by instance family.

    Raises:
        CalculationNotImplementedError: If any Auto Scaling group or EKS node
            group is present
    """
    if resources.asg:
        raise CalculationNotImplementedError(
            'Calculation for Auto Scaling Group with EC2 Savings Plans is not implemented'
        )
    if resources.eks:
        raise CalculationNotImplementedError(
            'Calculation for EKS with EC2 Savings Plans is not implemented'
        )

    families: Dict[str, List[EC2Instance]] = {}
    for instance in resources.ec2:
        families.setdefault(get_instance_family(instance), []).append(instance)

    return {family: EC2Resources(ec2=tuple(instances)) for family, instances in families.items()}
