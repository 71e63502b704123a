"""
Data models for inventoried AWS resources and held commitments.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Protocol, Tuple

from ..core.purchase_method import EC2PurchaseMethod, RDSPurchaseMethod


class PricedCapacity(Protocol):
    """Compute capacity that can be priced with a Savings Plans offering."""

    @property
    def instance_type(self) -> str: ...

    @property
    def concurrent_unit_count(self) -> int: ...

    @property
    def identity_label(self) -> str: ...


@dataclass(frozen=True)
class EC2Instance:
    """A running EC2 instance that is not managed by an Auto Scaling group."""
    id: str
    name: str
    instance_type: str                      # e.g. 'm5.2xlarge'
    is_running: bool
    purchase_method: EC2PurchaseMethod
    auto_scaling_group_name: Optional[str] = None

    @property
    def concurrent_unit_count(self) -> int:
        return 1

    @property
    def identity_label(self) -> str:
        return self.name or self.id


@dataclass(frozen=True)
class AutoScalingGroup:
    """An Auto Scaling group; ``min_size`` is its guaranteed running floor."""
    name: str
    min_size: int
    instance_type: str
    purchase_method: EC2PurchaseMethod

    @property
    def concurrent_unit_count(self) -> int:
        return self.min_size

    @property
    def identity_label(self) -> str:
        return self.name


@dataclass(frozen=True)
class EKSNodeGroup:
    """An EKS managed node group. Pricing uses its first instance type."""
    name: str
    cluster_name: str
    instance_types: Tuple[str, ...]
    min_size: int
    purchase_method: EC2PurchaseMethod

    @property
    def instance_type(self) -> str:
        return self.instance_types[0]

    @property
    def concurrent_unit_count(self) -> int:
        return self.min_size

    @property
    def identity_label(self) -> str:
        return f"{self.cluster_name}/{self.name}"


@dataclass(frozen=True)
class EC2Resources:
    """Compute resources split by kind."""
    ec2: Tuple[EC2Instance, ...] = ()
    asg: Tuple[AutoScalingGroup, ...] = ()
    eks: Tuple[EKSNodeGroup, ...] = ()

    def __len__(self) -> int:
        return len(self.ec2) + len(self.asg) + len(self.eks)


@dataclass(frozen=True)
class DBInstance:
    """An RDS DB instance."""
    instance_identifier: str
    instance_class: str                     # e.g. 'db.r5.large'
    engine: str                             # e.g. 'mysql', 'postgres'
    multi_az: bool
    purchase_method: RDSPurchaseMethod


@dataclass(frozen=True)
class ReservedDBInstance:
    """An active, already purchased RDS reserved DB instance lease."""
    lease_id: str
    group_key: str
    instance_class: str
    instance_count: int
    multi_az: bool
    product_description: str = ''


@dataclass(frozen=True)
class SavingsPlanOffering:
    """Hourly rate of a 1-year All Upfront Compute Savings Plan for one instance type."""
    instance_type: str
    rate: Decimal


@dataclass(frozen=True)
class SavingsPlan:
    """An active Compute Savings Plan."""
    id: str
    commitment: Decimal                     # USD per hour
    end: str
