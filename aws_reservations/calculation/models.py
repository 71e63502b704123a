"""
Result models produced by the reservation calculations.
"""
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Generic, Tuple, TypeVar, Union

from ..services.models import (
    AutoScalingGroup,
    DBInstance,
    EC2Instance,
    EKSNodeGroup,
    ReservedDBInstance,
    SavingsPlan,
)


R = TypeVar('R', EC2Instance, AutoScalingGroup, EKSNodeGroup)


class CoverageStatus(str, Enum):
    """Outcome of comparing running capacity with held commitments."""
    SHORTFALL = 'shortfall'     # more must be purchased
    SURPLUS = 'surplus'         # over purchased
    COVERED = 'covered'         # exactly covered


def coverage_status(delta: Union[float, Decimal]) -> CoverageStatus:
    if delta > 0:
        return CoverageStatus.SHORTFALL
    if delta < 0:
        return CoverageStatus.SURPLUS
    return CoverageStatus.COVERED


@dataclass(frozen=True)
class CalculationUnit:
    """Running instances and reservations sharing one group key."""
    db_instances: Tuple[DBInstance, ...] = ()
    reserved_db_instances: Tuple[ReservedDBInstance, ...] = ()


@dataclass(frozen=True)
class NormalizedDBInstance:
    instance: DBInstance
    normalized_unit: float


@dataclass(frozen=True)
class NormalizedReservedDBInstance:
    reserved: ReservedDBInstance
    normalized_unit: float


@dataclass(frozen=True)
class ReservedDBBalance:
    """Normalized-unit balance of one RDS equivalence class."""
    group_key: str
    db_instances: Tuple[NormalizedDBInstance, ...]
    reserved_db_instances: Tuple[NormalizedReservedDBInstance, ...]
    running_units: float
    purchased_units: float

    @property
    def delta(self) -> float:
        """Units to purchase; negative when over purchased."""
        return self.running_units - self.purchased_units

    @property
    def status(self) -> CoverageStatus:
        return coverage_status(self.delta)


@dataclass(frozen=True)
class PricedResource(Generic[R]):
    """A compute resource with its Savings Plans rate and hourly cost."""
    resource: R
    rate: Decimal
    hourly_cost: Decimal


@dataclass(frozen=True)
class PricedEC2Resources:
    ec2: Tuple[PricedResource[EC2Instance], ...] = ()
    asg: Tuple[PricedResource[AutoScalingGroup], ...] = ()
    eks: Tuple[PricedResource[EKSNodeGroup], ...] = ()

    def __iter__(self):
        yield from self.ec2
        yield from self.asg
        yield from self.eks


@dataclass(frozen=True)
class ComputeSavingsPlansBalance:
    """Hourly cost balance between running compute and active Compute Savings Plans."""
    resources: PricedEC2Resources
    savings_plans: Tuple[SavingsPlan, ...]
    running_cost: Decimal
    purchased_cost: Decimal

    @property
    def delta(self) -> Decimal:
        """USD/hour to purchase; negative when over purchased."""
        return self.running_cost - self.purchased_cost

    @property
    def status(self) -> CoverageStatus:
        return coverage_status(self.delta)
