"""AWS inventory collectors package."""

from .base import BaseCollector
from .models import (
    AutoScalingGroup,
    DBInstance,
    EC2Instance,
    EC2Resources,
    EKSNodeGroup,
    ReservedDBInstance,
    SavingsPlan,
    SavingsPlanOffering,
)
from .ec2 import EC2Collector
from .autoscaling import AutoScalingCollector
from .eks import EKSCollector
from .rds import RDSCollector
from .savings_plans import SavingsPlansCollector

__all__ = [
    'BaseCollector',
    'AutoScalingGroup',
    'DBInstance',
    'EC2Instance',
    'EC2Resources',
    'EKSNodeGroup',
    'ReservedDBInstance',
    'SavingsPlan',
    'SavingsPlanOffering',
    'EC2Collector',
    'AutoScalingCollector',
    'EKSCollector',
    'RDSCollector',
    'SavingsPlansCollector',
]
