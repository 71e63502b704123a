"""
Inventory loader that fetches independent sources in parallel and joins them.
"""
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple
import logging

import boto3

from .autoscaling import AutoScalingCollector
from .base import BaseCollector
from .ec2 import EC2Collector
from .eks import EKSCollector
from .models import (
    AutoScalingGroup,
    DBInstance,
    EC2Instance,
    EKSNodeGroup,
    ReservedDBInstance,
    SavingsPlan,
    SavingsPlanOffering,
)
from .rds import RDSCollector
from .savings_plans import SavingsPlansCollector
from ..core.config import Config


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EC2Inventory:
    instances: Tuple[EC2Instance, ...]
    asgs: Tuple[AutoScalingGroup, ...]
    node_groups: Tuple[EKSNodeGroup, ...]


@dataclass(frozen=True)
class DBInventory:
    db_instances: Tuple[DBInstance, ...]
    reserved_db_instances: Tuple[ReservedDBInstance, ...]


@dataclass(frozen=True)
class SavingsPlansInventory:
    offerings: Dict[str, SavingsPlanOffering]
    savings_plans: Tuple[SavingsPlan, ...]


class InventoryLoader:
    """Loads every input of a reconciliation run for one region."""

    def __init__(self, session: boto3.Session, region: str, config: Optional[Config] = None):
        """Initialize the loader.

        Args:
            session: Authenticated boto3 session
            region: AWS region to inventory
            config: Configuration; defaults apply when omitted
        """
        self.session = session
        self.region = region
        self.config = config or Config()

        self.ec2 = EC2Collector(session, region)
        self.autoscaling = AutoScalingCollector(session, region)
        self.eks = EKSCollector(session, region, self.config.eks_cluster_tag_filters)
        self.rds = RDSCollector(session, region)
        self.savings_plans = SavingsPlansCollector(session, region)

    def _run_parallel(self, tasks: Dict[str, Tuple[BaseCollector, Callable[[], Any]]]) -> Dict[str, Any]:
        """Run fetch tasks concurrently; the first failure aborts the whole load."""
        for collector, _ in tasks.values():
            collector.prepare()

        results = {}
        with ThreadPoolExecutor(max_workers=len(tasks)) as executor:
            future_to_name = {executor.submit(task): name for name, (_, task) in tasks.items()}

            for future in as_completed(future_to_name):
                name = future_to_name[future]
                try:
                    results[name] = future.result()
                except Exception:
                    logger.error(f"Loading {name} failed in {self.region}")
                    executor.shutdown(wait=False, cancel_futures=True)
                    raise

        return results

    def load_ec2_inventory(self) -> EC2Inventory:
        """Load standalone instances, Auto Scaling groups and EKS node groups."""
        logger.info(f"Loading EC2 inventory in {self.region}")
        results = self._run_parallel({
            'EC2 instances': (self.ec2, self.ec2.load_instances),
            'Auto Scaling groups': (self.autoscaling, self.autoscaling.load_auto_scaling_groups),
            'EKS node groups': (self.eks, self.eks.load_node_groups),
        })
        return EC2Inventory(
            instances=tuple(results['EC2 instances']),
            asgs=tuple(results['Auto Scaling groups']),
            node_groups=tuple(results['EKS node groups']),
        )

    def load_db_inventory(self) -> DBInventory:
        """Load DB instances and active reserved DB instances."""
        logger.info(f"Loading RDS inventory in {self.region}")
        results = self._run_parallel({
            'DB instances': (self.rds, self.rds.load_db_instances),
            'reserved DB instances': (self.rds, self.rds.load_active_reserved_db_instances),
        })
        return DBInventory(
            db_instances=tuple(results['DB instances']),
            reserved_db_instances=tuple(results['reserved DB instances']),
        )

    def load_savings_plans_inventory(self) -> SavingsPlansInventory:
        """Load the Compute Savings Plans offering map and active plans."""
        logger.info(f"Loading Savings Plans offerings and active plans for {self.region}")
        results = self._run_parallel({
            'offerings': (self.savings_plans, self.savings_plans.load_offering_map),
            'savings plans': (self.savings_plans, self.savings_plans.load_active_compute_savings_plans),
        })
        return SavingsPlansInventory(
            offerings=results['offerings'],
            savings_plans=tuple(results['savings plans']),
        )
