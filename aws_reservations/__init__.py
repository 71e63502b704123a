"""
AWS Reservations - purchase planning for Savings Plans and Reserved Instances.

Inventories EC2 instances, Auto Scaling groups, EKS node groups and RDS DB
instances, classifies them by their ReservationPurchaseMethod tag and
reconciles running capacity against the commitments already held.
"""

__version__ = "1.0.0"

from aws_reservations.core.exceptions import ReservationError

__all__ = ["ReservationError"]
