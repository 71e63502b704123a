"""
Savings Plans collector for offering rates and active Compute Savings Plans.
"""
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List
import logging

from botocore.exceptions import BotoCoreError, ClientError

from .base import BaseCollector
from .models import SavingsPlan, SavingsPlanOffering
from ..core.exceptions import InvalidResourceError


logger = logging.getLogger(__name__)

ONE_YEAR_SECONDS = 31536000
PAYMENT_OPTION = 'All Upfront'
PRODUCT_DESCRIPTION = 'Linux/UNIX'
TENANCY = 'shared'


class SavingsPlansCollector(BaseCollector):
    """Collector for Compute Savings Plans offerings and active plans."""

    @property
    def service_name(self) -> str:
        return 'savingsplans'

    @property
    def client_region(self) -> str:
        # The us-east-1 endpoint serves every region
        return 'us-east-1'

    def load_offering_map(self) -> Dict[str, SavingsPlanOffering]:
        """Load 1-year All Upfront Compute Savings Plans rates for the region.

        Returns:
            Offerings keyed by instance type

        Raises:
            ServiceError: If the API call fails
            InvalidResourceError: If an offering rate lacks its instance type
        """
        try:
            offering_rates = self._follow_next_token(
                'describe_savings_plans_offering_rates',
                'searchResults',
                savingsPlanPaymentOptions=[PAYMENT_OPTION],
                savingsPlanTypes=['Compute'],
                products=['EC2'],
                filters=[
                    {'name': 'tenancy', 'values': [TENANCY]},
                    {'name': 'region', 'values': [self.region]},
                    {'name': 'productDescription', 'values': [PRODUCT_DESCRIPTION]},
                ],
            )
        except (ClientError, BotoCoreError) as e:
            self._handle_aws_error(e, 'describe_savings_plans_offering_rates')

        offering_map = {}
        for offering_rate in offering_rates:
            if (offering_rate.get('savingsPlanOffering') or {}).get('durationSeconds') != ONE_YEAR_SECONDS:
                continue

            offering = self._to_offering(offering_rate)
            offering_map[offering.instance_type] = offering

        logger.info(f"Loaded Savings Plans offerings for {len(offering_map)} instance types in {self.region}")
        return offering_map

    def load_active_compute_savings_plans(self) -> List[SavingsPlan]:
        """Load active Compute Savings Plans.

        Raises:
            ServiceError: If the API call fails
            InvalidResourceError: If a plan lacks its id, commitment or end
        """
        try:
            sdk_plans = self._follow_next_token('describe_savings_plans', 'savingsPlans', states=['active'])
        except (ClientError, BotoCoreError) as e:
            self._handle_aws_error(e, 'describe_savings_plans')

        plans = [
            self._to_savings_plan(sdk_plan)
            for sdk_plan in sdk_plans
            if sdk_plan.get('savingsPlanType') == 'Compute'
        ]

        logger.info(f"Loaded {len(plans)} active Compute Savings Plans")
        return plans

    def _to_offering(self, offering_rate: Dict[str, Any]) -> SavingsPlanOffering:
        instance_type = None
        for prop in offering_rate.get('properties') or []:
            if prop.get('name') == 'instanceType':
                instance_type = prop.get('value')
                break

        if not instance_type:
            raise InvalidResourceError(f"Invalid Savings Plans Offering: {offering_rate}")

        return SavingsPlanOffering(
            instance_type=instance_type,
            rate=_to_decimal(offering_rate.get('rate'), f"rate of {instance_type}"),
        )

    def _to_savings_plan(self, sdk_plan: Dict[str, Any]) -> SavingsPlan:
        plan_id = sdk_plan.get('savingsPlanId')
        if not plan_id:
            raise InvalidResourceError("SavingsPlan should have a savingsPlanId")
        if not sdk_plan.get('commitment'):
            raise InvalidResourceError(f"SavingsPlan should have a commitment: {plan_id}")
        if not sdk_plan.get('end'):
            raise InvalidResourceError(f"SavingsPlan should have an end: {plan_id}")

        return SavingsPlan(
            id=plan_id,
            commitment=_to_decimal(sdk_plan['commitment'], f"commitment of {plan_id}"),
            end=sdk_plan['end'],
        )


def _to_decimal(value: Any, label: str) -> Decimal:
    try:
        return Decimal(str(value))
    except (InvalidOperation, TypeError):
        raise InvalidResourceError(f"Invalid amount for {label}: {value!r}")
