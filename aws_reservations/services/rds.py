"""
RDS collector for DB instances and reserved DB instances.
"""
from typing import Any, Dict, List
import logging

from botocore.exceptions import BotoCoreError, ClientError

from .base import BaseCollector
from .models import DBInstance, ReservedDBInstance
from ..calculation.group_key import get_group_key_from_reserved_db_instance
from ..core.exceptions import InvalidResourceError
from ..core.purchase_method import classify_rds_purchase_method, tags_from_list


logger = logging.getLogger(__name__)


class RDSCollector(BaseCollector):
    """Collector for RDS DB instances and their reservations."""

    @property
    def service_name(self) -> str:
        return 'rds'

    def load_db_instances(self) -> List[DBInstance]:
        """Load all RDS DB instances with their purchase methods.

        Raises:
            ServiceError: If an API call fails
            InvalidResourceError: If an instance lacks a required field
            UnknownPurchaseMethodError: If a purchase method tag is invalid
        """
        try:
            instances = [
                self._to_db_instance(sdk_instance)
                for sdk_instance in self._paginate('describe_db_instances', 'DBInstances')
            ]
        except (ClientError, BotoCoreError) as e:
            self._handle_aws_error(e, 'describe_db_instances')

        logger.info(f"Loaded {len(instances)} RDS DB instances in {self.region}")
        return instances

    def load_active_reserved_db_instances(self) -> List[ReservedDBInstance]:
        """Load reserved DB instances in the ``active`` state.

        Raises:
            ServiceError: If the API call fails
            InvalidResourceError: If a reservation lacks a required field
        """
        try:
            sdk_reserved = list(self._paginate('describe_reserved_db_instances', 'ReservedDBInstances'))
        except (ClientError, BotoCoreError) as e:
            self._handle_aws_error(e, 'describe_reserved_db_instances')

        reserved = [
            self._to_reserved_db_instance(item)
            for item in sdk_reserved
            if item.get('State') == 'active'
        ]

        logger.info(f"Loaded {len(reserved)} active reserved DB instances in {self.region}")
        return reserved

    def _get_tags(self, sdk_instance: Dict[str, Any]) -> Dict[str, str]:
        if 'TagList' in sdk_instance:
            return tags_from_list(sdk_instance['TagList'])

        response = self.client.list_tags_for_resource(ResourceName=sdk_instance['DBInstanceArn'])
        return tags_from_list(response.get('TagList'))

    def _to_db_instance(self, sdk_instance: Dict[str, Any]) -> DBInstance:
        identifier = sdk_instance.get('DBInstanceIdentifier')
        if not identifier:
            raise InvalidResourceError(f"DBInstanceIdentifier is not set: {sdk_instance.get('DBInstanceArn')}")
        for field in ('DBInstanceClass', 'Engine'):
            if not sdk_instance.get(field):
                raise InvalidResourceError(f"{field} is not set: {identifier}")

        return DBInstance(
            instance_identifier=identifier,
            instance_class=sdk_instance['DBInstanceClass'],
            engine=sdk_instance['Engine'],
            multi_az=bool(sdk_instance.get('MultiAZ', False)),
            purchase_method=classify_rds_purchase_method(self._get_tags(sdk_instance)),
        )

    def _to_reserved_db_instance(self, sdk_reserved: Dict[str, Any]) -> ReservedDBInstance:
        lease_id = sdk_reserved.get('LeaseId') or sdk_reserved.get('ReservedDBInstanceId')
        if not lease_id:
            raise InvalidResourceError(f"Reserved DB instance should have a LeaseId: {sdk_reserved}")
        for field in ('DBInstanceClass', 'ProductDescription', 'DBInstanceCount'):
            if sdk_reserved.get(field) in (None, ''):
                raise InvalidResourceError(f"{field} is not set: {lease_id}")

        multi_az = bool(sdk_reserved.get('MultiAZ', False))

        return ReservedDBInstance(
            lease_id=lease_id,
            group_key=get_group_key_from_reserved_db_instance(
                sdk_reserved['DBInstanceClass'], sdk_reserved['ProductDescription'], multi_az
            ),
            instance_class=sdk_reserved['DBInstanceClass'],
            instance_count=sdk_reserved['DBInstanceCount'],
            multi_az=multi_az,
            product_description=sdk_reserved['ProductDescription'],
        )
