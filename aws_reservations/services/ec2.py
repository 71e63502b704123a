"""
EC2 collector for running instances outside Auto Scaling groups.
"""
from typing import Any, Dict, List
import logging

from botocore.exceptions import BotoCoreError, ClientError

from .base import BaseCollector
from .models import EC2Instance
from ..core.exceptions import InvalidResourceError
from ..core.purchase_method import classify_ec2_purchase_method, tags_from_list


logger = logging.getLogger(__name__)

ASG_NAME_TAG = 'aws:autoscaling:groupName'


class EC2Collector(BaseCollector):
    """Collector for EC2 instances."""

    @property
    def service_name(self) -> str:
        return 'ec2'

    def load_instances(self) -> List[EC2Instance]:
        """Load running EC2 instances that no Auto Scaling group manages.

        Instances launched by an ASG are covered by the group's ``min_size``
        and are skipped here.

        Returns:
            Instances sorted by their ``Name`` tag

        Raises:
            ServiceError: If the API call fails
            InvalidResourceError: If an instance lacks an ID or instance type
            UnknownPurchaseMethodError: If a purchase method tag is invalid
        """
        try:
            reservations = list(self._paginate('describe_instances', 'Reservations'))
        except (ClientError, BotoCoreError) as e:
            self._handle_aws_error(e, 'describe_instances')

        instances = []
        for reservation in reservations:
            for sdk_instance in reservation.get('Instances', []):
                instance = self._to_instance(sdk_instance)
                if instance.is_running and not instance.auto_scaling_group_name:
                    instances.append(instance)

        logger.info(f"Loaded {len(instances)} standalone EC2 instances in {self.region}")
        return sorted(instances, key=lambda i: i.name)

    def _to_instance(self, sdk_instance: Dict[str, Any]) -> EC2Instance:
        if not sdk_instance.get('InstanceId'):
            raise InvalidResourceError(f"InstanceID is not set: {sdk_instance}")
        if not sdk_instance.get('InstanceType'):
            raise InvalidResourceError(f"InstanceType is not set: {sdk_instance['InstanceId']}")

        tags = tags_from_list(sdk_instance.get('Tags'))

        return EC2Instance(
            id=sdk_instance['InstanceId'],
            name=tags.get('Name', ''),
            instance_type=sdk_instance['InstanceType'],
            is_running=sdk_instance.get('State', {}).get('Name') == 'running',
            purchase_method=classify_ec2_purchase_method(tags),
            auto_scaling_group_name=tags.get(ASG_NAME_TAG),
        )
