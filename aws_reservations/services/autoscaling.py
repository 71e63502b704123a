"""
Auto Scaling Groups collector.
"""
from typing import Any, Dict, List
import logging

from botocore.exceptions import BotoCoreError, ClientError

from .base import BaseCollector
from .models import AutoScalingGroup
from ..core.exceptions import InvalidResourceError
from ..core.purchase_method import classify_ec2_purchase_method, tags_from_list


logger = logging.getLogger(__name__)

EKS_NODEGROUP_TAG = 'eks:nodegroup-name'


class AutoScalingCollector(BaseCollector):
    """Collector for Auto Scaling Groups not owned by EKS managed node groups."""

    def __init__(self, session, region: str):
        super().__init__(session, region)
        self._ec2_client = None

    @property
    def service_name(self) -> str:
        return 'autoscaling'

    @property
    def ec2_client(self):
        """Lazy-loaded EC2 client for launch template lookups."""
        if self._ec2_client is None:
            self._ec2_client = self.session.client('ec2', region_name=self.region)
        return self._ec2_client

    def prepare(self) -> None:
        super().prepare()
        self.ec2_client

    def load_auto_scaling_groups(self) -> List[AutoScalingGroup]:
        """Load Auto Scaling Groups with their resolved instance types.

        Groups tagged ``eks:nodegroup-name`` are skipped; they are reported
        through the EKS collector.

        Raises:
            ServiceError: If an API call fails
            InvalidResourceError: If a group's name, size or instance type is missing
        """
        try:
            sdk_groups = list(self._paginate('describe_auto_scaling_groups', 'AutoScalingGroups'))

            groups = []
            for sdk_group in sdk_groups:
                tags = tags_from_list(sdk_group.get('Tags'))
                if tags.get(EKS_NODEGROUP_TAG):
                    continue
                groups.append(self._to_auto_scaling_group(sdk_group, tags))

        except (ClientError, BotoCoreError) as e:
            self._handle_aws_error(e, 'discovery')

        logger.info(f"Loaded {len(groups)} Auto Scaling Groups in {self.region}")
        return groups

    def _to_auto_scaling_group(self, sdk_group: Dict[str, Any], tags: Dict[str, str]) -> AutoScalingGroup:
        arn = sdk_group.get('AutoScalingGroupARN')
        if not sdk_group.get('AutoScalingGroupName'):
            raise InvalidResourceError(f"AutoScalingGroup should have AutoScalingGroupName: {arn}")
        if not isinstance(sdk_group.get('MinSize'), int):
            raise InvalidResourceError(f"AutoScalingGroup should have MinSize as a number: {arn}")

        return AutoScalingGroup(
            name=sdk_group['AutoScalingGroupName'],
            min_size=sdk_group['MinSize'],
            instance_type=self._get_instance_type(sdk_group),
            purchase_method=classify_ec2_purchase_method(tags),
        )

    def _get_instance_type(self, sdk_group: Dict[str, Any]) -> str:
        name = sdk_group['AutoScalingGroupName']

        if sdk_group.get('LaunchTemplate'):
            return self._get_instance_type_from_launch_template(name, sdk_group['LaunchTemplate'])
        if sdk_group.get('LaunchConfigurationName'):
            return self._get_instance_type_from_launch_configuration(name, sdk_group['LaunchConfigurationName'])

        raise InvalidResourceError(
            f"Either LaunchTemplate or LaunchConfigurationName is required: {name}"
        )

    def _get_instance_type_from_launch_template(self, name: str, specification: Dict[str, Any]) -> str:
        if not specification.get('Version'):
            raise InvalidResourceError(f"Invalid launch template: Version is missing: {name}")

        if specification.get('LaunchTemplateId'):
            template = {'LaunchTemplateId': specification['LaunchTemplateId']}
        elif specification.get('LaunchTemplateName'):
            template = {'LaunchTemplateName': specification['LaunchTemplateName']}
        else:
            raise InvalidResourceError(f"Invalid launch template: LaunchTemplateId is missing: {name}")

        response = self.ec2_client.describe_launch_template_versions(
            Versions=[specification['Version']], **template
        )
        versions = response.get('LaunchTemplateVersions', [])
        if len(versions) != 1:
            raise InvalidResourceError(
                f"Number of Launch Template Versions should be 1, but got {len(versions)}: {name}"
            )

        instance_type = versions[0].get('LaunchTemplateData', {}).get('InstanceType')
        if not instance_type:
            raise InvalidResourceError(f"InstanceType is missing in Launch Template: {name}")

        return instance_type

    def _get_instance_type_from_launch_configuration(self, name: str, configuration_name: str) -> str:
        response = self.client.describe_launch_configurations(
            LaunchConfigurationNames=[configuration_name]
        )
        configurations = response.get('LaunchConfigurations', [])
        if len(configurations) != 1:
            raise InvalidResourceError(
                f"Number of Launch Configurations should be 1, but got {len(configurations)}: {name}"
            )

        instance_type = configurations[0].get('InstanceType')
        if not instance_type:
            raise InvalidResourceError(f"InstanceType is not set in LaunchConfiguration: {configuration_name}")

        return instance_type
