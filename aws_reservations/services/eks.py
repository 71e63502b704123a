"""
EKS collector for managed node groups.
"""
from typing import Any, Dict, List, Mapping, Optional, Tuple
import logging

from botocore.exceptions import BotoCoreError, ClientError

from .base import BaseCollector
from .models import EKSNodeGroup
from ..core.exceptions import InvalidResourceError
from ..core.purchase_method import classify_ec2_purchase_method


logger = logging.getLogger(__name__)


class EKSCollector(BaseCollector):
    """Collector for EKS managed node groups."""

    def __init__(self, session, region: str, cluster_tag_filters: Optional[Mapping[str, str]] = None):
        """Initialize the collector.

        Args:
            session: Authenticated boto3 session
            region: AWS region to inventory
            cluster_tag_filters: Tags a cluster must carry to be included.
                                 Every cluster is included when empty.
        """
        super().__init__(session, region)
        self.cluster_tag_filters = dict(cluster_tag_filters or {})
        self._ec2_client = None

    @property
    def service_name(self) -> str:
        return 'eks'

    @property
    def ec2_client(self):
        """Lazy-loaded EC2 client for launch template lookups."""
        if self._ec2_client is None:
            self._ec2_client = self.session.client('ec2', region_name=self.region)
        return self._ec2_client

    def prepare(self) -> None:
        super().prepare()
        self.ec2_client

    def load_node_groups(self) -> List[EKSNodeGroup]:
        """Load managed node groups of every selected cluster.

        Raises:
            ServiceError: If an API call fails
            InvalidResourceError: If a node group has no resolvable instance type
        """
        try:
            node_groups = []
            for cluster in self._get_selected_clusters():
                for sdk_node_group in self._get_node_groups(cluster['name']):
                    node_groups.append(self._to_node_group(cluster['name'], sdk_node_group))

        except (ClientError, BotoCoreError) as e:
            self._handle_aws_error(e, 'discovery')

        logger.info(f"Loaded {len(node_groups)} EKS node groups in {self.region}")
        return node_groups

    def _get_selected_clusters(self) -> List[Dict[str, Any]]:
        clusters = []
        for name in self._paginate('list_clusters', 'clusters'):
            cluster = self.client.describe_cluster(name=name)['cluster']
            if self._matches_filters(cluster.get('tags') or {}):
                clusters.append(cluster)
            else:
                logger.debug(f"Skipping EKS cluster {name}: tags do not match filters")
        return clusters

    def _matches_filters(self, tags: Mapping[str, str]) -> bool:
        return all(tags.get(key) == value for key, value in self.cluster_tag_filters.items())

    def _get_node_groups(self, cluster_name: str) -> List[Dict[str, Any]]:
        return [
            self.client.describe_nodegroup(clusterName=cluster_name, nodegroupName=name)['nodegroup']
            for name in self._paginate('list_nodegroups', 'nodegroups', clusterName=cluster_name)
        ]

    def _to_node_group(self, cluster_name: str, sdk_node_group: Dict[str, Any]) -> EKSNodeGroup:
        name = sdk_node_group.get('nodegroupName')
        if not name:
            raise InvalidResourceError(f"EKS nodegroup should have nodegroupName: {cluster_name}")

        min_size = (sdk_node_group.get('scalingConfig') or {}).get('minSize')
        if not isinstance(min_size, int):
            raise InvalidResourceError(f"EKS nodegroup should have minSize as a number: {cluster_name}/{name}")

        instance_types = tuple(sdk_node_group.get('instanceTypes') or ())
        if not instance_types:
            instance_types = self._get_instance_types_from_launch_template(cluster_name, sdk_node_group)

        return EKSNodeGroup(
            name=name,
            cluster_name=cluster_name,
            instance_types=instance_types,
            min_size=min_size,
            purchase_method=classify_ec2_purchase_method(sdk_node_group.get('tags') or {}),
        )

    def _get_instance_types_from_launch_template(self, cluster_name: str, sdk_node_group: Dict[str, Any]) -> Tuple[str, ...]:
        label = f"{cluster_name}/{sdk_node_group['nodegroupName']}"
        launch_template = sdk_node_group.get('launchTemplate') or {}
        if not (launch_template.get('id') and launch_template.get('version')):
            raise InvalidResourceError(f"Launch Template is not set: {label}")

        response = self.ec2_client.describe_launch_template_versions(
            LaunchTemplateId=launch_template['id'],
            Versions=[launch_template['version']],
        )

        instance_types = tuple(
            version.get('LaunchTemplateData', {}).get('InstanceType')
            for version in response.get('LaunchTemplateVersions', [])
        )
        if not instance_types or not all(instance_types):
            raise InvalidResourceError(f"InstanceType is missing in Launch Template: {label}")

        return instance_types
