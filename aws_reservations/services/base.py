"""
Base collector interface for AWS services.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterator, List
import boto3

from ..core.exceptions import ServiceError


class BaseCollector(ABC):
    """Abstract base class for all AWS inventory collectors."""

    def __init__(self, session: boto3.Session, region: str):
        """Initialize the collector with AWS session and region.

        Args:
            session: Authenticated boto3 session
            region: AWS region to inventory
        """
        self.session = session
        self.region = region
        self._client = None

    @property
    def client(self):
        """Lazy-loaded AWS service client."""
        if self._client is None:
            self._client = self.session.client(self.service_name, region_name=self.client_region)
        return self._client

    def prepare(self) -> None:
        """Create clients up front. boto3 sessions are not thread safe."""
        self.client

    @property
    @abstractmethod
    def service_name(self) -> str:
        """AWS service name (e.g., 'ec2', 'rds', 'eks')."""
        pass

    @property
    def client_region(self) -> str:
        """Region of the API endpoint. Defaults to the inventoried region."""
        return self.region

    def _paginate(self, operation: str, result_key: str, **kwargs: Any) -> Iterator[Dict[str, Any]]:
        """Yield every item of ``result_key`` across all pages of ``operation``."""
        paginator = self.client.get_paginator(operation)
        for page in paginator.paginate(**kwargs):
            yield from page.get(result_key, [])

    def _follow_next_token(self, operation: str, result_key: str, **kwargs: Any) -> List[Dict[str, Any]]:
        """Collect items from an operation paginated by ``nextToken`` only."""
        method = getattr(self.client, operation)
        items = []
        next_token = None
        while True:
            token_condition = {'nextToken': next_token} if next_token else {}
            response = method(**kwargs, **token_condition)
            items.extend(response.get(result_key) or [])

            next_token = response.get('nextToken')
            if not next_token:
                return items

    def _handle_aws_error(self, error: Exception, operation: str, resource_id: str = None) -> None:
        """Handle AWS API errors and convert to ServiceError.

        Args:
            error: The original AWS error
            operation: Operation that failed
            resource_id: ID of resource being inspected (if applicable)

        Raises:
            ServiceError: Wrapped error with context
        """
        resource_context = f" for resource {resource_id}" if resource_id else ""
        error_message = f"AWS {self.service_name} {operation} failed{resource_context}: {str(error)}"
        raise ServiceError(error_message, details=str(error)) from error
