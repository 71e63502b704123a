"""boto3 session construction with optional STS assume role."""

import boto3
from botocore.exceptions import ClientError, NoCredentialsError, BotoCoreError
from typing import Dict, Optional, Any
import logging
from datetime import datetime, timedelta

from aws_reservations.core.config import Config
from aws_reservations.core.exceptions import AuthenticationError


logger = logging.getLogger(__name__)


class SessionFactory:
    """Builds boto3 sessions for a run, assuming the configured IAM role if any."""

    def __init__(self, config: Config):
        """Initialize the session factory.

        Args:
            config: Loaded configuration. ``iam_role_arn`` is optional.
        """
        self.config = config
        self._cached_credentials: Optional[Dict[str, Any]] = None
        self._credentials_expiry: Optional[datetime] = None

    def get_aws_session(self, region: Optional[str] = None) -> boto3.Session:
        """Get an AWS session for the given region.

        Args:
            region: Optional AWS region. If None, resolves from environment/config.

        Returns:
            boto3 Session object.

        Raises:
            AuthenticationError: If role assumption fails.
        """
        session_region = self.config.resolve_region(region)

        if not self.config.iam_role_arn:
            return boto3.Session(region_name=session_region)

        credentials = self._get_credentials(self.config.iam_role_arn)

        return boto3.Session(
            aws_access_key_id=credentials['AccessKeyId'],
            aws_secret_access_key=credentials['SecretAccessKey'],
            aws_session_token=credentials['SessionToken'],
            region_name=session_region
        )

    def _get_credentials(self, role_arn: str) -> Dict[str, Any]:
        """Get AWS credentials by assuming the specified IAM role.

        Raises:
            AuthenticationError: If role assumption fails.
        """
        if self._cached_credentials and self._credentials_expiry:
            # 5 minute buffer before expiry
            if datetime.utcnow() < (self._credentials_expiry - timedelta(minutes=5)):
                logger.debug("Using cached AWS credentials")
                return self._cached_credentials

        try:
            logger.info(f"Assuming IAM role: {role_arn}")

            sts_client = boto3.client('sts')
            response = sts_client.assume_role(
                RoleArn=role_arn,
                RoleSessionName='aws-reservations-session',
                DurationSeconds=3600
            )

            credentials = response['Credentials']

            self._cached_credentials = credentials
            self._credentials_expiry = credentials['Expiration'].replace(tzinfo=None)

            logger.info("Successfully assumed IAM role")
            return credentials

        except ClientError as e:
            error_code = e.response.get('Error', {}).get('Code', 'Unknown')
            error_message = e.response.get('Error', {}).get('Message', str(e))

            if error_code == 'AccessDenied':
                raise AuthenticationError(
                    f"Access denied when assuming role {role_arn}. "
                    "Please check that the role exists and that its trust policy "
                    "allows your current credentials to assume it."
                )
            raise AuthenticationError(
                f"Failed to assume IAM role {role_arn}: {error_code} - {error_message}"
            )

        except NoCredentialsError:
            raise AuthenticationError(
                "No AWS credentials found. Please configure your AWS credentials using:\n"
                "1. AWS CLI: aws configure\n"
                "2. Environment variables: AWS_ACCESS_KEY_ID, AWS_SECRET_ACCESS_KEY\n"
                "3. AWS SSO: aws sso login"
            )

        except BotoCoreError as e:
            raise AuthenticationError(f"AWS configuration error: {e}")

    def clear_cached_credentials(self) -> None:
        """Clear any cached credentials to force fresh authentication."""
        self._cached_credentials = None
        self._credentials_expiry = None
        logger.debug("Cleared cached AWS credentials")
