"""
Authenticated IBM Cloud SDK clients.

A ProviderSession owns the clients used by every resource and data source
handler. Clients are built lazily from CloudSettings so a session for a
read-only data source never constructs the tagging client, and tests can
hand in mocks directly.
"""

import logging
from typing import Any, List, Optional

from ibm_cloud_sdk_core import ApiException
from ibm_cloud_sdk_core.authenticators import IAMAuthenticator
from ibm_code_engine_sdk.code_engine_v2 import CodeEngineV2
from ibm_platform_services import GlobalTaggingV1
from ibm_vpc import VpcV1

from .config.settings import CloudSettings
from .errors import ClientInitializationError


def is_not_found(error: Exception) -> bool:
    """Check whether an SDK exception means the remote object is absent."""
    return isinstance(error, ApiException) and error.code == 404


class ProviderSession:
    """Configured SDK clients plus the account-wide values operations need."""

    def __init__(
        self,
        settings: CloudSettings,
        vpc: Optional[Any] = None,
        code_engine: Optional[Any] = None,
        tagging: Optional[Any] = None,
    ):
        self.settings = settings
        self.logger = logging.getLogger(self.__class__.__name__)
        self._authenticator: Optional[IAMAuthenticator] = None
        self._vpc = vpc
        self._code_engine = code_engine
        self._tagging = tagging

    @property
    def env_tags(self) -> List[str]:
        """Tags applied to every taggable resource in this session."""
        return self.settings.env_tags

    @property
    def console_url(self) -> str:
        return self.settings.console_url.rstrip("/")

    @property
    def region(self) -> str:
        return self.settings.region

    def _get_authenticator(self) -> IAMAuthenticator:
        if self._authenticator is None:
            if not self.settings.api_key:
                raise ClientInitializationError(
                    "IBM Cloud API key not found. Set IC_API_KEY or IBMCLOUD_API_KEY",
                    step="authenticate",
                )
            try:
                self._authenticator = IAMAuthenticator(
                    self.settings.api_key, url=self.settings.iam_url
                )
            except ValueError as e:
                raise ClientInitializationError(
                    f"Invalid IAM configuration: {e}", step="authenticate"
                )
        return self._authenticator

    def vpc_client(self) -> VpcV1:
        """Get the VPC infrastructure client."""
        if self._vpc is None:
            try:
                client = VpcV1(authenticator=self._get_authenticator())
                client.set_service_url(self.settings.resolved_vpc_endpoint)
            except ClientInitializationError:
                raise
            except Exception as e:
                raise ClientInitializationError(
                    f"Failed to create VPC client: {e}", step="vpc_client"
                )
            self.logger.debug(
                "Created VPC client",
                extra={"service_url": self.settings.resolved_vpc_endpoint},
            )
            self._vpc = client
        return self._vpc

    def code_engine_client(self) -> CodeEngineV2:
        """Get the Code Engine client."""
        if self._code_engine is None:
            try:
                client = CodeEngineV2(authenticator=self._get_authenticator())
                client.set_service_url(self.settings.resolved_code_engine_endpoint)
            except ClientInitializationError:
                raise
            except Exception as e:
                raise ClientInitializationError(
                    f"Failed to create Code Engine client: {e}",
                    step="code_engine_client",
                )
            self._code_engine = client
        return self._code_engine

    def tagging_client(self) -> GlobalTaggingV1:
        """Get the global tagging client."""
        if self._tagging is None:
            try:
                client = GlobalTaggingV1(authenticator=self._get_authenticator())
                client.set_service_url(self.settings.tagging_endpoint)
            except ClientInitializationError:
                raise
            except Exception as e:
                raise ClientInitializationError(
                    f"Failed to create global tagging client: {e}",
                    step="tagging_client",
                )
            self._tagging = client
        return self._tagging
