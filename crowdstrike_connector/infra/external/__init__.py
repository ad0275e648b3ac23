"""External service clients.

This module provides HTTP clients for the CrowdStrike Falcon APIs.
All clients inherit from BaseHTTPClient and provide typed interfaces.
"""

from crowdstrike_connector.infra.external.base_client import BaseHTTPClient
from crowdstrike_connector.infra.external.classifier import classify_response, vendor_errors
from crowdstrike_connector.infra.external.falcon_client import DatasourceResponse, FalconClient

__all__ = [
    "BaseHTTPClient",
    "DatasourceResponse",
    "FalconClient",
    "classify_response",
    "vendor_errors",
]
