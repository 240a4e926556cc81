"""
Exceptions raised across the HubSpot property tool.
"""
from typing import List


class HubSpotToolError(Exception):
    """Base class for all tool errors"""


class ConfigError(HubSpotToolError):
    """Missing or invalid configuration"""


class HubSpotAPIError(HubSpotToolError):
    """
    A HubSpot API call failed.

    The message is the upstream message when HubSpot supplied one,
    otherwise the transport error. status_code is the upstream status
    or 500 when there was no response at all.
    """

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class CSVValidationError(HubSpotToolError):
    """The property CSV was rejected. errors holds one message per problem."""

    def __init__(self, errors: List[str]):
        super().__init__('; '.join(errors))
        self.errors = list(errors)


class PropertyError(HubSpotToolError):
    """A property operation was refused locally (e.g. deleting a system property)"""
