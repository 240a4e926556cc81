"""
HubSpot API Client
Thin wrapper around requests.Session for the HubSpot REST API.

Every call is authenticated with a private-app bearer token. Non-2xx
responses are raised as HubSpotAPIError carrying the upstream message
and status code, so callers decide whether a failure is fatal.
"""
import logging
from typing import Dict, Any, Optional, List

import requests

from ..errors import HubSpotAPIError

logger = logging.getLogger(__name__)

BASE_URL = 'https://api.hubapi.com'
PAGE_LIMIT = 100


def extract_error_message(body: Any, fallback: str) -> str:
    """
    Pull the most useful message out of a HubSpot error body.

    HubSpot returns either {"message": ...} or {"errors": [{"message": ...}]}.

    Args:
        body: Decoded JSON error body (or anything else)
        fallback: Message to use when the body carries none

    Returns:
        Error message
    """
    if isinstance(body, dict):
        if body.get('message'):
            return str(body['message'])
        errors = body.get('errors')
        if isinstance(errors, list) and errors:
            first = errors[0]
            if isinstance(first, dict) and first.get('message'):
                return str(first['message'])
    return fallback or 'Unknown error'


class HubSpotAPIClient:
    """
    Client for the HubSpot REST API.

    Usage:
        client = HubSpotAPIClient(token)
        props = client.get('/crm/v3/properties/contacts')
        flows = client.paginated_get('/automation/v4/flows')
    """

    def __init__(self, token: str, base_url: str = BASE_URL,
                 timeout: float = 30.0,
                 session: Optional[requests.Session] = None):
        self.token = (token or '').strip()
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            'Authorization': f'Bearer {self.token}',
            'Content-Type': 'application/json',
            'Accept': 'application/json',
        })

        if not self.token:
            logger.warning("HubSpot token is empty, every request will fail")

        logger.debug(f"Initialized HubSpot API client for {self.base_url}")

    def _url(self, endpoint: str) -> str:
        if endpoint.startswith('http'):
            return endpoint
        return f"{self.base_url}/{endpoint.lstrip('/')}"

    def request(self, method: str, endpoint: str,
                params: Optional[Dict[str, Any]] = None,
                json_data: Optional[Any] = None) -> Any:
        """
        Make a request and decode the JSON body.

        Args:
            method: HTTP method
            endpoint: Path under the base URL (or a full URL)
            params: Query string parameters
            json_data: JSON request body

        Returns:
            Decoded JSON body, or None for empty responses (e.g. 204)

        Raises:
            HubSpotAPIError: on transport failure or a non-2xx response
        """
        url = self._url(endpoint)
        logger.debug(f"{method} {url} params={params}")

        try:
            response = self.session.request(
                method, url, params=params, json=json_data, timeout=self.timeout
            )
        except requests.RequestException as e:
            raise HubSpotAPIError(str(e) or 'Network error', status_code=500) from e

        logger.debug(f"Status: {response.status_code}")

        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = None
            fallback = f"Request failed with status code {response.status_code}"
            raise HubSpotAPIError(
                extract_error_message(body, fallback),
                status_code=response.status_code,
            )

        if response.status_code == 204 or not response.content:
            return None

        try:
            return response.json()
        except ValueError as e:
            raise HubSpotAPIError(
                f"Invalid JSON from {endpoint}", status_code=response.status_code
            ) from e

    def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.request('GET', endpoint, params=params)

    def post(self, endpoint: str, json_data: Optional[Any] = None,
             params: Optional[Dict[str, Any]] = None) -> Any:
        return self.request('POST', endpoint, params=params, json_data=json_data)

    def delete(self, endpoint: str) -> Any:
        return self.request('DELETE', endpoint)

    def paginated_get(self, endpoint: str, results_key: str = 'results',
                      params: Optional[Dict[str, Any]] = None) -> List[Any]:
        """
        Drain a cursor-paginated list endpoint.

        Requests pages of PAGE_LIMIT items, following paging.next.after
        until the response carries no further cursor. Pages are fetched
        strictly one after another since each cursor comes from the
        previous response.

        Args:
            endpoint: List endpoint
            results_key: Response key holding the item array
            params: Extra static query parameters sent with every page

        Returns:
            All items, in the order the API returned them

        Raises:
            HubSpotAPIError: if any page fails (no partial result)
        """
        items = []
        after = None
        page = 0

        while True:
            page_params = dict(params or {})
            page_params['limit'] = PAGE_LIMIT
            if after:
                page_params['after'] = after

            data = self.get(endpoint, params=page_params) or {}
            page += 1

            batch = data.get(results_key) or []
            items.extend(batch)
            logger.debug(f"  {endpoint} page {page}: {len(batch)} items (total: {len(items)})")

            after = ((data.get('paging') or {}).get('next') or {}).get('after')
            if not after:
                break

        logger.info(f"Fetched {len(items)} items from {endpoint} in {page} page(s)")
        return items


def create_client_from_config(config: Dict[str, Any],
                              token: Optional[str] = None) -> HubSpotAPIClient:
    """Create a HubSpotAPIClient from a loaded configuration dictionary."""
    hubspot = config.get('hubspot', {}) or {}

    return HubSpotAPIClient(
        token=token or hubspot.get('token', ''),
        base_url=hubspot.get('base_url', BASE_URL),
        timeout=float(hubspot.get('timeout', 30)),
    )
