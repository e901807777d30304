"""HTTP side of specdrive: URL resolution and request dispatch.

Classes:
    :class:`URLResolver` -- region, host/endpoint override and path
    composition for a resource.
    :class:`ProviderClient` -- create/get/update/delete over :mod:`httpx`
    with per-call authentication.

Example::

    from specdrive.client import ProviderClient

    with ProviderClient(description, config) as client:
        resp = client.get(description.get_resource("cdns_v1"), "42")
"""

from specdrive.client.dispatcher import ApiResponse, ProviderClient, build_user_agent
from specdrive.client.response import check_response, extract_response_data
from specdrive.client.url import URLResolver

__all__ = [
    "ApiResponse",
    "ProviderClient",
    "URLResolver",
    "build_user_agent",
    "check_response",
    "extract_response_data",
]
