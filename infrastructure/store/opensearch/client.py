# infrastructure/store/opensearch/client.py
#
# Description:
# This module owns the OpenSearch connection used by the recipe search service.
# The composition root creates one OpenSearchClient, hands it to the index
# schema manager and the index adapter, and closes it at shutdown.

import logging
from typing import Optional

from opensearchpy import OpenSearch

logger = logging.getLogger(__name__)


class OpenSearchClient:
    """Connection wrapper with explicit open/close lifecycle."""

    def __init__(
        self,
        host: str = "localhost",
        port: int = 9200,
        username: Optional[str] = None,
        password: Optional[str] = None,
        use_ssl: bool = False,
        verify_certs: bool = False,
        request_timeout: float = 30.0,
        ping_timeout: float = 3.0,
    ):
        self.host = host
        self.port = port
        self.request_timeout = request_timeout
        self.ping_timeout = ping_timeout
        self.client = OpenSearch(
            hosts=[{
                'host': host,
                'port': port
            }],
            http_auth=(username, password) if username else None,
            use_ssl=use_ssl,
            verify_certs=verify_certs,
            ssl_assert_hostname=False,
            ssl_show_warn=False,
            timeout=request_timeout,
        )
        logger.info(f"OpenSearch client configured for {host}:{port}")

    @classmethod
    def from_settings(cls, settings) -> "OpenSearchClient":
        return cls(
            host=settings.opensearch_host,
            port=settings.opensearch_port,
            username=settings.opensearch_username,
            password=settings.opensearch_password,
            use_ssl=settings.opensearch_use_ssl,
            verify_certs=settings.opensearch_verify_certs,
            request_timeout=settings.opensearch_request_timeout,
            ping_timeout=settings.opensearch_ping_timeout,
        )

    def ping(self) -> bool:
        """Connectivity probe bounded by the short ping timeout."""
        return bool(self.client.ping(request_timeout=self.ping_timeout))

    def close(self) -> None:
        self.client.close()
        logger.info("OpenSearch client closed")
