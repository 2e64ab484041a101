"""
Uniform host resolution: every record goes to one scheme and host.
"""

import logging
from typing import Iterable, Optional

from repeater.systems.base import HostResolver

logger = logging.getLogger(__name__)


class UniformHostResolver(HostResolver):
    """Replays every record against a single scheme and host."""

    mode = "uniform"

    def __init__(self, scheme_and_host: str, hosts_to_ignore: Optional[Iterable[str]] = None):
        super().__init__(hosts_to_ignore)
        self.scheme_and_host = scheme_and_host
        logger.info(f"Replaying all requests against {scheme_and_host}")

    def _resolve_domain(self, domain_name: Optional[str]) -> Optional[str]:
        return self.scheme_and_host
