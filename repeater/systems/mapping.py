"""
Mapping host resolution: each recorded domain has its own scheme and host.
"""

import logging
from typing import Dict, Iterable, Optional

from repeater.errors import UnmappedDomainError
from repeater.systems.base import HostResolver

logger = logging.getLogger(__name__)


class MappingHostResolver(HostResolver):
    """Replays records against the scheme and host mapped to their domain.

    Records without a domain are dropped; a domain without a mapping entry is
    an error.
    """

    mode = "mapping"

    def __init__(self, mapping: Dict[str, str], hosts_to_ignore: Optional[Iterable[str]] = None):
        super().__init__(hosts_to_ignore)
        self.mapping = dict(mapping)
        logger.info(f"Replaying requests against {len(self.mapping)} mapped hosts")

    def _resolve_domain(self, domain_name: Optional[str]) -> Optional[str]:
        if domain_name is None:
            return None
        try:
            return self.mapping[domain_name]
        except KeyError:
            raise UnmappedDomainError(domain_name) from None
