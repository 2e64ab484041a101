"""
Base class for host resolution: deciding whether a recorded request is
replayed and against which ``scheme://host``.
"""

import logging
from typing import Iterable, List, Optional

from repeater.persistence.record import AccessRecord

logger = logging.getLogger(__name__)


class HostResolver:
    """Resolves recorded domains to the scheme and host to replay against.

    Records whose domain is in ``hosts_to_ignore`` are always dropped. Subclasses
    decide what happens to every other record.
    """

    mode: str = ""

    def __init__(self, hosts_to_ignore: Optional[Iterable[str]] = None):
        # Small, so membership stays a linear scan
        self.hosts_to_ignore: List[str] = list(hosts_to_ignore or [])

    def resolve(self, record: AccessRecord) -> Optional[str]:
        """Return the scheme and host for a record, or None to drop it.

        Raises:
            UnmappedDomainError: In mapping mode, if the domain has no entry
        """
        if record.domain_name is not None and record.domain_name in self.hosts_to_ignore:
            logger.debug(f"Ignoring record for {record.domain_name}: {record.path_and_parameters}")
            return None
        return self._resolve_domain(record.domain_name)

    def _resolve_domain(self, domain_name: Optional[str]) -> Optional[str]:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(mode={self.mode!r}, hosts_to_ignore={self.hosts_to_ignore!r})"
