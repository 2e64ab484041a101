"""
Factory module for creating the host resolver from command-line options.
"""

import json
import logging
from typing import Dict, Iterable, Optional

from repeater.errors import BadConfigError, IoFailureError
from repeater.systems.base import HostResolver
from repeater.systems.mapping import MappingHostResolver
from repeater.systems.uniform import UniformHostResolver

logger = logging.getLogger(__name__)


def create_host_resolver(
    scheme_and_host: Optional[str] = None,
    mapping_file: Optional[str] = None,
    hosts_to_ignore: Optional[Iterable[str]] = None,
) -> HostResolver:
    """Create the host resolver for exactly one of the two modes.

    Args:
        scheme_and_host: Single ``scheme://host`` for uniform mode
        mapping_file: Path of a JSON object mapping domains to ``scheme://host``
        hosts_to_ignore: Recorded domains whose records are dropped

    Returns:
        UniformHostResolver or MappingHostResolver

    Raises:
        BadConfigError: If neither or both modes are given, or the mapping is malformed
        IoFailureError: If the mapping file cannot be read
    """
    if scheme_and_host is not None and mapping_file is not None:
        raise BadConfigError(
            "Use either --scheme-and-host or --scheme-and-host-mapping-file, not both"
        )

    if scheme_and_host is not None:
        if not scheme_and_host:
            raise BadConfigError("--scheme-and-host must not be empty")
        return UniformHostResolver(scheme_and_host, hosts_to_ignore)

    if mapping_file is not None:
        return MappingHostResolver(load_host_mapping(mapping_file), hosts_to_ignore)

    raise BadConfigError(
        "One of --scheme-and-host or --scheme-and-host-mapping-file is required"
    )


def load_host_mapping(path: str) -> Dict[str, str]:
    """Load a domain to ``scheme://host`` mapping from a JSON file."""
    try:
        with open(path, encoding="utf-8") as handle:
            mapping = json.load(handle)
    except OSError as e:
        raise IoFailureError(f"Cannot read host mapping {path}: {e}") from e
    except ValueError as e:
        raise BadConfigError(f"Host mapping {path} is not valid JSON: {e}") from e

    if not isinstance(mapping, dict):
        raise BadConfigError(f"Host mapping {path} must be a JSON object")

    for domain_name, scheme_and_host in mapping.items():
        if not isinstance(scheme_and_host, str):
            raise BadConfigError(
                f"Host mapping {path}: value for {domain_name!r} must be a string"
            )
        if scheme_and_host.endswith("/"):
            logger.warning(
                f"Host mapping for {domain_name} ends with '/', URLs will contain a double slash"
            )

    logger.info(f"Loaded {len(mapping)} host mappings from {path}")
    return mapping
