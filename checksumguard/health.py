# -*- coding: utf-8 -*-
"""
RU: Health check ядра дайджестов - known-answer тест каждого алгоритма при старте.
EN: Digest core health check - known-answer test for every algorithm at startup.
"""
from __future__ import annotations

import logging
from typing import Final, Mapping, Optional

from checksumguard.core.exceptions import ConfigurationError
from checksumguard.core.registry import AlgorithmRegistry

_LOGGER: Final = logging.getLogger(__name__)

_PROBE: Final[bytes] = b"abc"

# Known answers for b"abc" (FIPS 180-4 / FIPS 202 examples)
KNOWN_ANSWERS: Final[Mapping[str, str]] = {
    "SHA-256": "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad",
    "SHA-384": (
        "cb00753f45a35e8bb5a03d699ac65007272c32ab0eded1631a8b605a43ff5bed"
        "8086072ba1e7cc2358baeca134c825a7"
    ),
    "SHA-512": (
        "ddaf35a193617abacc417349ae20413112e6fa4e89a97ea20a9eeee64b55d39a"
        "2192992a274fc1a836ba3c23a3feebbd454d4423643ce80e2a9ac94fa54ca49f"
    ),
    "SHA-3-256": "3a985da74fe225b2045c172d6bd390bd855f086e3e9d525b46bfe24511431532",
    "SHA-3-384": (
        "ec01498288516fc926459f58e2c6ad8df9b473cb0fc08c2596da7cf0e49be4b2"
        "98d88cea927ac7f539f1edf228376d25"
    ),
    "SHA-3-512": (
        "b751850b1a57168a5693cd924b6b096e08f621827444f70d884f5d0240d2712e"
        "10e116e9192af3c91a7ec57647e3934057340b4cf408d5a56592f8274eec53f0"
    ),
}


def digest_health_check(registry: Optional[AlgorithmRegistry] = None) -> dict[str, bool]:
    """
    Verify every whitelisted algorithm against its known answer.

    Algorithms without a known answer only have their output size checked.

    Returns:
        Dictionary mapping canonical algorithm names to health status.

    Examples:
        >>> results = digest_health_check()
        >>> assert all(results.values()), "Digest core unhealthy!"
    """
    registry = registry or AlgorithmRegistry.get_default()
    results: dict[str, bool] = {}

    for descriptor in registry.list_secure_algorithms():
        results[descriptor.name] = _check_algorithm(registry, descriptor.name)

    failed = [k for k, v in results.items() if not v]
    if failed:
        _LOGGER.error("Digest health check FAILED for: %s", ", ".join(failed))
    else:
        _LOGGER.info("Digest health check PASSED (%d algorithms)", len(results))

    return results


def _check_algorithm(registry: AlgorithmRegistry, name: str) -> bool:
    try:
        digest = registry.compute(name, _PROBE)
    except Exception as e:
        _LOGGER.warning("%s self-test failed: %s", name, e.__class__.__name__)
        return False

    expected = KNOWN_ANSWERS.get(name)
    if expected is None:
        return len(digest) == registry.resolve(name).digest_size
    return digest.hex() == expected


def ensure_healthy(registry: Optional[AlgorithmRegistry] = None) -> None:
    """
    Run the health check and fail startup on any failure.

    Raises:
        ConfigurationError: if any whitelisted algorithm fails its self-test.
    """
    results = digest_health_check(registry)
    failed = sorted(name for name, ok in results.items() if not ok)
    if failed:
        raise ConfigurationError(
            f"Digest self-test failed for: {', '.join(failed)}",
            setting="algorithms",
        )


__all__ = ["digest_health_check", "ensure_healthy", "KNOWN_ANSWERS"]
