"""
Примитивы дайджеста для whitelist алгоритмов.

Этот модуль содержит 6 хеш-алгоритмов:
- SHA-2: SHA-256, SHA-384, SHA-512 (NIST FIPS 180-4)
- SHA-3: SHA-3-256, SHA-3-384, SHA-3-512 (NIST FIPS 202)

Каждый алгоритм - чистая функция ``bytes -> bytes``. Математика хеширования
целиком делегирована ``cryptography.hazmat.primitives.hashes``; модуль
только связывает идентификатор алгоритма с примитивом и описанием.

Security Considerations:
    - Все алгоритмы обеспечивают collision resistance от 128 бит
    - MD5 и SHA-1 намеренно отсутствуют (см. DEPRECATED_ALGORITHMS
      в checksumguard.core.registry)

Example:
    >>> from checksumguard.algorithms.hashing import sha256, bytes_to_hex
    >>> bytes_to_hex(sha256(b"abc"))[:16]
    'ba7816bf8f01cfea'

References:
    - FIPS 180-4: Secure Hash Standard (SHA-2)
    - FIPS 202: SHA-3 Standard
"""

from __future__ import annotations

from typing import Callable, Dict, Final, Tuple

from cryptography.hazmat.primitives import hashes

from checksumguard.core.metadata import (
    AlgorithmDescriptor,
    HashAlgorithm,
    PerformanceClass,
)

DigestFunction = Callable[[bytes], bytes]

# ==============================================================================
# CONSTANTS
# ==============================================================================

# Output sizes (in bytes)
SHA256_OUTPUT_SIZE: Final[int] = 32
SHA384_OUTPUT_SIZE: Final[int] = 48
SHA512_OUTPUT_SIZE: Final[int] = 64
SHA3_256_OUTPUT_SIZE: Final[int] = 32
SHA3_384_OUTPUT_SIZE: Final[int] = 48
SHA3_512_OUTPUT_SIZE: Final[int] = 64


# ==============================================================================
# HEX ENCODING
# ==============================================================================


def bytes_to_hex(data: bytes) -> str:
    """
    Кодировать байты в lowercase hex (два символа на байт).

    Args:
        data: Произвольные байты (в том числе пустые)

    Returns:
        Hex-строка длины ``2 * len(data)``; для пустых байт - ""

    Raises:
        TypeError: Если data не bytes/bytearray

    Example:
        >>> bytes_to_hex(b"\\x00\\xff")
        '00ff'
    """
    if not isinstance(data, (bytes, bytearray)):
        raise TypeError(f"data must be bytes, got {type(data).__name__}")
    return bytes(data).hex()


# ==============================================================================
# PRIMITIVES
# ==============================================================================


def _digest(algorithm: hashes.HashAlgorithm, data: bytes) -> bytes:
    if not isinstance(data, bytes):
        raise TypeError(f"data must be bytes, got {type(data).__name__}")

    hasher = hashes.Hash(algorithm)
    hasher.update(data)
    return hasher.finalize()


def sha256(data: bytes) -> bytes:
    """SHA-256 (FIPS 180-4), 32 байта."""
    return _digest(hashes.SHA256(), data)


def sha384(data: bytes) -> bytes:
    """SHA-384 (FIPS 180-4), 48 байт. Truncated версия SHA-512."""
    return _digest(hashes.SHA384(), data)


def sha512(data: bytes) -> bytes:
    """SHA-512 (FIPS 180-4), 64 байта."""
    return _digest(hashes.SHA512(), data)


def sha3_256(data: bytes) -> bytes:
    """SHA3-256 (FIPS 202, Keccak sponge), 32 байта."""
    return _digest(hashes.SHA3_256(), data)


def sha3_384(data: bytes) -> bytes:
    return _digest(hashes.SHA3_384(), data)


def sha3_512(data: bytes) -> bytes:
    return _digest(hashes.SHA3_512(), data)


# ==============================================================================
# DESCRIPTORS
# ==============================================================================

DESCRIPTOR_SHA256 = AlgorithmDescriptor(
    name=HashAlgorithm.SHA_256.value,
    secure=True,
    performance_class=PerformanceClass.FAST,
    description=(
        "SHA-256: NIST-approved algorithm with excellent security-to-performance "
        "ratio. Recommended for general use with 256-bit output and collision "
        "resistance."
    ),
    digest_size=SHA256_OUTPUT_SIZE,
    aliases=frozenset({"SHA256", "SHA_256"}),
)

DESCRIPTOR_SHA384 = AlgorithmDescriptor(
    name=HashAlgorithm.SHA_384.value,
    secure=True,
    performance_class=PerformanceClass.MEDIUM,
    description=(
        "SHA-384: Truncated SHA-512 variant with 384-bit output. "
        "Suitable where more than 128-bit collision resistance is required."
    ),
    digest_size=SHA384_OUTPUT_SIZE,
    aliases=frozenset({"SHA384", "SHA_384"}),
)

DESCRIPTOR_SHA512 = AlgorithmDescriptor(
    name=HashAlgorithm.SHA_512.value,
    secure=True,
    performance_class=PerformanceClass.MEDIUM,
    description=(
        "SHA-512: High-security algorithm with 512-bit output and enhanced "
        "security margin. Ideal for applications requiring maximum security "
        "with good performance on 64-bit systems."
    ),
    digest_size=SHA512_OUTPUT_SIZE,
    aliases=frozenset({"SHA512", "SHA_512"}),
)

DESCRIPTOR_SHA3_256 = AlgorithmDescriptor(
    name=HashAlgorithm.SHA3_256.value,
    secure=True,
    performance_class=PerformanceClass.MEDIUM,
    description=(
        "SHA-3-256: Latest NIST standard built on the Keccak sponge "
        "construction. 256-bit output, resistant to length-extension attacks."
    ),
    digest_size=SHA3_256_OUTPUT_SIZE,
    aliases=frozenset({"SHA3-256", "SHA3_256"}),
)

DESCRIPTOR_SHA3_384 = AlgorithmDescriptor(
    name=HashAlgorithm.SHA3_384.value,
    secure=True,
    performance_class=PerformanceClass.SLOW,
    description=(
        "SHA-3-384: Keccak-based NIST standard with 384-bit output. "
        "Design diversity alternative to SHA-384."
    ),
    digest_size=SHA3_384_OUTPUT_SIZE,
    aliases=frozenset({"SHA3-384", "SHA3_384"}),
)

DESCRIPTOR_SHA3_512 = AlgorithmDescriptor(
    name=HashAlgorithm.SHA3_512.value,
    secure=True,
    performance_class=PerformanceClass.SLOW,
    description=(
        "SHA-3-512: Maximum security member of the SHA-3 family with "
        "512-bit output."
    ),
    digest_size=SHA3_512_OUTPUT_SIZE,
    aliases=frozenset({"SHA3-512", "SHA3_512"}),
)


# ==============================================================================
# WHITELIST TABLE
# ==============================================================================

# Порядок таблицы определяет порядок list_secure_algorithms()
HASH_ALGORITHMS: Final[Dict[HashAlgorithm, Tuple[DigestFunction, AlgorithmDescriptor]]] = {
    HashAlgorithm.SHA_256: (sha256, DESCRIPTOR_SHA256),
    HashAlgorithm.SHA_384: (sha384, DESCRIPTOR_SHA384),
    HashAlgorithm.SHA_512: (sha512, DESCRIPTOR_SHA512),
    HashAlgorithm.SHA3_256: (sha3_256, DESCRIPTOR_SHA3_256),
    HashAlgorithm.SHA3_384: (sha3_384, DESCRIPTOR_SHA3_384),
    HashAlgorithm.SHA3_512: (sha3_512, DESCRIPTOR_SHA3_512),
}


__all__ = [
    "DigestFunction",
    # Constants
    "SHA256_OUTPUT_SIZE",
    "SHA384_OUTPUT_SIZE",
    "SHA512_OUTPUT_SIZE",
    "SHA3_256_OUTPUT_SIZE",
    "SHA3_384_OUTPUT_SIZE",
    "SHA3_512_OUTPUT_SIZE",
    # Encoding
    "bytes_to_hex",
    # Primitives
    "sha256",
    "sha384",
    "sha512",
    "sha3_256",
    "sha3_384",
    "sha3_512",
    # Descriptors
    "DESCRIPTOR_SHA256",
    "DESCRIPTOR_SHA384",
    "DESCRIPTOR_SHA512",
    "DESCRIPTOR_SHA3_256",
    "DESCRIPTOR_SHA3_384",
    "DESCRIPTOR_SHA3_512",
    # Table
    "HASH_ALGORITHMS",
]
