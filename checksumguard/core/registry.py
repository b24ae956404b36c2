"""
Реестр алгоритмов дайджеста.

Хранит whitelist допустимых алгоритмов и фиксированный denylist.
Обеспечивает:
- Поиск по имени (trim, case-insensitive, с учётом алиасов)
- Различение "insecure" (denylist) и "not supported" (неизвестное имя)
- Вызов примитива только для алгоритмов, отмеченных как secure
- Валидацию таблицы при построении (ConfigurationError при ошибке)

Example:
    >>> from checksumguard.core.registry import AlgorithmRegistry
    >>> registry = AlgorithmRegistry.get_default()
    >>> registry.resolve("  sha-256 ").name
    'SHA-256'
    >>> registry.compute("SHA-256", b"abc").hex()[:8]
    'ba7816bf'

Thread Safety:
    Реестр неизменяем после построения; чтение не требует блокировок.
    Lock используется только при ленивом создании экземпляра по умолчанию.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from types import MappingProxyType
from typing import (
    TYPE_CHECKING,
    Callable,
    Dict,
    FrozenSet,
    Mapping,
    Optional,
    Tuple,
)

from checksumguard.core.exceptions import (
    AlgorithmInsecureError,
    AlgorithmNotSupportedError,
    ConfigurationError,
    HashingFailedError,
)
from checksumguard.core.metadata import (
    AlgorithmDescriptor,
    HashAlgorithm,
    normalize_algorithm_name,
)

if TYPE_CHECKING:
    from checksumguard.algorithms.hashing import DigestFunction

logger = logging.getLogger(__name__)

# Сломанные алгоритмы: отклоняются с отдельной ошибкой, а не "not found"
DEPRECATED_ALGORITHMS: FrozenSet[str] = frozenset({"MD5", "SHA-1", "SHA1"})


# ==============================================================================
# DATACLASSES
# ==============================================================================


@dataclass(frozen=True)
class RegistryEntry:
    """
    Запись в реестре.

    Attributes:
        algorithm: Идентификатор из HashAlgorithm
        function: Чистая функция ``bytes -> bytes``
        descriptor: Описание алгоритма
    """

    algorithm: HashAlgorithm
    function: Callable[[bytes], bytes]
    descriptor: AlgorithmDescriptor


# ==============================================================================
# MAIN CLASS: ALGORITHM REGISTRY
# ==============================================================================


class AlgorithmRegistry:
    """
    Неизменяемый реестр алгоритмов дайджеста.

    Args:
        table: Упорядоченное отображение
            ``HashAlgorithm -> (digest_function, descriptor)``
        deprecated: Имена denylist (в любом регистре)

    Raises:
        ConfigurationError: Пустая таблица, дубликаты имён, алгоритм из
            denylist в whitelist, несовпадение имени дескриптора или
            не-callable функция

    Example:
        >>> from checksumguard.algorithms.hashing import HASH_ALGORITHMS
        >>> registry = AlgorithmRegistry(HASH_ALGORITHMS)
        >>> [d.name for d in registry.list_secure_algorithms()][:2]
        ['SHA-256', 'SHA-384']
    """

    _default: Optional[AlgorithmRegistry] = None
    _lock: threading.Lock = threading.Lock()

    def __init__(
        self,
        table: Mapping[HashAlgorithm, Tuple[DigestFunction, AlgorithmDescriptor]],
        *,
        deprecated: FrozenSet[str] = DEPRECATED_ALGORITHMS,
    ) -> None:
        if not table:
            raise ConfigurationError(
                "Algorithm whitelist is empty", setting="algorithms"
            )

        denylist = frozenset(normalize_algorithm_name(n) for n in deprecated)
        entries: Dict[HashAlgorithm, RegistryEntry] = {}
        index: Dict[str, RegistryEntry] = {}

        for algorithm, (function, descriptor) in table.items():
            entry = self._build_entry(algorithm, function, descriptor)

            for key in descriptor.lookup_keys():
                if key in denylist:
                    raise ConfigurationError(
                        f"Deprecated algorithm '{key}' cannot be whitelisted",
                        setting="algorithms",
                        algorithm=descriptor.name,
                    )
                if key in index:
                    raise ConfigurationError(
                        f"Algorithm name '{key}' is registered twice",
                        setting="algorithms",
                        algorithm=descriptor.name,
                    )
                index[key] = entry

            entries[algorithm] = entry

        self._entries: Mapping[HashAlgorithm, RegistryEntry] = MappingProxyType(entries)
        self._index: Mapping[str, RegistryEntry] = MappingProxyType(index)
        self._deprecated: FrozenSet[str] = denylist
        self._secure: Tuple[AlgorithmDescriptor, ...] = tuple(
            e.descriptor for e in entries.values() if e.descriptor.secure
        )

        if not self._secure:
            raise ConfigurationError(
                "Algorithm whitelist contains no secure algorithms",
                setting="algorithms",
            )

        logger.info(
            f"AlgorithmRegistry initialized: {len(self._entries)} algorithms, "
            f"{len(self._deprecated)} deprecated names"
        )

    @staticmethod
    def _build_entry(
        algorithm: HashAlgorithm,
        function: Callable[[bytes], bytes],
        descriptor: AlgorithmDescriptor,
    ) -> RegistryEntry:
        if not isinstance(algorithm, HashAlgorithm):
            raise ConfigurationError(
                f"Registry key must be HashAlgorithm, got {type(algorithm).__name__}",
                setting="algorithms",
            )
        if not callable(function):
            raise ConfigurationError(
                f"Digest function for {algorithm.value} is not callable",
                setting="algorithms",
                algorithm=algorithm.value,
            )
        if not isinstance(descriptor, AlgorithmDescriptor):
            raise ConfigurationError(
                f"Descriptor for {algorithm.value} must be AlgorithmDescriptor",
                setting="algorithms",
                algorithm=algorithm.value,
            )
        if descriptor.name != algorithm.value:
            raise ConfigurationError(
                f"Descriptor name '{descriptor.name}' does not match "
                f"'{algorithm.value}'",
                setting="algorithms",
                algorithm=algorithm.value,
            )
        return RegistryEntry(algorithm=algorithm, function=function, descriptor=descriptor)

    # --------------------------------------------------------------------------
    # Default instance
    # --------------------------------------------------------------------------

    @classmethod
    def get_default(cls) -> AlgorithmRegistry:
        """
        Реестр по умолчанию, построенный из checksumguard.algorithms.hashing.

        Thread Safety:
            Thread-safe double-checked locking
        """
        if cls._default is None:
            with cls._lock:
                if cls._default is None:
                    from checksumguard.algorithms.hashing import HASH_ALGORITHMS

                    cls._default = cls(HASH_ALGORITHMS)
        return cls._default

    @classmethod
    def reset_default(cls) -> None:
        """Сбросить реестр по умолчанию (только для тестов)."""
        with cls._lock:
            cls._default = None
            logger.warning("Default AlgorithmRegistry reset (testing only!)")

    # --------------------------------------------------------------------------
    # Queries
    # --------------------------------------------------------------------------

    def list_secure_algorithms(self) -> Tuple[AlgorithmDescriptor, ...]:
        """Только secure алгоритмы, в порядке whitelist."""
        return self._secure

    def secure_names(self) -> Tuple[str, ...]:
        return tuple(d.name for d in self._secure)

    @property
    def deprecated_names(self) -> FrozenSet[str]:
        return self._deprecated

    def is_deprecated(self, name: str) -> bool:
        return normalize_algorithm_name(name) in self._deprecated

    def lookup(self, name: str) -> Optional[RegistryEntry]:
        """Поиск без исключений: None для неизвестных и deprecated имён."""
        return self._index.get(normalize_algorithm_name(name))

    def resolve(self, name: str) -> AlgorithmDescriptor:
        """
        Найти описание алгоритма по имени.

        Порядок проверок: denylist, затем whitelist.

        Args:
            name: Имя в любом регистре, с пробелами вокруг или алиас

        Returns:
            AlgorithmDescriptor с каноническим именем

        Raises:
            TypeError: Если name не строка
            AlgorithmInsecureError: Имя из denylist
            AlgorithmNotSupportedError: Неизвестное имя

        Example:
            >>> registry.resolve("sha3-256").name
            'SHA-3-256'
        """
        return self._resolve_entry(name).descriptor

    def _resolve_entry(self, name: str) -> RegistryEntry:
        if not isinstance(name, str):
            raise TypeError(f"name must be str, got {type(name).__name__}")

        if self.is_deprecated(name):
            raise AlgorithmInsecureError(name.strip())

        entry = self.lookup(name)
        if entry is None:
            raise AlgorithmNotSupportedError(name.strip(), self.secure_names())
        return entry

    def canonical_name(self, name: str) -> str:
        return self.resolve(name).name

    def is_secure(self, name: str) -> bool:
        """True только для известных secure алгоритмов; без исключений."""
        if not isinstance(name, str) or self.is_deprecated(name):
            return False
        entry = self.lookup(name)
        return entry is not None and entry.descriptor.secure

    # --------------------------------------------------------------------------
    # Computation
    # --------------------------------------------------------------------------

    def compute(self, name: str, data: bytes) -> bytes:
        """
        Вычислить дайджест.

        Args:
            name: Имя алгоритма (проверяется повторно, insecure не принимается)
            data: Байты для хеширования

        Returns:
            Дайджест длиной ровно descriptor.digest_size байт

        Raises:
            AlgorithmInsecureError: Имя из denylist или secure=False
            AlgorithmNotSupportedError: Неизвестное имя
            HashingFailedError: Сбой примитива или неверный размер результата
        """
        entry = self._resolve_entry(name)
        descriptor = entry.descriptor

        if not descriptor.secure:
            raise AlgorithmInsecureError(descriptor.name)

        try:
            digest = entry.function(data)
        except Exception as exc:
            logger.error(
                f"{descriptor.name} hashing failed for {len(data)} bytes: "
                f"{exc.__class__.__name__}"
            )
            raise HashingFailedError(
                f"{descriptor.name} hashing failed", algorithm=descriptor.name
            ) from exc

        if len(digest) != descriptor.digest_size:
            logger.error(
                f"{descriptor.name} produced {len(digest)} bytes, "
                f"expected {descriptor.digest_size}"
            )
            raise HashingFailedError(
                f"{descriptor.name} produced a digest of unexpected size",
                algorithm=descriptor.name,
                context={
                    "expected_size": descriptor.digest_size,
                    "actual_size": len(digest),
                },
            )

        return digest


def default_registry() -> AlgorithmRegistry:
    """Общий реестр процесса (см. AlgorithmRegistry.get_default)."""
    return AlgorithmRegistry.get_default()


__all__: list[str] = [
    "AlgorithmRegistry",
    "RegistryEntry",
    "default_registry",
    "DEPRECATED_ALGORITHMS",
]
