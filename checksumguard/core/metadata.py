"""
Метаданные алгоритмов дайджеста.

Определяет:
- HashAlgorithm - фиксированный перечень идентификаторов whitelist
- PerformanceClass - класс производительности (FAST/MEDIUM/SLOW)
- AlgorithmDescriptor - immutable описание алгоритма для реестра и API

Example:
    >>> from checksumguard.core.metadata import AlgorithmDescriptor, PerformanceClass
    >>> descriptor = AlgorithmDescriptor(
    ...     name="SHA-256",
    ...     secure=True,
    ...     performance_class=PerformanceClass.FAST,
    ...     description="NIST-approved",
    ...     digest_size=32,
    ... )
    >>> descriptor.hex_length
    64
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet

__all__: list[str] = [
    "HashAlgorithm",
    "PerformanceClass",
    "AlgorithmDescriptor",
    "normalize_algorithm_name",
]


def normalize_algorithm_name(name: str) -> str:
    """
    Ключ поиска: без окружающих пробелов, в верхнем регистре.

    Регистр складывается только для ASCII: не-ASCII имя возвращается
    как есть и не совпадает ни с одним ключом реестра.

    Example:
        >>> normalize_algorithm_name(" sha-256 ")
        'SHA-256'
        >>> normalize_algorithm_name(chr(0x17F) + "ha-256") == "SHA-256"
        False
    """
    key = name.strip()
    return key.upper() if key.isascii() else key



# ==============================================================================
# ENUM: HASH ALGORITHM
# ==============================================================================


class HashAlgorithm(str, Enum):
    """
    Идентификаторы whitelist алгоритмов.

    Только NIST-approved семейства SHA-2 и SHA-3 с выходом от 256 бит.
    Наследует str для корректной JSON сериализации; value - каноническое
    имя, которое возвращается вызывающей стороне.

    Example:
        >>> HashAlgorithm.SHA_256.value
        'SHA-256'
        >>> HashAlgorithm.from_str(" sha-512 ")
        <HashAlgorithm.SHA_512: 'SHA-512'>
    """

    SHA_256 = "SHA-256"
    SHA_384 = "SHA-384"
    SHA_512 = "SHA-512"
    SHA3_256 = "SHA-3-256"
    SHA3_384 = "SHA-3-384"
    SHA3_512 = "SHA-3-512"

    @classmethod
    def from_str(cls, value: str) -> HashAlgorithm:
        """
        Парсинг канонического имени (case-insensitive, trim).

        Raises:
            ValueError: Имя не является каноническим идентификатором
        """
        key = normalize_algorithm_name(value)
        for member in cls:
            if member.value == key:
                return member
        raise ValueError(
            f"Неизвестный алгоритм: {value}. "
            f"Допустимые значения: {[m.value for m in cls]}"
        )


# ==============================================================================
# ENUM: PERFORMANCE CLASS
# ==============================================================================


class PerformanceClass(str, Enum):
    """
    Класс производительности алгоритма.

    Градация:
        - FAST: высокая пропускная способность
        - MEDIUM: баланс скорости и запаса прочности
        - SLOW: максимальная стойкость ценой скорости
    """

    FAST = "fast"
    MEDIUM = "medium"
    SLOW = "slow"

    def description(self) -> str:
        """Человекочитаемое описание класса."""
        descriptions = {
            PerformanceClass.FAST: (
                "Fast - Excellent performance for high-throughput scenarios"
            ),
            PerformanceClass.MEDIUM: (
                "Medium - Good balance of performance and security"
            ),
            PerformanceClass.SLOW: (
                "Slow - Maximum security, suitable for high-security scenarios"
            ),
        }
        return descriptions[self]

    @classmethod
    def from_str(cls, value: str) -> PerformanceClass:
        """
        Парсинг из строки (case-insensitive).

        Example:
            >>> PerformanceClass.from_str("FAST")
            <PerformanceClass.FAST: 'fast'>
        """
        try:
            return cls[value.strip().upper()]
        except KeyError:
            raise ValueError(
                f"Неизвестный класс производительности: {value}. "
                f"Допустимые значения: {[c.value for c in cls]}"
            ) from None


# ==============================================================================
# DATACLASS: ALGORITHM DESCRIPTOR
# ==============================================================================


@dataclass(frozen=True)
class AlgorithmDescriptor:
    """
    Описание алгоритма в реестре.

    Создаётся один раз при старте процесса из фиксированного whitelist
    и больше не изменяется.

    Attributes:
        name: Каноническое имя ("SHA-256")
        secure: Разрешён ли алгоритм для использования
        performance_class: Класс производительности
        description: Описание для пользователя
        digest_size: Размер дайджеста в байтах
        aliases: Альтернативные написания имени (без учёта регистра)

    Raises:
        ValueError: Пустое имя/описание или некорректный digest_size
    """

    name: str
    secure: bool
    performance_class: PerformanceClass
    description: str
    digest_size: int
    aliases: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("Имя алгоритма не может быть пустым")
        if not self.description or not self.description.strip():
            raise ValueError(f"Описание алгоритма {self.name} не может быть пустым")
        if not isinstance(self.performance_class, PerformanceClass):
            raise TypeError(
                f"performance_class должен быть PerformanceClass, "
                f"получено {type(self.performance_class).__name__}"
            )
        if self.digest_size <= 0:
            raise ValueError(
                f"digest_size должен быть > 0, получено {self.digest_size}"
            )
        # Нормализация алиасов: frozenset в верхнем регистре
        object.__setattr__(
            self,
            "aliases",
            frozenset(normalize_algorithm_name(a) for a in self.aliases),
        )

    @property
    def hex_length(self) -> int:
        """Длина hex-представления дайджеста (2 символа на байт)."""
        return self.digest_size * 2

    def lookup_keys(self) -> FrozenSet[str]:
        """Все ключи поиска: каноническое имя и алиасы."""
        return frozenset({normalize_algorithm_name(self.name)}) | self.aliases

    def to_dict(self) -> Dict[str, Any]:
        """
        Сериализация в словарь для транспортного слоя.

        Example:
            >>> descriptor.to_dict()["performance"]
            'fast'
        """
        return {
            "name": self.name,
            "secure": self.secure,
            "performance": self.performance_class.value,
            "performance_description": self.performance_class.description(),
            "description": self.description,
            "digest_size": self.digest_size,
            "aliases": sorted(self.aliases),
        }
