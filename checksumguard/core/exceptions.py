"""
Централизованные исключения ядра вычисления дайджестов.

Иерархия типизированных исключений для реестра алгоритмов, примитивов
хеширования и конфигурации. Обеспечивает единообразную
обработку ошибок и безопасность (NO раскрытия входных данных).

Example:
    >>> from checksumguard.core.exceptions import DigestError
    >>> try:
    ...     registry.compute("SHA-256", data)
    ... except DigestError as e:
    ...     logger.error(f"Digest failed: {e}")
    ...     print(f"Algorithm: {e.algorithm}")

Иерархия:
    DigestError (базовое)
    ├── AlgorithmError
    │   ├── AlgorithmNotSupportedError
    │   └── AlgorithmInsecureError
    ├── HashError
    │   └── HashingFailedError
    └── ConfigurationError

Security Note:
    Исключения НЕ содержат:
    - Исходную строку пользователя
    - Байты дайджеста
    - Внутренние stack traces в message
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

__all__: list[str] = [
    "DigestError",
    "AlgorithmError",
    "AlgorithmNotSupportedError",
    "AlgorithmInsecureError",
    "HashError",
    "HashingFailedError",
    "ConfigurationError",
]


# ==============================================================================
# BASE EXCEPTION
# ==============================================================================


class DigestError(Exception):
    """
    Базовое исключение для всех ошибок ядра.

    Attributes:
        message: Человекочитаемое сообщение об ошибке
        algorithm: Имя алгоритма, вызвавшего ошибку (опционально)
        context: Дополнительный контекст для отладки (без секретов!)

    Example:
        >>> raise DigestError(
        ...     "Operation failed",
        ...     algorithm="SHA-256",
        ...     context={"stage": "compute"},
        ... )
    """

    def __init__(
        self,
        message: str,
        *,
        algorithm: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.algorithm = algorithm
        self.context = context or {}

    def __str__(self) -> str:
        """
        Строковое представление исключения.

        Example:
            >>> str(HashingFailedError("Hashing failed", algorithm="SHA-256"))
            'HashingFailedError: Hashing failed [algorithm=SHA-256]'
        """
        parts = [self.__class__.__name__, ": ", self.message]

        if self.algorithm:
            parts.append(f" [algorithm={self.algorithm}]")

        if self.context:
            ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            parts.append(f" ({ctx_str})")

        return "".join(parts)

    def __repr__(self) -> str:
        """Представление для отладки."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"algorithm={self.algorithm!r}, "
            f"context={self.context!r})"
        )


# ==============================================================================
# ALGORITHM ERRORS
# ==============================================================================


class AlgorithmError(DigestError):
    """Ошибки выбора алгоритма."""

    pass


class AlgorithmNotSupportedError(AlgorithmError):
    """
    Алгоритм отсутствует и в whitelist, и в denylist.

    Сообщение перечисляет поддерживаемые алгоритмы, чтобы вызывающая
    сторона могла объяснить пользователю, что выбрать вместо этого.

    Attributes:
        requested: Имя, переданное вызывающей стороной (как есть)
        supported: Канонические имена безопасных алгоритмов

    Example:
        >>> raise AlgorithmNotSupportedError("SHA-999", ["SHA-256", "SHA-512"])
        AlgorithmNotSupportedError: Algorithm 'SHA-999' is not supported.
        Supported algorithms: SHA-256, SHA-512
    """

    def __init__(self, requested: str, supported: Sequence[str]) -> None:
        message = (
            f"Algorithm '{requested}' is not supported. "
            f"Supported algorithms: {', '.join(supported)}"
        )
        super().__init__(
            message,
            algorithm=requested,
            context={"supported_count": len(supported)},
        )
        self.requested = requested
        self.supported = tuple(supported)


class AlgorithmInsecureError(AlgorithmError):
    """
    Алгоритм находится в denylist (MD5, SHA-1).

    Отделён от AlgorithmNotSupportedError, чтобы вызывающая сторона
    могла объяснить *почему* имя отклонено.

    Example:
        >>> raise AlgorithmInsecureError("md5")
        AlgorithmInsecureError: Algorithm 'md5' is deprecated and insecure.
        Use SHA-256 or newer
    """

    def __init__(self, requested: str) -> None:
        message = (
            f"Algorithm '{requested}' is deprecated and insecure. "
            f"Use SHA-256 or newer"
        )
        super().__init__(message, algorithm=requested)
        self.requested = requested


# ==============================================================================
# HASH ERRORS
# ==============================================================================


class HashError(DigestError):
    """Базовая ошибка операций хеширования."""

    pass


class HashingFailedError(HashError):
    """
    Неудачное хеширование.

    Raises когда:
    - Примитив библиотеки выбросил исключение
    - Размер результата не совпадает с digest_size алгоритма

    Example:
        >>> digest = registry.compute("SHA-256", data)
        HashingFailedError: SHA-256 hashing failed [algorithm=SHA-256]
    """

    pass


# ==============================================================================
# CONFIGURATION ERRORS
# ==============================================================================


class ConfigurationError(DigestError):
    """
    Ошибка конфигурации (реестр, whitelist, настройки).

    Фатальна при старте процесса. Никогда не возникает per-request
    при корректной инициализации.

    Attributes:
        setting: Имя проблемной настройки (опционально)
    """

    def __init__(
        self,
        message: str,
        *,
        setting: Optional[str] = None,
        algorithm: Optional[str] = None,
    ) -> None:
        super().__init__(
            message,
            algorithm=algorithm,
            context={"setting": setting} if setting else None,
        )
        self.setting = setting
