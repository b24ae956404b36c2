"""
Пакет checksumguard
===================

Ядро сервиса контрольных сумм: валидация недоверенного ввода, whitelist
криптографических хеш-функций и безопасная классификация ошибок.

Этот пакет предоставляет:
    - Whitelist алгоритмов SHA-2/SHA-3 (256 бит и выше) с алиасами
    - Явный отказ для сломанных алгоритмов (MD5, SHA-1)
    - Валидацию и нормализацию ввода (длина, UTF-8, категории Unicode, NFC)
    - Иммутабельные результаты с временем вычисления
    - Классификацию ошибок без утечки внутренних деталей

Пример базового использования:
    >>> import checksumguard
    >>>
    >>> result = checksumguard.compute_hash("abc")
    >>> result.algorithm, result.hex_digest[:8]
    ('SHA-256', 'ba7816bf')
    >>>
    >>> error = checksumguard.compute_hash("abc", "MD5")
    >>> error.kind.value
    'algorithm_insecure'

Настройка логирования хостом:
    >>> import os
    >>> os.environ["CHECKSUMGUARD_LOG_LEVEL"] = "DEBUG"
    >>> checksumguard.setup_logging()

Импорт пакета не устанавливает обработчиков логирования.

Python: 3.11+
"""

import logging
import sys
import threading
from typing import Optional, Tuple

# =============================================================================
# МЕТАДАННЫЕ ВЕРСИИ
# =============================================================================

__version__ = "0.1.0"
__author__ = "checksumguard developers"
__description__ = "Input validation and whitelisted cryptographic digests"
__license__ = "MIT"
__python_requires__ = ">=3.11"

VERSION_MAJOR = 0
VERSION_MINOR = 1
VERSION_PATCH = 0

if sys.version_info < (3, 11):
    raise RuntimeError(
        f"checksumguard требует Python 3.11 или выше. "
        f"Текущая версия: {sys.version_info.major}."
        f"{sys.version_info.minor}.{sys.version_info.micro}"
    )

from checksumguard.config import DigestConfig, load_config  # noqa: E402
from checksumguard.core.exceptions import (  # noqa: E402
    AlgorithmInsecureError,
    AlgorithmNotSupportedError,
    ConfigurationError,
    DigestError,
    HashingFailedError,
)
from checksumguard.core.metadata import (  # noqa: E402
    AlgorithmDescriptor,
    HashAlgorithm,
    PerformanceClass,
)
from checksumguard.core.models import (  # noqa: E402
    ClassifiedError,
    DigestResult,
    ErrorKind,
    ValidationOutcome,
)
from checksumguard.health import digest_health_check, ensure_healthy  # noqa: E402
from checksumguard.service import DigestService, HashOutcome  # noqa: E402

# =============================================================================
# КОНФИГУРАЦИЯ ЛОГИРОВАНИЯ
# =============================================================================

LOGGER_NAME = "checksumguard"

_LOG_FORMAT = "[%(asctime)s] %(levelname)-8s [%(name)s.%(funcName)s:%(lineno)d] %(message)s"
_LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Инициализировать логирование пакета.

    Устанавливает один обработчик stderr на логгер ``checksumguard``
    с форматом ``[время] УРОВЕНЬ [модуль.функция:строка] сообщение``.

    Уровень берётся из аргумента, иначе из load_config() (файл
    checksumguard.json и переменная окружения
    CHECKSUMGUARD_LOG_LEVEL), по умолчанию INFO. Неизвестное имя уровня
    трактуется как INFO.

    Функция идемпотентна: повторный вызов меняет только уровень,
    новых обработчиков не добавляет.

    Возвращает:
        Логгер пакета.
    """
    level_name = (level or load_config().log_level).upper()
    log_level = logging.getLevelName(level_name)
    if not isinstance(log_level, int):
        log_level = logging.INFO

    package_logger = logging.getLogger(LOGGER_NAME)
    package_logger.setLevel(log_level)

    if package_logger.handlers:
        return package_logger

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(fmt=_LOG_FORMAT, datefmt=_LOG_DATEFMT))
    package_logger.addHandler(handler)

    # Предотвращаем дублирование записей в корневом логгере хоста
    package_logger.propagate = False

    return package_logger


def get_logger(module_name: str) -> logging.Logger:
    """
    Получить логгер в пространстве имён ``checksumguard``.

    Пример:
        >>> get_logger("audit").name
        'checksumguard.audit'
        >>> get_logger("__main__").name
        'checksumguard.main'
    """
    if module_name.startswith(LOGGER_NAME):
        return logging.getLogger(module_name)
    if module_name == "__main__":
        return logging.getLogger(f"{LOGGER_NAME}.main")
    return logging.getLogger(f"{LOGGER_NAME}.{module_name.lstrip('.')}")


# =============================================================================
# СЕРВИС ПО УМОЛЧАНИЮ
# =============================================================================

_default_service: Optional[DigestService] = None
_service_lock = threading.Lock()


def get_default_service() -> DigestService:
    """
    Сервис по умолчанию, создаётся лениво из load_config().

    Перед созданием выполняется self-test всех алгоритмов whitelist.

    Raises:
        ConfigurationError: Некорректная конфигурация окружения или
            провал self-test
    """
    global _default_service
    if _default_service is None:
        with _service_lock:
            if _default_service is None:
                ensure_healthy()
                _default_service = DigestService(config=load_config())
    return _default_service


def reset_default_service() -> None:
    """Сбросить сервис по умолчанию (только для тестов)."""
    global _default_service
    with _service_lock:
        _default_service = None


def compute_hash(
    data: Optional[str],
    algorithm: Optional[str] = None,
    *,
    context: Optional[str] = None,
) -> HashOutcome:
    """Вычислить дайджест сервисом по умолчанию."""
    return get_default_service().compute_hash(data, algorithm, context=context)


def list_supported_algorithms() -> Tuple[AlgorithmDescriptor, ...]:
    return get_default_service().list_supported_algorithms()


def is_algorithm_secure(name: Optional[str]) -> bool:
    return get_default_service().is_algorithm_secure(name)


__all__ = [
    # Metadata
    "__version__",
    # Logging
    "setup_logging",
    "get_logger",
    # Configuration
    "DigestConfig",
    "load_config",
    # Service
    "DigestService",
    "HashOutcome",
    "get_default_service",
    "reset_default_service",
    "compute_hash",
    "list_supported_algorithms",
    "is_algorithm_secure",
    # Health
    "digest_health_check",
    "ensure_healthy",
    # Types
    "AlgorithmDescriptor",
    "HashAlgorithm",
    "PerformanceClass",
    "ValidationOutcome",
    "DigestResult",
    "ErrorKind",
    "ClassifiedError",
    # Exceptions
    "DigestError",
    "AlgorithmNotSupportedError",
    "AlgorithmInsecureError",
    "HashingFailedError",
    "ConfigurationError",
]
