"""
Оркестратор вычисления дайджестов.

Единая точка входа, которая возвращает либо DigestResult, либо
ClassifiedError. Ошибки validation-класса возвращаются как значения,
а не исключения, чтобы вызывающая сторона могла ветвиться по ним.

Алгоритм compute_hash:
    1. Валидация и санитизация ввода
    2. Валидация имени алгоритма (формат, denylist, whitelist)
    3. Сборка строки: опциональный контекстный префикс + санитизированный ввод
    4. Вызов примитива реестра (время измеряется только здесь)
    5. Lowercase hex
    6. Immutable DigestResult

Example:
    >>> service = DigestService()
    >>> result = service.compute_hash("abc", "sha-256")
    >>> result.hex_digest[:16], result.algorithm
    ('ba7816bf8f01cfea', 'SHA-256')
"""

from __future__ import annotations

import hmac
import logging
import re
import time
from datetime import datetime, timezone
from typing import Optional, Tuple, Union

from checksumguard.algorithms.hashing import bytes_to_hex
from checksumguard.config import DigestConfig
from checksumguard.core.exceptions import ConfigurationError
from checksumguard.core.metadata import AlgorithmDescriptor
from checksumguard.core.models import ClassifiedError, DigestResult, ErrorKind
from checksumguard.core.registry import AlgorithmRegistry
from checksumguard.errors import ErrorClassifier
from checksumguard.validation import REJECTION_INSECURE, InputValidator

logger = logging.getLogger(__name__)

HashOutcome = Union[DigestResult, ClassifiedError]

_HEX_DIGEST = re.compile(r"(?:[0-9a-f]{2})+")


class DigestService:
    """
    Сервис вычисления дайджестов.

    Не хранит изменяемого состояния между вызовами; безопасен для
    параллельного использования.

    Args:
        config: Настройки (по умолчанию DigestConfig())
        registry: Реестр алгоритмов (по умолчанию общий)
        validator: Валидатор (по умолчанию строится из config)
        classifier: Классификатор ошибок

    Raises:
        ConfigurationError: Если default_algorithm из config не является
            безопасным алгоритмом реестра
    """

    def __init__(
        self,
        config: Optional[DigestConfig] = None,
        registry: Optional[AlgorithmRegistry] = None,
        validator: Optional[InputValidator] = None,
        classifier: Optional[ErrorClassifier] = None,
    ) -> None:
        self._config = config or DigestConfig()
        self._registry = registry or AlgorithmRegistry.get_default()
        self._validator = validator or InputValidator.from_config(
            self._config, self._registry
        )
        self._classifier = classifier or ErrorClassifier()

        if not self._registry.is_secure(self._config.default_algorithm):
            raise ConfigurationError(
                f"Default algorithm '{self._config.default_algorithm}' is not "
                f"a secure registered algorithm",
                setting="default_algorithm",
                algorithm=self._config.default_algorithm,
            )
        self._default_algorithm = self._registry.canonical_name(
            self._config.default_algorithm
        )

        logger.info(
            f"DigestService ready (default={self._default_algorithm}, "
            f"max_input_length={self._validator.max_input_length})"
        )

    @property
    def default_algorithm(self) -> str:
        return self._default_algorithm

    @property
    def config(self) -> DigestConfig:
        return self._config

    # --------------------------------------------------------------------------
    # Public API
    # --------------------------------------------------------------------------

    def compute_hash(
        self,
        data: Optional[str],
        algorithm: Optional[str] = None,
        *,
        context: Optional[str] = None,
    ) -> HashOutcome:
        """
        Вычислить дайджест строки.

        Args:
            data: Сырой ввод вызывающей стороны
            algorithm: Имя алгоритма; None - алгоритм по умолчанию
            context: Контекстный префикс (например, строка идентичности).
                Непрозрачен для ядра и не валидируется.

        Returns:
            DigestResult при успехе или ClassifiedError при отказе
        """
        correlation_id = self._classifier.new_correlation_id()
        requested = self._default_algorithm if algorithm is None else algorithm

        logger.info(
            f"Starting hash computation [{correlation_id}] - "
            f"input length: {len(data) if isinstance(data, str) else 0}"
        )

        prepared = self._prepare(data, requested, correlation_id)
        if isinstance(prepared, ClassifiedError):
            return prepared
        sanitized, descriptor = prepared

        try:
            to_hash = f"{context}{sanitized}" if context is not None else sanitized
            payload = to_hash.encode("utf-8")

            started = time.perf_counter_ns()
            digest = self._registry.compute(descriptor.name, payload)
            elapsed_micros = (time.perf_counter_ns() - started) // 1000

            result = DigestResult(
                original_data=to_hash,
                algorithm=descriptor.name,
                hex_digest=bytes_to_hex(digest),
                computed_at=datetime.now(timezone.utc),
                elapsed_micros=elapsed_micros,
            )
        except Exception as exc:
            return self._classifier.classify(exc, correlation_id)

        logger.info(
            f"Hash computation completed [{correlation_id}] - "
            f"algorithm: {result.algorithm}, time: {result.elapsed_micros}us"
        )
        return result

    def verify_hash(
        self,
        data: Optional[str],
        expected_hex: str,
        algorithm: Optional[str] = None,
        *,
        context: Optional[str] = None,
    ) -> Union[bool, ClassifiedError]:
        """
        Сравнить дайджест ввода с ожидаемым значением в константное время.

        Returns:
            True/False либо ClassifiedError, если ввод, алгоритм или
            expected_hex некорректны
        """
        expected = expected_hex.strip().lower() if isinstance(expected_hex, str) else ""
        if not _HEX_DIGEST.fullmatch(expected):
            return self._classifier.validation_failure(
                ErrorKind.INPUT_VALIDATION_FAILED,
                ["Expected digest must be a non-empty hexadecimal string"],
            )

        outcome = self.compute_hash(data, algorithm, context=context)
        if isinstance(outcome, ClassifiedError):
            return outcome

        return hmac.compare_digest(outcome.hex_digest, expected)

    def list_supported_algorithms(self) -> Tuple[AlgorithmDescriptor, ...]:
        """Только secure алгоритмы, в порядке whitelist."""
        return self._registry.list_secure_algorithms()

    def is_algorithm_secure(self, name: Optional[str]) -> bool:
        """Тот же ответ, что и стадия алгоритма в compute_hash."""
        return self._validator.validate_algorithm(name).valid

    # --------------------------------------------------------------------------
    # Internals
    # --------------------------------------------------------------------------

    def _prepare(
        self, data: Optional[str], algorithm: str, correlation_id: str
    ) -> Union[Tuple[str, AlgorithmDescriptor], ClassifiedError]:
        input_outcome = self._validator.validate_and_sanitize(data)
        if not input_outcome.valid:
            return self._classifier.validation_failure(
                ErrorKind.INPUT_VALIDATION_FAILED,
                input_outcome.errors,
                correlation_id,
            )
        if input_outcome.has_warnings:
            logger.info(
                f"Input validation warnings [{correlation_id}]: "
                f"{', '.join(input_outcome.warnings)}"
            )

        algorithm_outcome = self._validator.validate_algorithm(algorithm)
        if not algorithm_outcome.valid:
            kind = (
                ErrorKind.ALGORITHM_INSECURE
                if algorithm_outcome.rejection == REJECTION_INSECURE
                else ErrorKind.ALGORITHM_NOT_SUPPORTED
            )
            return self._classifier.validation_failure(
                kind, algorithm_outcome.errors, correlation_id
            )

        assert input_outcome.sanitized_data is not None
        assert algorithm_outcome.sanitized_data is not None
        descriptor = self._registry.resolve(algorithm_outcome.sanitized_data)
        return input_outcome.sanitized_data, descriptor


__all__ = ["DigestService", "HashOutcome"]
