"""
Классификатор ошибок с защитой от утечек.

Преобразует любой сбой конвейера ровно в один ClassifiedError:

- Validation-класс (INPUT_VALIDATION_FAILED, ALGORITHM_NOT_SUPPORTED,
  ALGORITHM_INSECURE) сохраняет текст причины: он описывает только
  форму запроса.
- COMPUTATION_FAILED, CONFIGURATION_ERROR и любые непойманные сбои
  схлопываются в фиксированное сообщение своего вида. Детали пишутся
  только в серверный лог под correlation id.

Example:
    >>> classifier = ErrorClassifier()
    >>> error = classifier.classify(RuntimeError("disk on fire"))
    >>> error.kind, error.user_message
    (<ErrorKind.COMPUTATION_FAILED: 'computation_failed'>, 'Hash computation failed')
"""

from __future__ import annotations

import logging
import uuid
from typing import Callable, Final, Iterable, Optional

from checksumguard.core.exceptions import (
    AlgorithmInsecureError,
    AlgorithmNotSupportedError,
    ConfigurationError,
)
from checksumguard.core.models import ClassifiedError, ErrorKind

logger = logging.getLogger(__name__)

CORRELATION_ID_LENGTH: Final[int] = 20


def generate_correlation_id() -> str:
    """Непрозрачный токен: 20 hex-символов из UUID4."""
    return uuid.uuid4().hex[:CORRELATION_ID_LENGTH]


class ErrorClassifier:
    """
    Классификатор сбоев в безопасные для пользователя ошибки.

    Args:
        log: Логгер для серверных записей (по умолчанию модульный)
        id_factory: Генератор correlation id (подменяется в тестах)
    """

    def __init__(
        self,
        log: Optional[logging.Logger] = None,
        id_factory: Optional[Callable[[], str]] = None,
    ) -> None:
        self._log = log or logger
        self._id_factory = id_factory or generate_correlation_id

    def new_correlation_id(self) -> str:
        return self._id_factory()

    def classify(
        self, exc: BaseException, correlation_id: Optional[str] = None
    ) -> ClassifiedError:
        """
        Классифицировать исключение.

        Args:
            exc: Любое исключение конвейера
            correlation_id: Готовый id запроса (иначе генерируется новый)

        Returns:
            ClassifiedError; для не-validation видов internal_detail
            содержит str(exc), а user_message - только generic текст
        """
        cid = correlation_id or self.new_correlation_id()

        if isinstance(exc, AlgorithmInsecureError):
            return self.validation_failure(ErrorKind.ALGORITHM_INSECURE, [exc.message], cid)

        if isinstance(exc, AlgorithmNotSupportedError):
            return self.validation_failure(
                ErrorKind.ALGORITHM_NOT_SUPPORTED, [exc.message], cid
            )

        if isinstance(exc, ConfigurationError):
            kind = ErrorKind.CONFIGURATION_ERROR
        else:
            kind = ErrorKind.COMPUTATION_FAILED

        self._log.error(
            f"{kind.value} [correlationId={cid}]: "
            f"{exc.__class__.__name__}: {exc}",
            exc_info=exc,
            extra={"correlation_id": cid, "error_kind": kind.value},
        )

        return ClassifiedError(
            kind=kind,
            correlation_id=cid,
            user_message=kind.default_message,
            internal_detail=f"{exc.__class__.__name__}: {exc}",
        )

    def validation_failure(
        self,
        kind: ErrorKind,
        reasons: Iterable[str],
        correlation_id: Optional[str] = None,
    ) -> ClassifiedError:
        """
        Ошибка validation-класса с конкретными причинами.

        Пишет в лог WARNING без причин: текст может цитировать ввод
        пользователя (например, имя алгоритма).

        Raises:
            ValueError: Если kind не относится к validation-классу
        """
        if not kind.exposes_detail:
            raise ValueError(f"{kind.value} is not a validation error kind")

        cid = correlation_id or self.new_correlation_id()
        details = tuple(reasons)

        self._log.warning(
            f"{kind.value} [correlationId={cid}]: {len(details)} reason(s)",
            extra={"correlation_id": cid, "error_kind": kind.value},
        )

        message = "; ".join(details) if details else kind.default_message
        return ClassifiedError(
            kind=kind,
            correlation_id=cid,
            user_message=message,
            details=details,
        )


__all__ = [
    "ErrorClassifier",
    "generate_correlation_id",
    "CORRELATION_ID_LENGTH",
]
