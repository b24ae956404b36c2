"""
Immutable value types ядра: результаты валидации, дайджеста и ошибок.

Все типы - frozen dataclasses. Частично построенных экземпляров не
существует: либо полностью валидный объект, либо ValueError из
__post_init__.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Final, Iterable, Optional, Tuple, Union

__all__: list[str] = [
    "ValidationOutcome",
    "DigestResult",
    "ErrorKind",
    "ClassifiedError",
]

_HEX_PATTERN: Final = re.compile(r"(?:[0-9a-f]{2})*")

_Reasons = Union[str, Iterable[str]]


def _as_tuple(items: Optional[_Reasons]) -> Tuple[str, ...]:
    if items is None:
        return ()
    if isinstance(items, str):
        return (items,)
    return tuple(items)


# ==============================================================================
# VALIDATION OUTCOME
# ==============================================================================


@dataclass(frozen=True)
class ValidationOutcome:
    """
    Результат валидации входных данных или имени алгоритма.

    Создавайте через success(), success_with_warnings() и failure().

    Attributes:
        valid: Прошла ли валидация
        sanitized_data: Нормализованное значение (только если valid)
        errors: Причины отказа (непусто тогда и только тогда, когда invalid)
        warnings: Информационные предупреждения (могут быть и при valid)
        rejection: Стадия отказа для имени алгоритма
            ("format", "insecure", "unsupported") или None

    Example:
        >>> outcome = ValidationOutcome.failure("Input cannot be null")
        >>> outcome.valid, outcome.sanitized_data
        (False, None)
    """

    valid: bool
    sanitized_data: Optional[str] = None
    errors: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()
    rejection: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "errors", _as_tuple(self.errors))
        object.__setattr__(self, "warnings", _as_tuple(self.warnings))

        if self.valid:
            if self.errors:
                raise ValueError("Valid outcome cannot carry errors")
            if self.sanitized_data is None:
                raise ValueError("Valid outcome requires sanitized data")
            if self.rejection is not None:
                raise ValueError("Valid outcome cannot carry a rejection stage")
        else:
            if not self.errors:
                raise ValueError("Invalid outcome requires at least one error")
            if self.sanitized_data is not None:
                raise ValueError("Invalid outcome cannot carry sanitized data")

    @classmethod
    def success(cls, sanitized_data: str) -> ValidationOutcome:
        return cls(valid=True, sanitized_data=sanitized_data)

    @classmethod
    def success_with_warnings(
        cls, sanitized_data: str, warnings: _Reasons
    ) -> ValidationOutcome:
        return cls(
            valid=True,
            sanitized_data=sanitized_data,
            warnings=_as_tuple(warnings),
        )

    @classmethod
    def failure(
        cls,
        errors: _Reasons,
        warnings: Optional[_Reasons] = None,
        *,
        rejection: Optional[str] = None,
    ) -> ValidationOutcome:
        return cls(
            valid=False,
            errors=_as_tuple(errors),
            warnings=_as_tuple(warnings),
            rejection=rejection,
        )

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)


# ==============================================================================
# DIGEST RESULT
# ==============================================================================


@dataclass(frozen=True)
class DigestResult:
    """
    Результат успешного вычисления дайджеста (value type).

    Attributes:
        original_data: Точная строка, которая была захеширована
            (после санитизации и добавления контекстного префикса)
        algorithm: Каноническое имя использованного алгоритма
        hex_digest: Дайджест в lowercase hex
        computed_at: Момент вычисления (aware datetime, UTC)
        elapsed_micros: Время вызова примитива в микросекундах

    Raises:
        ValueError: Некорректный hex, отрицательное время или naive datetime
    """

    original_data: str
    algorithm: str
    hex_digest: str
    computed_at: datetime
    elapsed_micros: int

    def __post_init__(self) -> None:
        if not self.algorithm:
            raise ValueError("Algorithm cannot be empty")
        if not _HEX_PATTERN.fullmatch(self.hex_digest):
            raise ValueError("Hex digest must be lowercase hex of even length")
        if self.computed_at.tzinfo is None:
            raise ValueError("computed_at must be timezone-aware")
        if self.elapsed_micros < 0:
            raise ValueError(
                f"Computation time cannot be negative: {self.elapsed_micros}"
            )

    @property
    def digest_size(self) -> int:
        """Размер дайджеста в байтах."""
        return len(self.hex_digest) // 2

    def to_dict(self) -> Dict[str, Any]:
        return {
            "original_data": self.original_data,
            "algorithm": self.algorithm,
            "hex_digest": self.hex_digest,
            "computed_at": self.computed_at.isoformat(),
            "elapsed_micros": self.elapsed_micros,
        }


# ==============================================================================
# ERROR TAXONOMY
# ==============================================================================


class ErrorKind(str, Enum):
    """
    Таксономия ошибок, видимых вызывающей стороне.

    Validation-класс (первые три) может показывать конкретную причину:
    она описывает только форму запроса. Остальные виды схлопываются
    в фиксированное generic-сообщение.
    """

    INPUT_VALIDATION_FAILED = "input_validation_failed"
    ALGORITHM_NOT_SUPPORTED = "algorithm_not_supported"
    ALGORITHM_INSECURE = "algorithm_insecure"
    COMPUTATION_FAILED = "computation_failed"
    CONFIGURATION_ERROR = "configuration_error"

    @property
    def default_message(self) -> str:
        messages = {
            ErrorKind.INPUT_VALIDATION_FAILED: "Input validation failed",
            ErrorKind.ALGORITHM_NOT_SUPPORTED: (
                "The specified algorithm is not supported"
            ),
            ErrorKind.ALGORITHM_INSECURE: (
                "The specified algorithm is not secure and cannot be used"
            ),
            ErrorKind.COMPUTATION_FAILED: "Hash computation failed",
            ErrorKind.CONFIGURATION_ERROR: "System configuration error",
        }
        return messages[self]

    @property
    def exposes_detail(self) -> bool:
        """Можно ли показывать конкретную причину вызывающей стороне."""
        return self in (
            ErrorKind.INPUT_VALIDATION_FAILED,
            ErrorKind.ALGORITHM_NOT_SUPPORTED,
            ErrorKind.ALGORITHM_INSECURE,
        )

    @property
    def status_hint(self) -> int:
        """Рекомендуемый HTTP-статус для внешнего транспортного слоя."""
        if self.exposes_detail:
            return 400
        if self is ErrorKind.CONFIGURATION_ERROR:
            return 503
        return 500


@dataclass(frozen=True)
class ClassifiedError:
    """
    Классифицированная ошибка, безопасная для показа пользователю.

    Attributes:
        kind: Вид ошибки из таксономии
        correlation_id: Непрозрачный токен, связывающий ответ с записью в логе
        user_message: Безопасное сообщение
        details: Конкретные причины (только для validation-класса)
        internal_detail: Только для сервера; не сериализуется и не
            попадает в repr
    """

    kind: ErrorKind
    correlation_id: str
    user_message: str
    details: Tuple[str, ...] = ()
    internal_detail: Optional[str] = field(default=None, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "details", _as_tuple(self.details))
        if not self.correlation_id or not self.correlation_id.strip():
            raise ValueError("Correlation ID cannot be null or empty")
        if not self.user_message or not self.user_message.strip():
            raise ValueError("Message cannot be null or empty")
        if self.details and not self.kind.exposes_detail:
            raise ValueError(f"{self.kind.value} errors cannot expose details")

    @property
    def status_hint(self) -> int:
        return self.kind.status_hint

    def to_dict(self) -> Dict[str, Any]:
        """Caller-visible форма; internal_detail исключён."""
        return {
            "kind": self.kind.value,
            "correlation_id": self.correlation_id,
            "message": self.user_message,
            "details": list(self.details),
        }
