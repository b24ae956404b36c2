"""
validation.py - валидация и санитизация недоверенного ввода.

Превращает произвольную строку вызывающей стороны в безопасную
каноническую строку либо отклоняет её с конкретными причинами.
Стадии независимы и доступны по отдельности:

1. validate_input_length - границы длины (в символах)
2. validate_encoding - round trip через UTF-8
3. validate_input_content - allow-list категорий Unicode, запрет NUL
4. sanitize - NFC, нестандартные пробелы, схлопывание, trim

Отдельная операция validate_algorithm проверяет формат имени алгоритма
и передаёт классификацию безопасности реестру.

Example:
    >>> validator = InputValidator()
    >>> outcome = validator.validate_and_sanitize("  Hello\\u00a0 world ")
    >>> outcome.sanitized_data
    'Hello world'
"""

from __future__ import annotations

import logging
import re
import unicodedata
from typing import Final, List, Optional

from checksumguard.config import DigestConfig
from checksumguard.core.exceptions import (
    AlgorithmInsecureError,
    AlgorithmNotSupportedError,
    ConfigurationError,
)
from checksumguard.core.models import ValidationOutcome
from checksumguard.core.registry import AlgorithmRegistry

logger = logging.getLogger(__name__)

DEFAULT_MIN_INPUT_LENGTH: Final[int] = 1
DEFAULT_MAX_INPUT_LENGTH: Final[int] = 10_000

# Первая буква категории Unicode: Letter, Number, Punctuation, Symbol,
# Separator, Mark
_SAFE_CATEGORY_PREFIXES: Final[frozenset[str]] = frozenset("LNPSZM")

_SAFE_CONTROL_WHITESPACE: Final[frozenset[str]] = frozenset("\t\n\r\v\f")

# Нестандартные пробельные символы, заменяемые обычным пробелом
CHARACTERS_TO_NORMALIZE: Final[str] = (
    "\u00A0\u2000\u2001\u2002\u2003\u2004\u2005\u2006\u2007"
    "\u2008\u2009\u200A\u200B\u200C\u200D\u2028\u2029"
    "\u202F\u205F\u3000\uFEFF"
)

_NORMALIZE_TABLE: Final[dict[int, str]] = {
    ord(c): " " for c in CHARACTERS_TO_NORMALIZE
}

_WHITESPACE_RUN: Final = re.compile(r"\s+")

_ALGORITHM_NAME_PATTERN: Final = re.compile(r"[A-Za-z0-9_-]+")

# Стадии отказа validate_algorithm
REJECTION_FORMAT: Final[str] = "format"
REJECTION_INSECURE: Final[str] = "insecure"
REJECTION_UNSUPPORTED: Final[str] = "unsupported"


def _is_safe_character(ch: str) -> bool:
    if ch in _SAFE_CONTROL_WHITESPACE or ch in CHARACTERS_TO_NORMALIZE:
        return True
    return unicodedata.category(ch)[0] in _SAFE_CATEGORY_PREFIXES


class InputValidator:
    """
    Валидатор входных данных и имён алгоритмов.

    Не хранит изменяемого состояния: один экземпляр безопасно
    использовать из многих потоков.

    Args:
        min_input_length: Минимальная длина ввода (>= 1)
        max_input_length: Максимальная длина ввода
        registry: Реестр алгоритмов (по умолчанию - общий)

    Raises:
        ConfigurationError: Некорректные границы длины
    """

    def __init__(
        self,
        min_input_length: int = DEFAULT_MIN_INPUT_LENGTH,
        max_input_length: int = DEFAULT_MAX_INPUT_LENGTH,
        registry: Optional[AlgorithmRegistry] = None,
    ) -> None:
        if min_input_length < 1:
            raise ConfigurationError(
                "min_input_length must be >= 1", setting="min_input_length"
            )
        if max_input_length < min_input_length:
            raise ConfigurationError(
                "max_input_length must be >= min_input_length",
                setting="max_input_length",
            )
        self._min_input_length = min_input_length
        self._max_input_length = max_input_length
        self._registry = registry or AlgorithmRegistry.get_default()

    @classmethod
    def from_config(
        cls, config: DigestConfig, registry: Optional[AlgorithmRegistry] = None
    ) -> InputValidator:
        return cls(
            min_input_length=config.min_input_length,
            max_input_length=config.max_input_length,
            registry=registry,
        )

    @property
    def min_input_length(self) -> int:
        return self._min_input_length

    @property
    def max_input_length(self) -> int:
        return self._max_input_length

    @property
    def registry(self) -> AlgorithmRegistry:
        return self._registry

    # --------------------------------------------------------------------------
    # Full pipeline
    # --------------------------------------------------------------------------

    def validate_and_sanitize(self, text: Optional[str]) -> ValidationOutcome:
        """
        Полная проверка и нормализация ввода.

        Все стадии выполняются, ошибки накапливаются, чтобы вызывающая
        сторона увидела все причины сразу.

        Args:
            text: Сырой ввод вызывающей стороны

        Returns:
            ValidationOutcome с санитизированной строкой или списком ошибок
        """
        if text is None:
            return ValidationOutcome.failure("Input cannot be null")
        if not isinstance(text, str):
            return ValidationOutcome.failure("Input must be a string")

        errors: List[str] = []
        warnings: List[str] = []

        for stage in (
            self.validate_input_length(text),
            self.validate_encoding(text),
            self.validate_input_content(text),
        ):
            errors.extend(stage.errors)
            warnings.extend(stage.warnings)

        if errors:
            logger.debug(
                f"Input rejected ({len(text)} chars): {len(errors)} error(s)"
            )
            return ValidationOutcome.failure(errors, warnings)

        sanitized = self.sanitize(text)

        if warnings:
            return ValidationOutcome.success_with_warnings(sanitized, warnings)
        return ValidationOutcome.success(sanitized)

    # --------------------------------------------------------------------------
    # Stages
    # --------------------------------------------------------------------------

    def validate_input_length(self, text: str) -> ValidationOutcome:
        """Проверка границ длины; сообщение содержит фактическую длину и лимит."""
        length = len(text)

        if length < self._min_input_length:
            return ValidationOutcome.failure(
                f"Input length ({length}) is below minimum required length "
                f"({self._min_input_length})"
            )

        if length > self._max_input_length:
            return ValidationOutcome.failure(
                f"Input length ({length}) exceeds maximum allowed length "
                f"({self._max_input_length})"
            )

        return ValidationOutcome.success(text)

    def validate_encoding(self, text: str) -> ValidationOutcome:
        """
        Round trip через UTF-8.

        Строка с одиночными суррогатами не кодируется в UTF-8
        и отклоняется.
        """
        try:
            reconstructed = text.encode("utf-8").decode("utf-8")
        except UnicodeError:
            return ValidationOutcome.failure("Input contains invalid UTF-8 encoding")

        if reconstructed != text:
            return ValidationOutcome.failure("Input contains invalid UTF-8 encoding")

        return ValidationOutcome.success(text)

    def validate_input_content(self, text: str) -> ValidationOutcome:
        """
        Allow-list символов и предупреждения о нормализации.

        Разрешены буквы, цифры, пунктуация, символы, разделители и
        combining marks любых алфавитов, а также пробельные управляющие
        символы. NUL отклоняется отдельной ошибкой.
        """
        errors: List[str] = []
        warnings: List[str] = []

        if not all(_is_safe_character(ch) for ch in text):
            errors.append("Input contains unsafe characters or control sequences")

        if "\0" in text:
            errors.append("Input contains null bytes which are not allowed")

        if len(text.strip()) < len(text) * 0.5:
            warnings.append(
                "Input contains excessive whitespace which will be normalized"
            )

        if not errors and unicodedata.normalize("NFC", text) != text:
            warnings.append("Input contains Unicode characters that will be normalized")

        if errors:
            return ValidationOutcome.failure(errors, warnings)
        if warnings:
            return ValidationOutcome.success_with_warnings(text, warnings)
        return ValidationOutcome.success(text)

    @staticmethod
    def sanitize(text: str) -> str:
        """
        Нормализация: NFC, замена нестандартных пробелов, схлопывание
        последовательностей пробелов, trim.

        Example:
            >>> InputValidator.sanitize("a\\u3000\\u3000b\\n")
            'a b'
        """
        sanitized = unicodedata.normalize("NFC", text)
        sanitized = sanitized.translate(_NORMALIZE_TABLE)
        sanitized = _WHITESPACE_RUN.sub(" ", sanitized)
        return sanitized.strip()

    # --------------------------------------------------------------------------
    # Algorithm names
    # --------------------------------------------------------------------------

    def validate_algorithm(self, name: Optional[str]) -> ValidationOutcome:
        """
        Проверка имени алгоритма.

        Порядок: пустое имя, формат (буквы/цифры/дефис/подчёркивание),
        denylist, whitelist. Первая неудачная стадия определяет ответ.

        Returns:
            При успехе sanitized_data - каноническое имя из реестра.
            При отказе rejection - "format", "insecure" или "unsupported".

        Example:
            >>> validator.validate_algorithm(" sha-256 ").sanitized_data
            'SHA-256'
            >>> validator.validate_algorithm("MD5").rejection
            'insecure'
        """
        if name is None or not isinstance(name, str) or not name.strip():
            return ValidationOutcome.failure(
                "Algorithm name cannot be null or empty",
                rejection=REJECTION_FORMAT,
            )

        trimmed = name.strip()

        if not _ALGORITHM_NAME_PATTERN.fullmatch(trimmed):
            return ValidationOutcome.failure(
                "Algorithm name contains invalid characters. Only letters, "
                "numbers, hyphens, and underscores are allowed",
                rejection=REJECTION_FORMAT,
            )

        try:
            descriptor = self._registry.resolve(trimmed)
        except AlgorithmInsecureError as exc:
            return ValidationOutcome.failure(exc.message, rejection=REJECTION_INSECURE)
        except AlgorithmNotSupportedError as exc:
            return ValidationOutcome.failure(
                exc.message, rejection=REJECTION_UNSUPPORTED
            )

        return ValidationOutcome.success(descriptor.name)


__all__ = [
    "InputValidator",
    "CHARACTERS_TO_NORMALIZE",
    "DEFAULT_MIN_INPUT_LENGTH",
    "DEFAULT_MAX_INPUT_LENGTH",
    "REJECTION_FORMAT",
    "REJECTION_INSECURE",
    "REJECTION_UNSUPPORTED",
]
