"""
Unit-тесты для модуля metadata.py.

Проверяет HashAlgorithm, PerformanceClass и AlgorithmDescriptor.
"""

from __future__ import annotations

import dataclasses

import pytest

from checksumguard.core.metadata import (
    AlgorithmDescriptor,
    HashAlgorithm,
    PerformanceClass,
    normalize_algorithm_name,
)


def _descriptor(**overrides: object) -> AlgorithmDescriptor:
    params = dict(
        name="SHA-256",
        secure=True,
        performance_class=PerformanceClass.FAST,
        description="NIST-approved",
        digest_size=32,
    )
    params.update(overrides)
    return AlgorithmDescriptor(**params)  # type: ignore[arg-type]


# ==============================================================================
# ENUMS
# ==============================================================================


class TestNormalizeAlgorithmName:
    """Тесты нормализации имени."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("sha-256", "SHA-256"),
            ("  Sha-512 ", "SHA-512"),
            ("\tmd5\n", "MD5"),
        ],
    )
    def test_normalize(self, raw: str, expected: str) -> None:
        """Trim и верхний регистр."""
        assert normalize_algorithm_name(raw) == expected

    def test_non_ascii_not_folded(self) -> None:
        """Не-ASCII имя не переводится в верхний регистр."""
        long_s_name = " " + chr(0x17F) + "ha-256 "

        assert normalize_algorithm_name(long_s_name) == chr(0x17F) + "ha-256"


class TestHashAlgorithm:
    """Тесты перечня HashAlgorithm."""

    def test_whitelist_values(self) -> None:
        """Фиксированный whitelist из шести алгоритмов."""
        assert [m.value for m in HashAlgorithm] == [
            "SHA-256",
            "SHA-384",
            "SHA-512",
            "SHA-3-256",
            "SHA-3-384",
            "SHA-3-512",
        ]

    def test_is_str(self) -> None:
        """Члены перечня являются строками."""
        assert HashAlgorithm.SHA_256 == "SHA-256"

    def test_from_str(self) -> None:
        """Парсинг без учёта регистра и пробелов."""
        assert HashAlgorithm.from_str(" sha-3-256 ") is HashAlgorithm.SHA3_256

    @pytest.mark.parametrize("value", ["MD5", "SHA3-256", ""])
    def test_from_str_invalid(self, value: str) -> None:
        """Неканоническое имя -> ValueError."""
        with pytest.raises(ValueError):
            HashAlgorithm.from_str(value)


class TestPerformanceClass:
    """Тесты PerformanceClass."""

    @pytest.mark.parametrize(
        "member, prefix",
        [
            (PerformanceClass.FAST, "Fast"),
            (PerformanceClass.MEDIUM, "Medium"),
            (PerformanceClass.SLOW, "Slow"),
        ],
    )
    def test_description(self, member: PerformanceClass, prefix: str) -> None:
        """У каждого класса есть описание."""
        assert member.description().startswith(prefix)

    @pytest.mark.parametrize("value", ["fast", "FAST", " Medium "])
    def test_from_str(self, value: str) -> None:
        """Парсинг без учёта регистра."""
        assert isinstance(PerformanceClass.from_str(value), PerformanceClass)

    def test_from_str_invalid(self) -> None:
        """Неизвестное значение -> ValueError."""
        with pytest.raises(ValueError, match="Неизвестный класс"):
            PerformanceClass.from_str("turbo")


# ==============================================================================
# DESCRIPTOR
# ==============================================================================


class TestAlgorithmDescriptor:
    """Тесты AlgorithmDescriptor."""

    def test_hex_length(self) -> None:
        """hex_length вдвое больше digest_size."""
        assert _descriptor(digest_size=48).hex_length == 96

    def test_aliases_normalized(self) -> None:
        """Алиасы приводятся к верхнему регистру."""
        descriptor = _descriptor(aliases=frozenset({"sha256", " sha_256 "}))

        assert descriptor.aliases == frozenset({"SHA256", "SHA_256"})

    def test_lookup_keys_include_name(self) -> None:
        """Ключи поиска включают каноническое имя и алиасы."""
        descriptor = _descriptor(aliases=frozenset({"SHA256"}))

        assert descriptor.lookup_keys() == frozenset({"SHA-256", "SHA256"})

    def test_frozen(self) -> None:
        """Дескриптор неизменяем."""
        descriptor = _descriptor()

        with pytest.raises(dataclasses.FrozenInstanceError):
            descriptor.secure = False  # type: ignore[misc]

    @pytest.mark.parametrize(
        "overrides",
        [
            {"name": ""},
            {"name": "   "},
            {"description": ""},
            {"digest_size": 0},
            {"digest_size": -32},
        ],
    )
    def test_invalid_values(self, overrides: dict) -> None:
        """Некорректные значения -> ValueError."""
        with pytest.raises(ValueError):
            _descriptor(**overrides)

    def test_invalid_performance_class(self) -> None:
        """performance_class должен быть PerformanceClass."""
        with pytest.raises(TypeError):
            _descriptor(performance_class="fast")

    def test_to_dict(self) -> None:
        """Сериализация для транспортного слоя."""
        data = _descriptor(aliases=frozenset({"SHA_256", "SHA256"})).to_dict()

        assert data == {
            "name": "SHA-256",
            "secure": True,
            "performance": "fast",
            "performance_description": PerformanceClass.FAST.description(),
            "description": "NIST-approved",
            "digest_size": 32,
            "aliases": ["SHA256", "SHA_256"],
        }
