"""
Unit-тесты для DigestService.

Проверяет:
- Известные векторы и детерминизм
- Инвариант длины дайджеста
- Denylist, неизвестные алгоритмы и порядок проверок
- Границы длины ввода и отклонение NUL
- Контекстный префикс и санитизацию
- Отсутствие утечек при внутренних сбоях
- verify_hash и параллельное использование
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta
from typing import Generator

import pytest

from checksumguard.algorithms.hashing import HASH_ALGORITHMS, sha256
from checksumguard.config import DigestConfig
from checksumguard.core.exceptions import ConfigurationError
from checksumguard.core.models import ClassifiedError, DigestResult, ErrorKind
from checksumguard.core.registry import AlgorithmRegistry
from checksumguard.service import DigestService

ABC_SHA256 = "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
EMPTY_SHA256 = "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"

SECURE_NAMES = (
    "SHA-256",
    "SHA-384",
    "SHA-512",
    "SHA-3-256",
    "SHA-3-384",
    "SHA-3-512",
)


# ==============================================================================
# FIXTURES
# ==============================================================================


@pytest.fixture(autouse=True)
def reset_registry() -> Generator[None, None, None]:
    AlgorithmRegistry.reset_default()
    yield
    AlgorithmRegistry.reset_default()


@pytest.fixture
def registry() -> AlgorithmRegistry:
    return AlgorithmRegistry(HASH_ALGORITHMS)


@pytest.fixture
def service(registry: AlgorithmRegistry) -> DigestService:
    return DigestService(registry=registry)


def _ok(outcome: object) -> DigestResult:
    assert isinstance(outcome, DigestResult), outcome
    return outcome


def _err(outcome: object) -> ClassifiedError:
    assert isinstance(outcome, ClassifiedError), outcome
    return outcome


# ==============================================================================
# CONSTRUCTION
# ==============================================================================


class TestConstruction:
    """Тесты построения сервиса."""

    def test_default_algorithm(self, service: DigestService) -> None:
        """Алгоритм по умолчанию: SHA-256."""
        assert service.default_algorithm == "SHA-256"
        assert service.config == DigestConfig()

    def test_configured_default_canonicalized(self, registry: AlgorithmRegistry) -> None:
        """Алгоритм из конфигурации приводится к каноническому имени."""
        service = DigestService(
            config=DigestConfig(default_algorithm="sha3-256"), registry=registry
        )

        assert service.default_algorithm == "SHA-3-256"
        assert _ok(service.compute_hash("abc")).algorithm == "SHA-3-256"

    @pytest.mark.parametrize("name", ["MD5", "SHA-1", "SHA-999"])
    def test_insecure_default_rejected(
        self, registry: AlgorithmRegistry, name: str
    ) -> None:
        """Небезопасный или неизвестный default -> ConfigurationError."""
        with pytest.raises(ConfigurationError) as exc_info:
            DigestService(config=DigestConfig(default_algorithm=name), registry=registry)

        assert exc_info.value.setting == "default_algorithm"

    def test_uses_default_registry(self) -> None:
        """Без аргументов используется реестр по умолчанию."""
        assert _ok(DigestService().compute_hash("abc")).hex_digest == ABC_SHA256


# ==============================================================================
# SUCCESSFUL COMPUTATION
# ==============================================================================


class TestComputeHash:
    """Тесты успешного вычисления."""

    def test_abc_vector(self, service: DigestService) -> None:
        """SHA-256("abc") совпадает с эталоном."""
        result = _ok(service.compute_hash("abc", "SHA-256"))

        assert result.hex_digest == ABC_SHA256
        assert result.algorithm == "SHA-256"
        assert result.original_data == "abc"

    def test_default_algorithm_used(self, service: DigestService) -> None:
        """None -> алгоритм по умолчанию."""
        assert _ok(service.compute_hash("abc")).hex_digest == ABC_SHA256

    def test_deterministic(self, service: DigestService) -> None:
        """Одинаковый вход -> одинаковый дайджест."""
        first = _ok(service.compute_hash("Hello, world", "SHA-512"))
        second = _ok(service.compute_hash("Hello, world", "SHA-512"))

        assert first.hex_digest == second.hex_digest

    @pytest.mark.parametrize("name", SECURE_NAMES)
    def test_length_invariant(
        self, service: DigestService, registry: AlgorithmRegistry, name: str
    ) -> None:
        """Длина hex равна 2 * digest_size."""
        result = _ok(service.compute_hash("payload", name))

        assert len(result.hex_digest) == 2 * registry.resolve(name).digest_size
        assert result.hex_digest == result.hex_digest.lower()

    @pytest.mark.parametrize("name", ["sha-256", "  SHA-256  ", "Sha-256", "sha256"])
    def test_name_tolerance(self, service: DigestService, name: str) -> None:
        """Регистр и пробелы в имени не влияют на результат."""
        result = _ok(service.compute_hash("abc", name))

        assert result.algorithm == "SHA-256"
        assert result.hex_digest == ABC_SHA256

    def test_sanitized_input_hashed(self, service: DigestService) -> None:
        """Хешируется санитизированная строка."""
        messy = _ok(service.compute_hash("  Hello" + chr(0xA0) + "  World \n"))
        clean = _ok(service.compute_hash("Hello World"))

        assert messy.original_data == "Hello World"
        assert messy.hex_digest == clean.hex_digest

    def test_whitespace_only_hashes_empty_string(self, service: DigestService) -> None:
        """Только пробелы -> дайджест пустой строки."""
        result = _ok(service.compute_hash("   "))

        assert result.original_data == ""
        assert result.hex_digest == EMPTY_SHA256

    def test_context_prefix(self, service: DigestService) -> None:
        """Контекстный префикс добавляется перед санитизированным вводом."""
        prefix = "StudentName: Alice Data: "
        result = _ok(service.compute_hash("  payload ", context=prefix))

        assert result.original_data == prefix + "payload"
        assert result.hex_digest == sha256((prefix + "payload").encode("utf-8")).hex()

    def test_utf8_encoding(self, service: DigestService) -> None:
        """Строка кодируется в UTF-8."""
        result = _ok(service.compute_hash("Привет"))

        assert result.hex_digest == sha256("Привет".encode("utf-8")).hex()

    def test_timestamp_and_timing(self, service: DigestService) -> None:
        """Время вычисления в UTC, длительность неотрицательна."""
        result = _ok(service.compute_hash("abc"))

        assert result.computed_at.utcoffset() == timedelta(0)
        assert result.elapsed_micros >= 0


# ==============================================================================
# ALGORITHM REJECTION
# ==============================================================================


class TestAlgorithmRejection:
    """Тесты отклонения алгоритмов."""

    @pytest.mark.parametrize("name", ["MD5", "md5", "SHA-1", "SHA1"])
    def test_insecure(self, service: DigestService, name: str) -> None:
        """Denylist -> ALGORITHM_INSECURE."""
        error = _err(service.compute_hash("abc", name))

        assert error.kind is ErrorKind.ALGORITHM_INSECURE
        assert "deprecated and insecure" in error.user_message
        assert error.status_hint == 400

    def test_unknown_lists_secure_set(self, service: DigestService) -> None:
        """Неизвестный алгоритм -> ALGORITHM_NOT_SUPPORTED со списком."""
        error = _err(service.compute_hash("abc", "SHA-999"))

        assert error.kind is ErrorKind.ALGORITHM_NOT_SUPPORTED
        for name in SECURE_NAMES:
            assert name in error.user_message
        assert "MD5" not in error.user_message

    @pytest.mark.parametrize("name", ["", "SHA 256", "SHA-256; DROP", "MD5!"])
    def test_bad_format_not_supported(self, service: DigestService, name: str) -> None:
        """Ошибка формата классифицируется как NOT_SUPPORTED."""
        error = _err(service.compute_hash("abc", name))

        assert error.kind is ErrorKind.ALGORITHM_NOT_SUPPORTED

    def test_input_checked_before_algorithm(self, service: DigestService) -> None:
        """Невалидный ввод имеет приоритет над невалидным алгоритмом."""
        error = _err(service.compute_hash(None, "MD5"))

        assert error.kind is ErrorKind.INPUT_VALIDATION_FAILED


# ==============================================================================
# INPUT REJECTION
# ==============================================================================


class TestInputRejection:
    """Тесты отклонения ввода."""

    def test_none(self, service: DigestService) -> None:
        """None -> INPUT_VALIDATION_FAILED."""
        error = _err(service.compute_hash(None))

        assert error.kind is ErrorKind.INPUT_VALIDATION_FAILED
        assert error.details == ("Input cannot be null",)

    def test_null_byte(self, service: DigestService) -> None:
        """NUL отклоняется."""
        error = _err(service.compute_hash("abc" + chr(0) + "def"))

        assert error.kind is ErrorKind.INPUT_VALIDATION_FAILED
        assert "Input contains null bytes which are not allowed" in error.details

    def test_length_boundary(self, service: DigestService) -> None:
        """10000 символов проходят, 10001 нет."""
        assert isinstance(service.compute_hash("a" * 10_000), DigestResult)

        error = _err(service.compute_hash("a" * 10_001))
        assert error.details == (
            "Input length (10001) exceeds maximum allowed length (10000)",
        )

    def test_configured_limit(self, registry: AlgorithmRegistry) -> None:
        """Лимит берётся из конфигурации."""
        service = DigestService(config=DigestConfig(max_input_length=5), registry=registry)

        error = _err(service.compute_hash("abcdef"))
        assert "exceeds maximum allowed length (5)" in error.user_message


# ==============================================================================
# NO LEAKAGE
# ==============================================================================


class TestNoLeakage:
    """Внутренние сбои не раскрываются вызывающей стороне."""

    def test_primitive_failure(
        self,
        service: DigestService,
        registry: AlgorithmRegistry,
        monkeypatch: pytest.MonkeyPatch,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Сбой вычисления -> generic сообщение, детали только в логе."""

        def boom(name: str, data: bytes) -> bytes:
            raise RuntimeError("/opt/keys/secret.pem is unreadable")

        monkeypatch.setattr(registry, "compute", boom)

        with caplog.at_level(logging.ERROR, logger="checksumguard"):
            error = _err(service.compute_hash("abc"))

        assert error.kind is ErrorKind.COMPUTATION_FAILED
        assert error.user_message == "Hash computation failed"
        assert error.details == ()
        assert "secret" not in str(error.to_dict())
        assert "secret" not in repr(error)
        assert error.status_hint == 500

        logged = [r for r in caplog.records if getattr(r, "correlation_id", None)]
        assert logged and logged[-1].correlation_id == error.correlation_id

    def test_encoder_failure(
        self, service: DigestService, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Сбой hex-кодирования -> COMPUTATION_FAILED."""

        def broken(data: bytes) -> str:
            raise ValueError("encoder state dump")

        monkeypatch.setattr("checksumguard.service.bytes_to_hex", broken)

        error = _err(service.compute_hash("abc"))

        assert error.kind is ErrorKind.COMPUTATION_FAILED
        assert "encoder" not in error.user_message

    def test_input_never_logged(
        self, service: DigestService, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Текст ввода не попадает в лог."""
        with caplog.at_level(logging.DEBUG, logger="checksumguard"):
            service.compute_hash("very-private-text-42")
            service.compute_hash("very-private-text-42" + chr(0))

        assert "very-private-text-42" not in caplog.text

    def test_correlation_ids_unique(self, service: DigestService) -> None:
        """Каждая ошибка получает свой correlation id."""
        ids = {_err(service.compute_hash(None)).correlation_id for _ in range(50)}

        assert len(ids) == 50


# ==============================================================================
# VERIFY / QUERIES
# ==============================================================================


class TestVerifyHash:
    """Тесты verify_hash()."""

    def test_match(self, service: DigestService) -> None:
        """Совпадающий дайджест -> True."""
        assert service.verify_hash("abc", ABC_SHA256) is True

    def test_uppercase_expected(self, service: DigestService) -> None:
        """Ожидаемый hex сравнивается без учёта регистра."""
        assert service.verify_hash("abc", " " + ABC_SHA256.upper() + " ") is True

    def test_mismatch(self, service: DigestService) -> None:
        """Другой дайджест -> False."""
        assert service.verify_hash("abd", ABC_SHA256) is False

    def test_other_algorithm(self, service: DigestService) -> None:
        """Дайджест другого алгоритма не совпадает."""
        assert service.verify_hash("abc", ABC_SHA256, "SHA-3-256") is False

    @pytest.mark.parametrize("expected", ["", "xyz", "abc", "ab cd", None])
    def test_malformed_expected(self, service: DigestService, expected: object) -> None:
        """Некорректный ожидаемый hex -> INPUT_VALIDATION_FAILED."""
        error = _err(service.verify_hash("abc", expected))  # type: ignore[arg-type]

        assert error.kind is ErrorKind.INPUT_VALIDATION_FAILED

    def test_insecure_algorithm(self, service: DigestService) -> None:
        """Denylist отклоняется и в verify_hash."""
        error = _err(service.verify_hash("abc", ABC_SHA256, "MD5"))

        assert error.kind is ErrorKind.ALGORITHM_INSECURE


class TestQueries:
    """Тесты list_supported_algorithms() и is_algorithm_secure()."""

    def test_list_supported(self, service: DigestService) -> None:
        """Только secure алгоритмы в порядке whitelist."""
        names = tuple(d.name for d in service.list_supported_algorithms())

        assert names == SECURE_NAMES

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("SHA-256", True),
            ("sha-3-512", True),
            ("MD5", False),
            ("SHA-1", False),
            ("nope", False),
            (None, False),
        ],
    )
    def test_is_algorithm_secure(
        self, service: DigestService, name: object, expected: bool
    ) -> None:
        assert service.is_algorithm_secure(name) is expected  # type: ignore[arg-type]

    @pytest.mark.parametrize(
        "name",
        [
            "SHA-256",
            " sha3_384 ",
            "MD5",
            "SHA-999",
            "MD5!",
            chr(0x17F) + "ha-256",
            chr(0x17F) + "ha-1",
        ],
    )
    def test_secure_check_agrees_with_compute(
        self, service: DigestService, name: str
    ) -> None:
        """is_algorithm_secure() совпадает с исходом compute_hash()."""
        outcome = service.compute_hash("abc", name)

        assert service.is_algorithm_secure(name) is isinstance(outcome, DigestResult)

    def test_non_ascii_name_rejected_by_format(self, service: DigestService) -> None:
        """Не-ASCII имя отклоняется на стадии формата, а не складывается в SHA-256."""
        error = _err(service.compute_hash("abc", chr(0x17F) + "ha-256"))

        assert error.kind is ErrorKind.ALGORITHM_NOT_SUPPORTED
        assert error.details[0].startswith("Algorithm name contains invalid characters")
        assert not service.is_algorithm_secure(chr(0x17F) + "ha-256")


# ==============================================================================
# CONCURRENCY
# ==============================================================================


class TestConcurrency:
    """Тесты параллельного использования одного сервиса."""

    def test_thread_pool(self, service: DigestService) -> None:
        """Параллельные вызовы дают те же результаты, что и последовательные."""
        inputs = [f"message-{i}" for i in range(200)]
        algorithms = [SECURE_NAMES[i % len(SECURE_NAMES)] for i in range(200)]

        expected = [
            _ok(service.compute_hash(text, name)).hex_digest
            for text, name in zip(inputs, algorithms)
        ]

        with ThreadPoolExecutor(max_workers=16) as pool:
            actual = list(
                pool.map(
                    lambda pair: _ok(service.compute_hash(*pair)).hex_digest,
                    zip(inputs, algorithms),
                )
            )

        assert actual == expected
