"""
LLM 客户端 - Ollama 生成调用封装

特性：
1. 使用 ollama.Client 流式生成，单次尝试有固定超时
2. 首选模型失败后依次尝试其他已安装模型，每个模型最多 3 次
3. 输出校验失败时用相同提示词重新采样（不修改提示词）
4. 每次尝试的原始输出写入 debug 目录，便于离线排查
"""
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from pathlib import Path
from typing import Any, Iterable, Iterator

import httpx
import ollama

from src.schemas import (
    Accepted,
    AttemptDescriptor,
    CandidateOutput,
    GenerationRequest,
    GenerationSettings,
)
from src.utils.core.logger import get_logger
from src.utils.io.file_ops import clean_llm_code_output, safe_filename, write_text
from src.utils.validator import ValidationRules, validate_output
from .errors import (
    BackendUnavailableError,
    GenerationExhaustedError,
    GenerationTimeoutError,
    GenerationTransportError,
)

logger = get_logger(__name__)

TRANSPORT_ERRORS = (
    ollama.ResponseError,
    ollama.RequestError,
    httpx.HTTPError,
    ConnectionError,
    TimeoutError,
)


class GenerationClient:
    """
    生成客户端 - 封装 Ollama 调用与重试矩阵

    ``backend`` is anything exposing ``list()`` and
    ``generate(model=, prompt=, options=, stream=True)`` like ``ollama.Client``.
    """

    def __init__(
        self,
        settings: GenerationSettings,
        debug_dir: str | Path,
        backend: Any | None = None,
    ):
        self.settings = settings
        self.debug_dir = Path(debug_dir)
        if backend is None:
            backend = ollama.Client(host=settings.host, timeout=settings.timeout_sec)
        self.backend = backend

        logger.info(f"GenerationClient initialized: host={settings.host}, model={settings.model}")

    def list_models(self) -> list[str]:
        """
        List model identifiers served by the backend.

        Raises:
            BackendUnavailableError: The backend cannot be reached
        """
        try:
            response = self.backend.list()
        except TRANSPORT_ERRORS as e:
            raise BackendUnavailableError(
                f"Failed to connect to Ollama server at {self.settings.host}: {e}"
            ) from e

        names = []
        for entry in response["models"] or []:
            name = entry.get("model") or entry.get("name")
            if name:
                names.append(name)
        return names

    def candidate_backends(self, available: Iterable[str] | None = None) -> list[str]:
        """Primary model first, then every other available model once."""
        backends = [self.settings.model]
        if self.settings.use_all_models:
            for name in available or []:
                if name not in backends:
                    backends.append(name)
        return backends

    def iter_attempts(self, backends: Iterable[str]) -> Iterator[AttemptDescriptor]:
        """Lazily walk the backend x attempt matrix (bounded: backends * attempts_per_backend)."""
        ordinal = 0
        for backend in backends:
            for attempt in range(1, self.settings.attempts_per_backend + 1):
                ordinal += 1
                yield AttemptDescriptor(backend=backend, attempt=attempt, ordinal=ordinal)

    def complete(self, request: GenerationRequest) -> str:
        """
        Issue one streamed generation call and concatenate the chunks.

        The stream is consumed on a worker thread so the deadline bounds the
        whole call, including a stream that stalls between chunks.

        Raises:
            GenerationTimeoutError: The per-attempt deadline passed
            GenerationTransportError: Transport or backend failure
        """
        stop = threading.Event()
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="generation")
        try:
            future = executor.submit(self._consume_stream, request, stop)
            try:
                return future.result(timeout=self.settings.timeout_sec)
            except FutureTimeoutError as e:
                # the worker drops the stream at its next chunk or read timeout
                stop.set()
                raise GenerationTimeoutError(
                    f"generation exceeded {self.settings.timeout_sec:g}s"
                ) from e
        finally:
            executor.shutdown(wait=False)

    def _consume_stream(self, request: GenerationRequest, stop: threading.Event) -> str:
        deadline = time.monotonic() + self.settings.timeout_sec
        parts: list[str] = []
        try:
            stream = self.backend.generate(
                model=request.model,
                prompt=request.prompt,
                options=request.options,
                stream=True,
            )
            for chunk in stream:
                if stop.is_set():
                    break
                parts.append(chunk["response"] or "")
                if time.monotonic() > deadline:
                    raise GenerationTimeoutError(
                        f"generation exceeded {self.settings.timeout_sec:g}s"
                    )
        except TRANSPORT_ERRORS as e:
            raise GenerationTransportError(str(e)) from e
        return "".join(parts)

    def generate(
        self,
        request: GenerationRequest,
        rules: ValidationRules,
        available: Iterable[str] | None = None,
        label: str | None = None,
    ) -> tuple[CandidateOutput, Accepted]:
        """
        Sample until a candidate passes validation or the matrix is exhausted.

        Args:
            request: Request built once for the unit (prompt is never mutated)
            rules: Structural checklist for the unit
            available: Alternative backends discovered from ``list_models``
            label: Debug artifact subdirectory (usually the unit stem)

        Returns:
            (candidate, verdict) for the first accepted output

        Raises:
            GenerationExhaustedError: Every backend failed every attempt
        """
        backends = self.candidate_backends(available)
        logger.info(f"Available models: {backends}")

        attempts = 0
        last_reason = None
        for descriptor in self.iter_attempts(backends):
            attempts += 1
            logger.info(
                f"Attempt {descriptor.attempt} of {self.settings.attempts_per_backend} "
                f"to generate unit tests with model {descriptor.backend}"
            )
            try:
                raw_output = self.complete(request.for_backend(descriptor.backend))
            except GenerationTransportError as e:
                last_reason = f"transport: {e}"
                logger.warning(
                    f"Attempt {descriptor.attempt} failed with model {descriptor.backend}: {e}"
                )
                time.sleep(self.settings.backoff_sec)
                continue

            candidate = CandidateOutput(
                raw_text=raw_output,
                normalized_text=clean_llm_code_output(raw_output),
                backend=descriptor.backend,
                attempt=descriptor.attempt,
            )
            self._save_debug_artifact(candidate, label)

            verdict = validate_output(candidate.normalized_text, rules)
            if isinstance(verdict, Accepted):
                logger.info(
                    f"Successfully generated unit tests ({len(verdict.text)} bytes) "
                    f"with model {descriptor.backend}"
                )
                return candidate, verdict

            last_reason = str(verdict)
            logger.warning(f"Validation failed: {verdict}")

        logger.error(f"Failed to generate unit tests after {attempts} attempts with all models")
        raise GenerationExhaustedError(attempts, last_reason)

    def debug_artifact_path(self, backend: str, attempt: int, label: str | None = None) -> Path:
        base = self.debug_dir / safe_filename(label) if label else self.debug_dir
        return base / f"raw_response_{safe_filename(backend)}_attempt_{attempt}.txt"

    def _save_debug_artifact(self, candidate: CandidateOutput, label: str | None = None) -> None:
        path = self.debug_artifact_path(candidate.backend, candidate.attempt, label)
        try:
            write_text(path, candidate.raw_text)
        except OSError as e:
            logger.error(f"Failed to save raw response to {path}: {e}")
