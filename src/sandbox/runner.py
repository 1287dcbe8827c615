"""
Sandbox compiler/runner.

Every candidate is compiled, executed and measured inside its own temporary
directory. The directory is owned by exactly one run and removed on every exit
path, including stage failures.
"""
import os
import re
import shutil
import subprocess
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from src.engine.errors import CompileError, CoverageToolError, TestRunError
from src.schemas import ProcessOutput, SandboxRun, SandboxSettings, SourceUnit
from src.utils.core.logger import get_logger
from src.utils.io.file_ops import write_text

logger = get_logger(__name__)

# gcc/clang diagnostic line: "file.cpp:12:5: error: ..." or "fatal error:"
_HARD_ERROR = re.compile(r"^[^\n]*:\d+(?::\d+)?: (?:fatal )?error:", re.MULTILINE)


class SandboxRunner:
    """Compile, run and measure one accepted candidate in isolation."""

    def __init__(self, settings: SandboxSettings, language_standard: str = "c++17"):
        self.settings = settings
        self.language_standard = language_standard

    @contextmanager
    def sandbox(self) -> Iterator[Path]:
        """Allocate a fresh working directory; removed when the block exits."""
        with tempfile.TemporaryDirectory(prefix=self.settings.temp_prefix) as tmp:
            workdir = Path(tmp)
            logger.debug(f"Allocated sandbox {workdir}")
            yield workdir
        logger.debug(f"Removed sandbox {workdir}")

    def materialize(self, workdir: Path, test_text: str, test_filename: str, unit: SourceUnit) -> Path:
        """
        Write the test file and copy the unit's sources into ``workdir``.

        Returns:
            Path of the implementation file inside the sandbox
        """
        write_text(workdir / test_filename, test_text)

        source = unit.implementation_path
        sandbox_source = workdir / source.name
        shutil.copyfile(source, sandbox_source)

        header = unit.header_path
        if header.exists():
            shutil.copyfile(header, workdir / header.name)
        return sandbox_source

    def compile_command(self, workdir: Path, test_filename: str, source_filename: str) -> list[str]:
        s = self.settings
        return [
            s.compiler,
            f"-std={self.language_standard}",
            *(f"-I{path}" for path in s.include_dirs),
            f"-I{workdir}",
            *(f"-L{path}" for path in s.lib_dirs),
            *s.coverage_flags,
            test_filename,
            source_filename,
            "-o",
            str(workdir / s.binary_name),
            *(f"-l{lib}" for lib in s.link_libs),
            *s.extra_link_flags,
        ]

    def coverage_command(self, workdir: Path, source_filename: str) -> list[str]:
        args = [self.settings.coverage_tool, "-r"]
        stem = Path(source_filename).stem
        if not (workdir / f"{stem}.gcno").exists():
            # Newer gcc names notes after the output binary: run_tests-calc.gcno
            prefixed = sorted(workdir.glob(f"*-{stem}.gcno"))
            if prefixed:
                args += ["-o", prefixed[0].name]
        args.append(source_filename)
        return args

    def _execute(self, args: list[str], cwd: Path, env: dict | None = None) -> ProcessOutput:
        logger.info(f"Running: {' '.join(args)}")
        try:
            result = subprocess.run(
                args,
                cwd=cwd,
                env=env,
                capture_output=True,
                text=True,
                timeout=self.settings.timeout_sec,
            )
        except FileNotFoundError as e:
            return ProcessOutput(args=args, returncode=127, stderr=str(e))
        except subprocess.TimeoutExpired as e:
            return ProcessOutput(
                args=args,
                returncode=124,
                stdout=_decode(e.stdout),
                stderr=f"{_decode(e.stderr)}\ntimed out after {e.timeout}s".strip(),
            )
        return ProcessOutput(
            args=args,
            returncode=result.returncode,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
        )

    def run(self, test_text: str, unit: SourceUnit, test_filename: str) -> SandboxRun:
        """
        Compile, execute and measure ``test_text`` against ``unit``.

        Raises:
            CompileError: Nonzero compiler exit or a hard error diagnostic
            TestRunError: The test binary exited nonzero
            CoverageToolError: The coverage tool exited nonzero
        """
        with self.sandbox() as workdir:
            sandbox_source = self.materialize(workdir, test_text, test_filename, unit)
            source_filename = sandbox_source.name

            env = dict(os.environ)
            env["GCOV_PREFIX"] = str(workdir)
            env["GCOV_PREFIX_STRIP"] = "0"
            compiled = self._execute(
                self.compile_command(workdir, test_filename, source_filename), workdir, env
            )
            if compiled.returncode != 0 or _HARD_ERROR.search(compiled.combined):
                raise CompileError(compiled)
            logger.info("Tests compiled successfully")

            binary = workdir / self.settings.binary_name
            ran = self._execute([str(binary)], workdir)
            if ran.returncode != 0:
                raise TestRunError(ran)
            logger.info("Tests passed successfully")

            coverage = self._execute(self.coverage_command(workdir, source_filename), workdir)
            if coverage.returncode != 0:
                raise CoverageToolError(coverage)

            return SandboxRun(
                workdir=workdir,
                binary_path=binary,
                test_file=test_filename,
                source_file=source_filename,
                compile=compiled,
                run=ran,
                coverage=coverage,
            )


def _decode(data) -> str:
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    return data
