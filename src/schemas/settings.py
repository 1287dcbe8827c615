from pydantic import BaseModel, ConfigDict, Field


class GenerationSettings(BaseModel):
    """Ollama 生成参数"""
    model_config = ConfigDict(frozen=True, protected_namespaces=())

    host: str = Field(default="http://localhost:11434", description="Ollama 服务地址")
    model: str = Field(default="qwen2.5-coder:7b", description="首选模型")
    num_ctx: int = Field(default=131072, description="上下文窗口大小")
    num_predict: int = Field(default=1024, description="最大输出 token 数")
    attempts_per_backend: int = Field(default=3, ge=1)
    timeout_sec: float = Field(default=300, gt=0, description="单次尝试超时（秒）")
    backoff_sec: float = Field(default=1.0, ge=0, description="传输错误后的等待时间")
    use_all_models: bool = Field(default=True, description="首选模型失败后尝试其他已安装模型")

    @property
    def options(self) -> dict:
        return {"num_ctx": self.num_ctx, "num_predict": self.num_predict}


class TestRequirements(BaseModel):
    """Structural requirements shared by the prompt and the output validator."""
    model_config = ConfigDict(frozen=True)
    __test__ = False

    language_standard: str = "c++17"
    system_includes: list[str] = Field(
        default_factory=lambda: ["gtest/gtest.h", "cmath", "stdexcept"]
    )
    suite_name: str = "CalculatorTest"
    test_macro: str = "TEST"
    tests_per_symbol: int = Field(default=2, ge=1)
    target_symbols: list[str] = Field(default_factory=lambda: ["add", "subtract"])
    min_length: int = Field(default=250, ge=0)


class DiscoverySettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    extensions: list[str] = Field(default_factory=lambda: [".cpp", ".h"])
    ignore_paths: list[str] = Field(default_factory=list)
    infer_symbols: bool = False


class SandboxSettings(BaseModel):
    """Compiler / runner / coverage tool command line contract"""
    model_config = ConfigDict(frozen=True)

    compiler: str = "g++"
    coverage_tool: str = "gcov"
    include_dirs: list[str] = Field(
        default_factory=lambda: ["/opt/homebrew/opt/googletest/include", "/usr/local/include"]
    )
    lib_dirs: list[str] = Field(
        default_factory=lambda: ["/opt/homebrew/opt/googletest/lib", "/usr/local/lib"]
    )
    link_libs: list[str] = Field(default_factory=lambda: ["gtest", "gtest_main"])
    extra_link_flags: list[str] = Field(default_factory=lambda: ["-pthread"])
    coverage_flags: list[str] = Field(
        default_factory=lambda: ["-fprofile-arcs", "-ftest-coverage"]
    )
    binary_name: str = "run_tests"
    temp_prefix: str = "unit-test-generator-"
    timeout_sec: float | None = Field(
        default=None, description="子进程超时；None 表示不限制"
    )


class CoverageSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    threshold: float = Field(default=80.0, ge=0, le=100)


class PathSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    input_dir: str = "codebase"
    output_dir: str = "generated_tests"
    debug_dir: str = "data/debug"
    reports_dir: str = "data/reports"
    test_suffix: str = "_test"
    test_extension: str = ".cpp"
