from pydantic import BaseModel, ConfigDict, Field


class GenerationRequest(BaseModel):
    """发送给生成后端的请求；同一 SourceUnit 的所有尝试只替换 model"""
    model_config = ConfigDict(frozen=True, protected_namespaces=())

    model: str = Field(..., description="目标后端（模型）标识")
    prompt: str = Field(..., description="渲染后的提示词")
    options: dict = Field(default_factory=dict, description="num_ctx / num_predict 等生成参数")

    def for_backend(self, model: str) -> "GenerationRequest":
        return self.model_copy(update={"model": model})


class AttemptDescriptor(BaseModel):
    """Position of one generation call inside the backend x attempt matrix."""
    model_config = ConfigDict(frozen=True)

    backend: str
    attempt: int = Field(..., ge=1, description="该后端内的尝试序号（从 1 开始）")
    ordinal: int = Field(..., ge=1, description="全局调用序号")


class CandidateOutput(BaseModel):
    """一次生成尝试的输出"""
    raw_text: str
    normalized_text: str
    backend: str
    attempt: int
