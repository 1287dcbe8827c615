"""
Prompt rendering for unit test generation.

The prompt is a pure function of the SourceUnit and the fixed requirements:
retries and backend fallback re-send exactly the same text.
"""
from pathlib import Path

from src.schemas import GenerationRequest, GenerationSettings, SourceUnit, TestRequirements
from src.utils.core.logger import get_logger
from src.utils.io.file_ops import load_prompt_template
from src.utils.validator import required_includes

logger = get_logger(__name__)

DEFAULT_TEMPLATE_PATH = Path("configs/prompts/unit_test/user.txt")


def render_source_code(unit: SourceUnit) -> str:
    """Header first, then implementation, each preceded by its file name."""
    sections = []
    for path, text in (
        (unit.header_path, unit.header_content),
        (unit.implementation_path, unit.implementation_content),
    ):
        if text is None:
            continue
        sections.append(f"// {path.name}\n{text.rstrip()}")
    return "\n\n".join(sections)


class PromptBuilder:
    """Renders ``configs/prompts/unit_test/user.txt`` for a SourceUnit."""

    def __init__(
        self,
        requirements: TestRequirements,
        template_path: str | Path = DEFAULT_TEMPLATE_PATH,
    ):
        self.requirements = requirements
        self.template_path = Path(template_path)
        self.template = load_prompt_template(self.template_path)

    def build(self, unit: SourceUnit) -> str:
        """
        Render the prompt for ``unit``.

        Args:
            unit: Source unit to generate tests for

        Returns:
            Prompt text; identical unit content always yields identical text
        """
        req = self.requirements
        symbols = list(unit.target_symbols or req.target_symbols)
        includes = required_includes(req, unit)

        return self.template.format(
            language_standard_display=req.language_standard.upper(),
            include_list=", ".join(f"`{include}`" for include in includes),
            include_block="\n".join(includes),
            test_macro=req.test_macro,
            suite_name=req.suite_name,
            symbol_list=", ".join(symbols),
            test_count=req.tests_per_symbol * len(symbols),
            tests_per_symbol=req.tests_per_symbol,
            source_code=render_source_code(unit),
        )

    def build_request(self, unit: SourceUnit, settings: GenerationSettings) -> GenerationRequest:
        """Build the request once per unit; attempts swap only the model."""
        prompt = self.build(unit)
        logger.debug(f"Rendered prompt for {unit.path} ({len(prompt)} chars)")
        return GenerationRequest(
            model=settings.model,
            prompt=prompt,
            options=settings.options,
        )
