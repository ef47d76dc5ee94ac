"""Prompt template builder.

Templates are Jinja2 files under ``teamAgent/config/prompt_templates`` and are
rendered in a sandboxed environment.
"""
from pathlib import Path
from typing import Any, Dict, Optional

from jinja2.sandbox import SandboxedEnvironment

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "config" / "prompt_templates"


class PromptBuilder:
    """Loads and renders prompt templates."""

    DECOMPOSITION_TEMPLATE = "decomposition.jinja2"
    AGENT_TASK_TEMPLATE = "agent_task.jinja2"
    SYNTHESIS_TEMPLATE = "synthesis.jinja2"

    def __init__(self, template_dir: Optional[Path] = None) -> None:
        self.template_dir = Path(template_dir) if template_dir else TEMPLATE_DIR
        self._env = SandboxedEnvironment(trim_blocks=True, lstrip_blocks=True, keep_trailing_newline=False)
        self._cache: Dict[str, str] = {}

    def _load_template(self, name: str) -> str:
        if name not in self._cache:
            full_path = self.template_dir / name
            with open(full_path, "r", encoding="utf-8") as f:
                self._cache[name] = f.read()
        return self._cache[name]

    def render(self, name: str, **params: Any) -> str:
        """Render template ``name`` with ``params``."""

        template = self._load_template(name)
        return self._env.from_string(template).render(**params).strip()

    def decomposition_prompt(self, **params: Any) -> str:
        return self.render(self.DECOMPOSITION_TEMPLATE, **params)

    def agent_task_prompt(self, **params: Any) -> str:
        return self.render(self.AGENT_TASK_TEMPLATE, **params)

    def synthesis_prompt(self, **params: Any) -> str:
        return self.render(self.SYNTHESIS_TEMPLATE, **params)
