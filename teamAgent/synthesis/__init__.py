"""Result synthesis."""

from .engine import SynthesisEngine, SynthesisResult, TaskResult

__all__ = ["SynthesisEngine", "SynthesisResult", "TaskResult"]
