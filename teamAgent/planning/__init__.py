"""Task decomposition: plan schema, LLM decomposer and heuristic fallback."""

from .decomposer import TaskDecomposer, parse_decomposition
from .heuristics import classify_prompt, extract_title, heuristic_decomposition
from .schema import (
    DecomposedTask,
    ExecutionMode,
    ExecutionStrategy,
    IOContract,
    IOInput,
    IOOutput,
    Requirement,
    SuggestedAgent,
    TaskAnalysis,
    TaskDecomposition,
    validate_decomposition,
)

__all__ = [
    "DecomposedTask",
    "ExecutionMode",
    "ExecutionStrategy",
    "IOContract",
    "IOInput",
    "IOOutput",
    "Requirement",
    "SuggestedAgent",
    "TaskAnalysis",
    "TaskDecomposer",
    "TaskDecomposition",
    "classify_prompt",
    "extract_title",
    "heuristic_decomposition",
    "parse_decomposition",
    "validate_decomposition",
]
