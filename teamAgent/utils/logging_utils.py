"""Logging utilities for teamAgent."""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Union

ROOT_LOGGER_NAME = "teamAgent"


def setup_logging(
    log_dir: Union[str, Path] = "logs",
    console_level: Union[int, str] = logging.WARNING,
) -> logging.Logger:
    """Setup logging configuration for teamAgent.

    Args:
        log_dir: Directory for the session log file (created on demand)
        console_level: Minimum level echoed to the console

    Returns:
        Configured logger instance
    """
    logs_dir = Path(log_dir)
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_file = logs_dir / f"teamagent_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(logging.DEBUG)  # Child loggers inherit; handlers filter
    logger.propagate = False

    for handler in list(logger.handlers):
        handler.close()
    logger.handlers = []

    # File handler (detailed logs)
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    file_handler.setFormatter(file_formatter)

    # Console handler (user-friendly)
    console_handler = logging.StreamHandler()
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    logger.info("=" * 80)
    logger.info("teamAgent session started")
    logger.info(f"Log file: {log_file}")
    logger.info("=" * 80)

    return logger


def _preview(text: str, limit: int) -> str:
    if len(text) > limit:
        return text[:limit] + "... (truncated)"
    return text


def log_tool_call(logger: logging.Logger, tool_name: str, args: Dict[str, Any]) -> None:
    """Log tool invocation.

    Args:
        logger: Logger instance
        tool_name: Name of the tool being called
        args: Tool arguments
    """
    logger.info(f"Tool call: {tool_name}")
    logger.debug(f"  Arguments: {json.dumps(args, ensure_ascii=False, indent=2, default=str)}")


def log_tool_result(logger: logging.Logger, tool_name: str, result: Any, success: bool = True) -> None:
    """Log tool execution result (preview truncated to 500 chars)."""

    status = "✓ Success" if success else "✗ Failed"
    logger.info(f"Tool result: {tool_name} - {status}")
    logger.debug(f"  Result: {_preview(str(result), 500)}")


def log_model_selection(logger: logging.Logger, phase: str, model_id: str, reason: str = "") -> None:
    """Log model selection decision.

    Args:
        logger: Logger instance
        phase: Execution phase (decompose/task/synthesis)
        model_id: Selected model ID
        reason: Reason for selection
    """
    logger.info(f"Model selected for {phase}: {model_id}")
    if reason:
        logger.debug(f"  Reason: {reason}")


def log_error(logger: logging.Logger, error: Exception, context: str = "") -> None:
    """Log error with context and traceback."""

    logger.error(f"Error occurred: {type(error).__name__}: {error}")
    if context:
        logger.error(f"  Context: {context}")
    logger.debug("Full traceback:", exc_info=error)


def log_prompt(logger: logging.Logger, phase: str, prompt: str, max_length: Optional[int] = None) -> None:
    """Log system prompt being used.

    Args:
        logger: Logger instance
        phase: Phase name (decompose/agent/synthesis)
        prompt: System prompt content
        max_length: Truncate the logged prompt to this many characters
    """
    body = _preview(prompt, max_length) if max_length else prompt
    logger.debug(f"\n{'='*80}")
    logger.debug(f"System Prompt for {phase}:")
    logger.debug(f"{'='*80}")
    logger.debug(body)
    logger.debug(f"{'='*80}\n")


def log_visible_tools(logger: logging.Logger, phase: str, tools: Iterable[Any]) -> None:
    """Log visible tools for current phase."""

    tool_names = [t.name if hasattr(t, "name") else str(t) for t in tools]
    logger.info(f"Visible tools for {phase}: [{', '.join(tool_names)}]")
    logger.debug(f"  Total: {len(tool_names)} tools")


def log_turn(logger: logging.Logger, agent_name: str, turn: int, max_turns: int, tool_calls: int) -> None:
    """Log one agent loop turn."""

    logger.info(f"[{agent_name}] turn {turn}/{max_turns} - {tool_calls} tool call(s)")


def log_plan_created(logger: logging.Logger, plan: Dict[str, Any]) -> None:
    """Log plan creation details.

    Args:
        logger: Logger instance
        plan: Plan dictionary (TaskDecomposition.model_dump())
    """
    sub_tasks = plan.get("sub_tasks", [])
    logger.info(f"\n{'='*80}")
    logger.info("Plan created:")
    logger.info(f"  Title: {plan.get('main_task_title', 'N/A')}")
    logger.info(f"  Strategy: {plan.get('strategy', 'N/A')}")
    logger.info(f"  Total tasks: {len(sub_tasks)}")
    for i, task in enumerate(sub_tasks, 1):
        logger.info(f"  Task {i}:")
        logger.info(f"    - ID: {task.get('temp_id')}")
        logger.info(f"    - Title: {task.get('title')}")
        logger.info(f"    - Depends on: {task.get('depends_on', [])}")
        logger.info(f"    - Mode: {task.get('execution_mode')} / {task.get('model_hint')}")
    logger.info(f"{'='*80}\n")
