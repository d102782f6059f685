"""
Tadka - LangSmith Tracing.

Optional run tracing around model calls.

To enable:
1. Set LANGCHAIN_TRACING_V2=true
2. Set LANGCHAIN_API_KEY=<your-key>
3. Set LANGCHAIN_PROJECT=tadka (optional)

When tracing is off, trace_llm_call yields a run whose end() does nothing.
"""

import logging
from contextlib import asynccontextmanager
from uuid import uuid4

from langsmith import Client as LangSmithClient
from langsmith.run_trees import RunTree

from tadka.config import settings

logger = logging.getLogger(__name__)

# Global state
_langsmith_client: LangSmithClient | None = None
_tracing_enabled: bool = False


class _NoopRun:
    def end(self, **kwargs) -> None:
        pass


def init_tracing() -> bool:
    """
    Initialize LangSmith tracing if configured.

    Returns True if tracing is enabled. Call once at startup.
    """
    global _langsmith_client, _tracing_enabled

    if not settings.langchain_tracing_v2:
        logger.debug("[Tracing] Disabled (set LANGCHAIN_TRACING_V2=true to enable)")
        return False

    if not settings.langchain_api_key:
        logger.warning("[Tracing] LANGCHAIN_API_KEY not set, tracing stays off")
        return False

    try:
        _langsmith_client = LangSmithClient(api_key=settings.langchain_api_key)
    except Exception as e:
        logger.warning(f"[Tracing] Failed to initialize LangSmith: {e}")
        return False

    _tracing_enabled = True
    logger.info(f"[Tracing] LangSmith tracing enabled for project: {settings.langchain_project}")
    return True


def is_tracing_enabled() -> bool:
    return _tracing_enabled


@asynccontextmanager
async def trace_llm_call(
    name: str,
    run_type: str = "llm",
    inputs: dict | None = None,
    metadata: dict | None = None,
):
    """
    Trace one model call.

    Usage:
        async with trace_llm_call("generate:feed", inputs={"prompt": prompt}) as run:
            result = await client.create(...)
            run.end(outputs={"result": result})
    """
    if not _tracing_enabled:
        yield _NoopRun()
        return

    run = RunTree(
        name=name,
        run_type=run_type,
        inputs=inputs or {},
        extra={"metadata": metadata or {}},
        project_name=settings.langchain_project,
        id=uuid4(),
        client=_langsmith_client,
    )

    run.post()
    try:
        yield run
    except Exception as e:
        run.end(error=str(e))
        run.patch()
        raise
    else:
        run.patch()
