"""
Request-scoped access to the application runtime.
"""

from fastapi import HTTPException, Request

from titan_terminal.realtime.runtime import TerminalRuntime


def get_runtime(request: Request) -> TerminalRuntime:
    runtime = getattr(request.app.state, "runtime", None)
    if runtime is None:
        raise HTTPException(status_code=503, detail="Runtime not initialized")
    return runtime
