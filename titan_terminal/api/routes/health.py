from fastapi import APIRouter, Depends

from titan_terminal.api.dependencies import get_runtime
from titan_terminal.realtime.runtime import TerminalRuntime

router = APIRouter()


@router.get("/health")
def health(runtime: TerminalRuntime = Depends(get_runtime)):
    status = runtime.get_status()
    return {
        "status": "ok",
        "stream": status["state"],
        "positions": len(runtime.store),
        "storage_warning": status["storage_warning"],
    }
