"""
Helpers shared by the services: threadpool offloading and the normalized
result shape used by mutation methods.
"""
import asyncio
from typing import Any, Callable, Dict, Optional


# We run blocking store calls inside this thread helper to keep async context responsive.
async def run_blocking(fn: Callable, *args, **kwargs) -> Any:
    return await asyncio.to_thread(fn, *args, **kwargs)


def make_result(
    ok: bool,
    data: Any = None,
    error: Optional[str] = None,
    diagnostics: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Normalized mutation result:
        {"ok": True, "data": ..., "diagnostics": {...}}
        {"ok": False, "error": "...", "diagnostics": {...}}
    """
    res: Dict[str, Any] = {"ok": ok}
    if ok:
        res["data"] = data
    else:
        res["error"] = error or "unknown_error"
    res["diagnostics"] = diagnostics or {}
    return res


def clean_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None
