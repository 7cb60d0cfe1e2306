from time import monotonic
from threading import RLock
from fastapi import Request, HTTPException

from .response import RATE_LIMITED, error_detail

_rate_state = {}
_rate_lock = RLock()

MAX_FAILS = 5
WINDOW = 60
BLOCK = 300


def _prune(now: float):
    stale = [
        key for key, rec in _rate_state.items()
        if rec["blocked"] <= now and not any(t >= now - WINDOW for t in rec["fails"])
    ]
    for key in stale:
        del _rate_state[key]


def check_rate_limit(ip: str):
    now = monotonic()
    with _rate_lock:
        rec = _rate_state.get(ip, {"fails": [], "blocked": 0})
        if rec["blocked"] > now:
            raise HTTPException(
                status_code=429,
                detail=error_detail(RATE_LIMITED, "Too many failed login attempts. Try again later."),
                headers={"Retry-After": str(int(rec["blocked"] - now) + 1)},
            )
        rec["fails"] = [t for t in rec["fails"] if t >= now - WINDOW]
        if rec["fails"]:
            _rate_state[ip] = rec
        else:
            _rate_state.pop(ip, None)
        _prune(now)


def note_fail(ip: str):
    now = monotonic()
    with _rate_lock:
        rec = _rate_state.setdefault(ip, {"fails": [], "blocked": 0})
        rec["fails"] = [t for t in rec["fails"] if t >= now - WINDOW] + [now]
        if len(rec["fails"]) >= MAX_FAILS:
            rec["blocked"] = now + BLOCK


def note_success(ip: str):
    with _rate_lock:
        _rate_state.pop(ip, None)


def reset_rate_limits():
    with _rate_lock:
        _rate_state.clear()


def client_ip(request: Request) -> str:
    return request.client.host if request.client else ""
