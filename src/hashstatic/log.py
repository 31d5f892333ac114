"""log.py - subsystem logger and tracer.

one logger, one tracer. every cache fill and every served request
runs inside a span, and log lines inside a span become span events.

console output is prefixed with the subsystem so a busy server stays
readable: [12:00:01 hashstatic:cache] hashed app.js
"""

import sys
from contextlib import contextmanager
from datetime import datetime

from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    SimpleSpanProcessor,
    ConsoleSpanExporter,
)

# ============================================================
# TRACER SETUP
# ============================================================

_provider = TracerProvider()
_tracer = _provider.get_tracer("hashstatic", "0.1.0")
_console_export = False


def enable_console_export() -> bool:
    """turn on span export to stderr. false if it was already on."""
    global _console_export
    if _console_export:
        return False
    _provider.add_span_processor(
        SimpleSpanProcessor(ConsoleSpanExporter(out=sys.stderr))
    )
    _console_export = True
    return True


# ============================================================
# LOGGER
# ============================================================

LEVELS = {"debug": 10, "info": 20, "warn": 30, "error": 40}

_level = LEVELS["info"]


def set_level(level: str):
    """set the console threshold. unknown names fall back to info."""
    global _level
    _level = LEVELS.get(level.lower(), LEVELS["info"])


def get_level() -> str:
    for name, value in LEVELS.items():
        if value == _level:
            return name
    return "info"


def log(subsystem: str, level: str, message: str, **attrs):
    """log to console if above threshold, always record as span event."""
    span_ = trace.get_current_span()
    if span_ and span_.is_recording():
        span_.add_event(
            f"hashstatic.{subsystem}.{level}",
            attributes={"message": message, "subsystem": subsystem,
                        **{k: str(v) for k, v in attrs.items()}},
        )

    if LEVELS.get(level, LEVELS["info"]) < _level:
        return

    ts = datetime.now().strftime("%H:%M:%S")
    prefix = f"[{ts} hashstatic:{subsystem}]"
    dest = sys.stderr if level in ("warn", "error") else sys.stdout
    print(f"{prefix} {message}", file=dest)


def debug(subsystem: str, message: str, **attrs):
    log(subsystem, "debug", message, **attrs)


def info(subsystem: str, message: str, **attrs):
    log(subsystem, "info", message, **attrs)


def warn(subsystem: str, message: str, **attrs):
    log(subsystem, "warn", message, **attrs)


def error(subsystem: str, message: str, **attrs):
    log(subsystem, "error", message, **attrs)


# ============================================================
# SPANS
# ============================================================

@contextmanager
def span(name: str, subsystem: str = "hashstatic", **attrs):
    """Create a traced span. Everything inside is connected.

    Usage:
        with span("hash_name", subsystem="cache", path="app.js"):
            buf = store.read_bytes("app.js")
            # logs in here are span events
            # nested spans are children

    Attribute values are stringified so callers can pass ints and bools.
    """
    with _tracer.start_as_current_span(
        f"hashstatic.{subsystem}.{name}",
        attributes={f"hashstatic.{k}": str(v) for k, v in attrs.items()},
    ) as s:
        s.set_attribute("hashstatic.subsystem", subsystem)
        yield s
