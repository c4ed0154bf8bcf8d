"""Telemetry services built directly on telelog.

``configure(...)`` -- pick settings from the environment, a preset, or an
explicit ``telelog.Config``
``get_logger(name)`` -- fetch (and cache) a configured logger
``record_event(name, ...)`` -- emit structured events at a chosen level
``span(name, ...)`` -- profile a block such as a compile or a run

Standard output carries the edited text, so console logging stays off unless
``STREAM_ENGINE_LOG_CONSOLE`` is set.
"""

from __future__ import annotations

import os
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterator, Mapping, MutableMapping, Optional, Tuple, cast

import telelog  # type: ignore[import]

tl = cast(Any, telelog)

ENV_PREFIX = "STREAM_ENGINE_"

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})


def _flag(environ: Mapping[str, str], name: str) -> bool:
    return environ.get(f"{ENV_PREFIX}{name}", "").lower() in _TRUE_VALUES


@dataclass(frozen=True, slots=True)
class TelemetrySettings:
    """Logging knobs, normally read from ``STREAM_ENGINE_*`` variables."""

    level: str = "WARNING"
    console: bool = False
    color: bool = True
    json: bool = False
    log_file: str = ""
    buffered: bool = False
    buffer_size: int = 2048
    profiling: bool = False
    logger_name: str = "stream_engine"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "TelemetrySettings":
        env = os.environ if environ is None else environ
        size = env.get(f"{ENV_PREFIX}LOG_BUFFER_SIZE", "")
        return cls(
            level=env.get(f"{ENV_PREFIX}LOG_LEVEL", "WARNING").upper(),
            console=_flag(env, "LOG_CONSOLE"),
            color=not _flag(env, "NO_COLOR"),
            json=_flag(env, "LOG_JSON"),
            log_file=env.get(f"{ENV_PREFIX}LOG_FILE", ""),
            buffered=_flag(env, "LOG_BUFFERED"),
            buffer_size=int(size) if size.isdigit() else 2048,
            logger_name=env.get(f"{ENV_PREFIX}LOGGER", "stream_engine"),
        )

    def to_config(self) -> Any:
        config = tl.Config()
        config.with_min_level(self.level)
        config.with_console_output(self.console)
        if self.console:
            config.with_colored_output(self.color)
        config.with_json_format(self.json)
        if self.log_file:
            config.with_file_output(self.log_file)
        if self.buffered:
            config.with_buffering(True)
            config.with_buffer_size(self.buffer_size)
        if self.profiling:
            config.with_profiling(True)
        return config


def preset_settings(preset: str, base: Optional[TelemetrySettings] = None) -> TelemetrySettings:
    """Return ``base`` (environment settings by default) adjusted for a preset."""

    base = base or TelemetrySettings.from_env()
    key = preset.lower()
    if key == "development":
        return replace(base, level="DEBUG", console=True, color=True, json=False)
    if key == "production":
        return replace(
            base,
            level="INFO",
            console=False,
            buffered=True,
            log_file=base.log_file or "stream_engine.log",
        )
    if key in {"performance", "performance_analysis"}:
        return replace(
            base,
            level="DEBUG",
            console=False,
            buffered=True,
            json=True,
            profiling=True,
            log_file=base.log_file or "stream_engine-performance.log",
        )
    raise ValueError(f"Unknown preset '{preset}'.")


_LOGGER_CACHE: MutableMapping[str, Any] = {}
_settings = TelemetrySettings.from_env()
_active_config: Optional[Any] = None


def configure(
    *,
    config: Optional[Any] = None,
    preset: Optional[str] = None,
    settings: Optional[TelemetrySettings] = None,
) -> None:
    """Replace the active telelog configuration and drop cached loggers.

    At most one of ``config`` (a ``telelog.Config``), ``preset``
    (``"development"``, ``"production"``, ``"performance"``) or ``settings``
    may be given; with none of them the environment is read again.
    """

    global _active_config, _settings
    if sum(option is not None for option in (config, preset, settings)) > 1:
        raise ValueError("Provide only one of `config`, `preset` or `settings`.")

    if config is None:
        if preset is not None:
            settings = preset_settings(preset)
        _settings = settings or TelemetrySettings.from_env()
        config = _settings.to_config()

    _active_config = config
    _LOGGER_CACHE.clear()


def get_logger(name: Optional[str] = None) -> Any:
    """Return a cached ``telelog.Logger`` configured for this engine."""

    global _active_config
    if _active_config is None:
        _active_config = _settings.to_config()
    logger_name = name or _settings.logger_name
    if logger_name not in _LOGGER_CACHE:
        _LOGGER_CACHE[logger_name] = tl.Logger.with_config(logger_name, _active_config)
    return _LOGGER_CACHE[logger_name]


def _stringify(value: Any) -> str:
    if isinstance(value, str):
        return value
    return repr(value) if isinstance(value, (dict, list, tuple, set)) else str(value)


def _log(logger: Any, level: str, message: str, payload: Dict[str, Any]) -> None:
    # telelog exposes ``<level>_with(message, pairs)`` for structured data;
    # fall back to a flat message when a level lacks it
    name = str(level).lower()
    structured = getattr(logger, f"{name}_with", None)
    if structured is not None:
        structured(message, [(str(k), _stringify(v)) for k, v in payload.items()])
        return
    plain = getattr(logger, name, None)
    if plain is None:
        raise ValueError(f"Unsupported log level '{level}'.")
    plain(f"{message} {payload}")


def record_event(
    name: str,
    *,
    level: str = "info",
    data: Optional[Dict[str, Any]] = None,
    logger_name: Optional[str] = None,
) -> None:
    """Emit a structured ``event::<name>`` log line with its payload."""

    _log(get_logger(logger_name), level, f"event::{name}", {"event": name, **(data or {})})


@dataclass
class SpanHandle:
    """Handle returned from ``span`` for attaching results to the block."""

    logger: Any
    span_name: str
    component_name: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def add_metadata(self, key: str, value: Any) -> None:
        self.metadata[key] = _stringify(value)

    def _payload(self, **extra: Any) -> Dict[str, Any]:
        payload = {"span": self.span_name, **self.metadata, **extra}
        if self.component_name:
            payload["component"] = self.component_name
        return payload

    def finish(self) -> None:
        _log(self.logger, "debug", "span::finish", self._payload())

    def fail(self, exc: BaseException) -> None:
        _log(
            self.logger,
            "warning",
            "span::fail",
            self._payload(error=type(exc).__name__, reason=str(exc)),
        )


@contextmanager
def span(
    name: str,
    *,
    logger_name: Optional[str] = None,
    component: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Iterator[SpanHandle]:
    """Profile a block and track it under ``component``.

    ``metadata`` is attached as logger context while the block runs; values
    added through ``SpanHandle.add_metadata`` are logged when it finishes.
    Exceptions are logged as ``span::fail`` and re-raised.
    """

    log = get_logger(logger_name)
    context: Tuple[Tuple[str, str], ...] = tuple(
        (key, _stringify(value)) for key, value in (metadata or {}).items()
    )
    for key, value in context:
        log.add_context(key, value)

    try:
        with ExitStack() as stack:
            if component:
                stack.enter_context(log.track_component(component))
            stack.enter_context(log.profile(name))
            handle = SpanHandle(
                logger=log,
                span_name=name,
                component_name=component,
                metadata=dict(context),
            )
            try:
                yield handle
            except Exception as exc:
                handle.fail(exc)
                raise
            handle.finish()
    finally:
        for key, _ in context:
            log.remove_context(key)


__all__ = [
    "ENV_PREFIX",
    "SpanHandle",
    "TelemetrySettings",
    "configure",
    "get_logger",
    "preset_settings",
    "record_event",
    "span",
]
