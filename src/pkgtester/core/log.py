"""Logger with console and file sinks, backed by logfire."""

from __future__ import annotations

import contextlib
from abc import abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Any

from opentelemetry.proto.logs.v1 import logs_pb2
from opentelemetry.sdk.trace import ReadableSpan
from opentelemetry.sdk.trace.export import SpanExporter, SpanExportResult
from pydantic import BaseModel, Field, PrivateAttr, model_validator

if TYPE_CHECKING:
    from pkgtester.core.config import TesterSettings

_current_logger: Logger | None = None


class _LoggerProxy:
    """Forwards attribute access to the configured logger.

    Before setup_logger() runs every method is a no-op, so library
    code can log unconditionally.
    """
    def __getattr__(self, name):
        if _current_logger is None:
            def _noop(*args, **kwargs):  # noqa: ARG001
                pass
            return _noop
        return getattr(_current_logger, name)

    def __enter__(self):
        if _current_logger is None:
            return self
        return _current_logger.__enter__()

    def __exit__(self, *args):
        if _current_logger is None:
            return False
        return _current_logger.__exit__(*args)


logger = _LoggerProxy()

# Level names ordered from most to least verbose, mapped to
# OpenTelemetry severity numbers.
LEVELS = {
    'spew': logs_pb2.SEVERITY_NUMBER_TRACE,
    'trace': logs_pb2.SEVERITY_NUMBER_TRACE3,
    'debug': logs_pb2.SEVERITY_NUMBER_DEBUG,
    'info': logs_pb2.SEVERITY_NUMBER_INFO,
    'warn': logs_pb2.SEVERITY_NUMBER_WARN,
    'error': logs_pb2.SEVERITY_NUMBER_ERROR,
    'fatal': logs_pb2.SEVERITY_NUMBER_FATAL,
}


def level_name(level_num: int) -> str:
    """Return the least verbose level name whose threshold is met."""
    for name in reversed(LEVELS):
        if level_num >= LEVELS[name]:
            return name
    return 'spew'


class LevelFilteringExporter(SpanExporter):
    """Span exporter that drops spans below a minimum level."""

    def __init__(self, exporter: SpanExporter, min_level: str):
        self._exporter = exporter
        self._min_severity = LEVELS.get(
            min_level.lower(), logs_pb2.SEVERITY_NUMBER_INFO
        )

    def export(self, spans: list[ReadableSpan]) -> SpanExportResult:
        filtered = [
            span for span in spans
            if (span.attributes or {}).get(
                'logfire.level_num', logs_pb2.SEVERITY_NUMBER_INFO
            ) >= self._min_severity
        ]
        if filtered:
            return self._exporter.export(filtered)
        return SpanExportResult.SUCCESS

    def shutdown(self) -> None:
        self._exporter.shutdown()

    def force_flush(self, timeout_millis: int = 30000) -> bool:
        return self._exporter.force_flush(timeout_millis)


class Sink(BaseModel):
    """Base class for log output sinks."""

    enabled: bool = Field(default=True, description="Enable this sink")
    level: str | None = Field(
        default=None,
        description=(
            "Log level for this sink. If None, inherits from Logger.level. "
            "Valid: spew, trace, debug, info, warn, error, fatal"
        )
    )
    format_template: str = Field(
        default="{timestamp:%Y-%m-%d %H:%M:%S} [{level}] {message}",
        description="Format template for one log line"
    )

    _processor: Any = PrivateAttr(default=None)

    @staticmethod
    def _escape_newlines(text: str) -> str:
        return text.replace('\r', '\\r').replace('\n', '\\n')

    def _format_span(self, span) -> str:
        """Render one span as a single text line."""
        from datetime import UTC, datetime

        attrs = span.attributes or {}
        data = {
            'timestamp': datetime.fromtimestamp(
                span.start_time / 1e9, tz=UTC
            ),
            'level': level_name(attrs.get(
                'logfire.level_num', logs_pb2.SEVERITY_NUMBER_INFO
            )),
            'message': self._escape_newlines(
                str(attrs.get('logfire.msg', span.name))
            ),
        }

        try:
            formatted = self.format_template.format(**data)
        except KeyError as e:
            return f"ERROR: Invalid template field {e}\n"

        extra = {
            key: value for key, value in attrs.items()
            if not key.startswith((
                'logfire.', 'code.', 'otel.', 'telemetry.', 'service.',
                'process.',
            ))
        }
        if extra:
            formatted += ' | ' + ' '.join(
                f"{k}={v!r}" for k, v in sorted(extra.items())
            )
        return formatted + '\n'

    @abstractmethod
    def create_processor(self, run_name: str):
        """Create the span processor for this sink, or None."""
        pass

    def close(self):
        if self._processor:
            with contextlib.suppress(Exception):
                self._processor.shutdown()


class ConsoleSink(Sink):
    """Console output via logfire's console exporter."""

    verbose: bool = Field(default=False, description="Show span details")
    colors: str = Field(
        default="auto",
        description="Color mode: auto, always, never"
    )

    def create_processor(self, run_name: str):
        return None

    def options(self):
        from logfire import ConsoleOptions

        # logfire has no spew level; trace is its most verbose
        level = 'trace' if self.level == 'spew' else self.level
        return ConsoleOptions(
            min_log_level=level,
            verbose=self.verbose,
            colors=self.colors,
            include_timestamps=True,
        )


class FileSink(Sink):
    """Append formatted log lines to a file."""

    enabled: bool = Field(default=False, description="Enable file logging")
    path: str = Field(
        default="{run_name}.log",
        description="Log file path template"
    )

    _file: Any = PrivateAttr(default=None)

    def create_processor(self, run_name: str):
        from opentelemetry.sdk.trace.export import (
            ConsoleSpanExporter,
            SimpleSpanProcessor,
        )

        log_path = Path(self.path.format(run_name=run_name))
        log_path.parent.mkdir(parents=True, exist_ok=True)

        # Line buffered; stays open for the lifetime of the sink
        self._file = open(log_path, "a", buffering=1, encoding="utf-8")  # noqa: SIM115

        exporter = LevelFilteringExporter(
            ConsoleSpanExporter(out=self._file, formatter=self._format_span),
            self.level,
        )
        return SimpleSpanProcessor(exporter)

    def close(self):
        # Processor first so it flushes into the still-open file
        super().close()
        if self._file and not self._file.closed:
            self._file.flush()
            self._file.close()


class Logger(BaseModel):
    """Logger with console and file sinks.

    Usable as a context manager; leaving the block closes every sink.
    """

    level: str = Field(
        default="info",
        description="Default level for sinks that don't set their own",
    )
    console: ConsoleSink = Field(default_factory=ConsoleSink)
    file: FileSink = Field(default_factory=FileSink)

    @model_validator(mode='after')
    def _cascade_level_to_sinks(self) -> 'Logger':
        for sink in [self.console, self.file]:
            if sink.level is None:
                sink.level = self.level
        return self

    def setup(self, run_name: str):
        """Create sink processors and configure logfire."""
        import logfire

        processors = []
        for sink in [self.console, self.file]:
            if sink.enabled:
                sink._processor = sink.create_processor(run_name)
                if sink._processor:
                    processors.append(sink._processor)

        logfire.configure(
            service_name=run_name,
            send_to_logfire=False,
            console=self.console.options() if self.console.enabled else False,
            additional_span_processors=processors or None,
        )

    def info(self, msg: str, **kwargs):
        import logfire
        logfire.info(msg, **kwargs)

    def debug(self, msg: str, **kwargs):
        import logfire
        logfire.debug(msg, **kwargs)

    def trace(self, msg: str, **kwargs):
        self._log_at('trace', msg, kwargs)

    def spew(self, msg: str, **kwargs):
        """Below trace; subprocess output and similar noise."""
        self._log_at('spew', msg, kwargs)

    def warn(self, msg: str, **kwargs):
        import logfire
        logfire.warn(msg, **kwargs)

    def error(self, msg: str, **kwargs):
        import logfire
        logfire.error(msg, **kwargs)

    def _log_at(self, level: str, msg: str, attributes: dict):
        import logfire
        logfire.log(
            level=LEVELS[level],
            msg_template=msg,
            attributes=attributes or None,
        )

    def close(self):
        for sink in [self.console, self.file]:
            sink.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


def is_configured() -> bool:
    """True once setup_logger() has installed a logger."""
    return _current_logger is not None


def setup_logger(
    run_name: str = "pkgtester",
    console: ConsoleSink | None = None,
    file: FileSink | None = None,
) -> Logger:
    """Initialize the module-level logger.

    Args:
        run_name: Service name, also substituted into FileSink.path
        console: Console sink config (or None for defaults)
        file: File sink config (or None for defaults)

    Returns:
        The configured Logger
    """
    global _current_logger

    if _current_logger is not None:
        _current_logger.close()

    _current_logger = Logger(
        console=console or ConsoleSink(),
        file=file or FileSink(),
    )
    _current_logger.setup(run_name)
    return _current_logger


def configure_logging(settings: TesterSettings) -> Logger:
    """Set up logging from harness settings.

    The console follows the verbosity level; a file sink is enabled
    when settings.log_file is set and always records at debug.
    """
    file = FileSink(enabled=False)
    if settings.log_file is not None:
        file = FileSink(
            enabled=True, level="debug", path=str(settings.log_file)
        )
    return setup_logger(
        console=ConsoleSink(level=settings.verbosity.log_level),
        file=file,
    )
