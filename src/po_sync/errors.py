"""Exceptions raised across the sync pipeline.

Each per-item error is caught at the producer or consumer loop boundary;
SetupError, ConfigError and ConsumerStoppedError are the only ones meant to
stop the process.
"""


class PipelineError(Exception):
    """Base class for all pipeline errors."""


class ConfigError(PipelineError):
    """Configuration could not be loaded or a mandatory value is missing."""


class SourceFetchError(PipelineError):
    """The order source query failed; the current producer cycle is aborted."""


class ChannelError(PipelineError):
    """A queue channel operation (declare, subscribe) failed."""


class PublishError(ChannelError):
    """The broker rejected a message or the connection is unusable."""


class DecodeError(PipelineError):
    """A queue message body could not be decoded into an order."""


class SyncError(PipelineError):
    """The ERP endpoint could not be reached or answered with a non-2xx status."""


class SetupError(PipelineError):
    """The consumer could not declare or subscribe to its queue."""


class ConsumerStoppedError(PipelineError):
    """The consumer thread died while the pipeline was running."""
