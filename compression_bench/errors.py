"""Exception types raised by the compression benchmark."""


class BenchmarkError(Exception):
    """Base class for all benchmark failures."""


class ConfigError(BenchmarkError):
    """Configuration file is missing values or holds invalid ones."""


class EncodingError(BenchmarkError):
    """Document could not be serialized to BSON."""


class BackendConnectionError(BenchmarkError, ConnectionError):
    """Backend unreachable, or the requested compressor was rejected."""


class WriteError(BenchmarkError):
    """Insert (or collection reset) was rejected by the backend."""


class StatsError(BenchmarkError):
    """Collection statistics failed or came back in an unexpected shape."""


class BenchmarkTimeoutError(BenchmarkError, TimeoutError):
    """The overall benchmark deadline was exceeded."""


class AlgorithmRunError(BenchmarkError):
    """A per-algorithm run failed; aborts the whole benchmark."""

    def __init__(self, algorithm: str, error: Exception):
        self.algorithm = algorithm
        self.error = error
        super().__init__(f"{algorithm} test failed: {error}")
