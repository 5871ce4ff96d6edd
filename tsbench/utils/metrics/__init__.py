from tsbench.utils.metrics.backends.abstract import MetricsBackend

__all__ = ["MetricsBackend"]
