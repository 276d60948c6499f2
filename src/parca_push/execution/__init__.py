"""Push pipeline and its lifecycle supervision."""

from .runner import push, run, supervise

__all__ = ["push", "run", "supervise"]
