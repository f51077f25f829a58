"""
Acceleration Module

Process-pool execution for the embarrassingly parallel pairwise alignment
step.
"""

from .parallel_executor import PairParallelExecutor

__all__ = [
    "PairParallelExecutor",
]
