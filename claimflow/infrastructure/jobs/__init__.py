"""
Durable background jobs.
"""

from .queue import JobQueue
from .worker import JobWorker, JobHandler

__all__ = ["JobQueue", "JobWorker", "JobHandler"]
