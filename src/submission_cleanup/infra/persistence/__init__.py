"""Submission Clean-up Infra Persistence — Redis connection management."""

from submission_cleanup.infra.persistence.redis_client import RedisFactory
from submission_cleanup.infra.persistence.redis_settings import RedisSettings

__all__ = ["RedisFactory", "RedisSettings"]
