"""Service modules."""

from task_manager.services.auth import decode_token, generate_token


__all__ = ["generate_token", "decode_token"]
