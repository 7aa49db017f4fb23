"""Serve a service in a child process over framed streams, with memory and time accounting."""

__all__ = ["child", "errors", "frame", "memory", "service"]