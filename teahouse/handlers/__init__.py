"""Capability implementations served by the dispatcher."""

from teahouse.handlers.tea import TeaHandler

__all__ = ["TeaHandler"]
