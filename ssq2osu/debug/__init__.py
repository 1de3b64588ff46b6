"""Tracing and logging helpers."""
from .trace import ConversionTracer, EventType, setup_logging

__all__ = ['ConversionTracer', 'EventType', 'setup_logging']
