"""Ports - Abstract interfaces for external dependencies."""
from fms_secpolicy.ports.outbound import AWSClientPort, LoggerPort, OutputPort

__all__ = ["AWSClientPort", "OutputPort", "LoggerPort"]
