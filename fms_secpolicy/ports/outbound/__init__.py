"""Outbound ports - Interfaces for driven adapters."""
from fms_secpolicy.ports.outbound.aws_client_port import AWSClientPort
from fms_secpolicy.ports.outbound.logger_port import LoggerPort
from fms_secpolicy.ports.outbound.output_port import OutputPort

__all__ = ["AWSClientPort", "OutputPort", "LoggerPort"]
