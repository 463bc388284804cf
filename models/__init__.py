"""
========================================
Desired-state models for convergence
========================================

Value objects describing what the caller wants the server to look like.

Modules:
    resource_models: ResourceDescriptor, ConnectionInfo, Action, ConvergenceResult

Example:
    >>> from models import Action, ResourceDescriptor
    >>>
    >>> descriptor = ResourceDescriptor(database_name='app_db')
    >>> descriptor.validate_for(Action.CREATE)
"""

__version__ = "0.1.0"
__all__ = [
    'Action',
    'ConnectionInfo',
    'ConvergenceResult',
    'DescriptorError',
    'ResourceDescriptor',
]

from .resource_models import (
    Action,
    ConnectionInfo,
    ConvergenceResult,
    DescriptorError,
    ResourceDescriptor,
)
