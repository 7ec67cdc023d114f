"""
AI Actions Module - the administrative operations an agent may call.

This module provides:
- ADMIN_OPERATIONS / OperationDescriptor: the schema catalog
- AdminActions: the handlers
- ActionRegistry / build_registry: operation name -> descriptor + handler
- Dispatcher: validate-then-execute entry point
"""

from tutor_admin.ai.actions.catalog import (
    ADMIN_OPERATIONS,
    ActionCategory,
    OperationDescriptor,
    ParameterSpec,
)
from tutor_admin.ai.actions.dispatcher import Dispatcher
from tutor_admin.ai.actions.handlers import BROADCAST_FAILED, AdminActions
from tutor_admin.ai.actions.registry import ActionRegistry, build_registry

__all__ = [
    "ADMIN_OPERATIONS",
    "ActionCategory",
    "OperationDescriptor",
    "ParameterSpec",
    "AdminActions",
    "BROADCAST_FAILED",
    "ActionRegistry",
    "build_registry",
    "Dispatcher",
]
