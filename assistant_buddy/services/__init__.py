"""Synchronization and run orchestration services."""

from .assistant_lifecycle import AssistantLifecycleManager, bundle_file_name
from .bundle_builder import build_bundle
from .conversation_manager import ConversationManager
from .file_reconciler import FileReconciler
from .run_orchestrator import RunOrchestrator

__all__ = [
    "AssistantLifecycleManager",
    "ConversationManager",
    "FileReconciler",
    "RunOrchestrator",
    "build_bundle",
    "bundle_file_name",
]
