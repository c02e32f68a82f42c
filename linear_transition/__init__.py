#!/usr/bin/env python3
"""
Linear Transition Action Package

Moves Linear issues between workflow states and adds or removes (nested,
wildcard matched) labels in bulk, typically as a CI step after a merge.
"""

__version__ = "1.0.0"

# Define what's available for import
__all__ = [
    # Models
    "Label",
    "Issue",
    "Team",
    "WorkflowState",
    "RequestGroup",
    "RunContext",
    "GroupStatus",
    "GroupResult",
    "RunReport",
    "FatalGroupError",

    # Core components
    "Config",
    "parse_inputs",
    "LinearClient",
    "LinearAPIError",
    "Labeler",
    "Runner",
    "TransitionOrchestrator",
    "SlackNotifier",
    "TelegramNotifier",
]

_MODULES = {
    "Label": "models",
    "Issue": "models",
    "Team": "models",
    "WorkflowState": "models",
    "RequestGroup": "models",
    "RunContext": "models",
    "GroupStatus": "models",
    "GroupResult": "models",
    "RunReport": "models",
    "FatalGroupError": "models",
    "Config": "config",
    "parse_inputs": "inputs",
    "LinearClient": "linear_client",
    "LinearAPIError": "linear_client",
    "Labeler": "labeler",
    "Runner": "runner",
    "TransitionOrchestrator": "orchestrator",
    "SlackNotifier": "slack_notifier",
    "TelegramNotifier": "telegram_notifier",
}


# Lazy imports so notifier dependencies load only when used
def __getattr__(name):
    if name not in _MODULES:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    from importlib import import_module
    module = import_module(f".{_MODULES[name]}", __name__)
    return getattr(module, name)
