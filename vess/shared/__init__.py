"""
VESS Shared Kernel
==================

Business logic and infrastructure shared by every VESS front end.

Architecture:
- core: EventBus, reactive values, settings, errors
- infrastructure: Storage backends and the platform context
- domain: Evaluation model, scoring, config service
"""

__version__ = "0.3.0"
