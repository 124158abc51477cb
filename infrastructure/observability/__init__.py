"""
Observability: structured logging, context management and trace annotation.

Provides:
- Contextual logging with request tag and video id
- Log rotation and file management
- Third-party library log level control
- Safe Opik span annotation
"""

from infrastructure.observability.logging import (
    annotate_current_span,
    clear_video_context,
    configure_logging,
    get_log_context,
    make_request_tag,
    set_log_context,
)

__all__ = [
    "configure_logging",
    "set_log_context",
    "get_log_context",
    "clear_video_context",
    "make_request_tag",
    "annotate_current_span",
]
