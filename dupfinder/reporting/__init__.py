"""Report payloads and renderers for detection results."""

from .payloads import build_detection_payload, build_sorted_payload, order_duplicates, order_runs
from .templates import (
    ReportRenderer,
    ReportRenderError,
    render_json,
    render_report,
    render_text,
)

__all__ = [
    "ReportRenderer",
    "ReportRenderError",
    "render_text",
    "render_json",
    "render_report",
    "build_detection_payload",
    "build_sorted_payload",
    "order_duplicates",
    "order_runs",
]
