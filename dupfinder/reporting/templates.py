"""Report rendering: Jinja2 text templates and JSON.

The text report is line oriented:

    <count>\\t<line>
    \\t<source>: [<n1>, <n2>, ...]

for multi-source runs (a hashed key is printed as its digest followed by a
``(digest)`` column), and

    <count>\\t<line>\\t[<start>,<end>]

for sorted runs.
"""

import json
import logging
from typing import Any, Dict, Union

from jinja2 import Environment, PackageLoader, StrictUndefined, TemplateError

from dupfinder.detection.models import DetectionResult, SortedDetectionResult

from .payloads import build_detection_payload, build_sorted_payload

logger = logging.getLogger(__name__)

REPORT_FORMATS = ("text", "json")


class ReportRenderError(Exception):
    """Raised when a report cannot be rendered."""

    pass


class ReportRenderer:
    """Renders detection results from the templates in dupfinder.reporting.

    Templates are loaded once and cached by the Jinja2 environment.
    """

    def __init__(
        self,
        template_dir: str = "templates",
        multi_source_template: str = "multi_source.txt.j2",
        sorted_template: str = "sorted.txt.j2",
    ):
        self.multi_source_template_name = multi_source_template
        self.sorted_template_name = sorted_template

        # Plain text output; lines are reproduced exactly, so no escaping
        self.env = Environment(
            loader=PackageLoader("dupfinder.reporting", template_dir),
            autoescape=False,
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )

    def render_text(
        self, result: Union[DetectionResult, SortedDetectionResult], sort: str = "none"
    ) -> str:
        """Render ``result`` as a text report.

        Raises:
            ReportRenderError: If template rendering fails
        """
        if isinstance(result, SortedDetectionResult):
            template_name = self.sorted_template_name
            context = build_sorted_payload(result, sort)
        else:
            template_name = self.multi_source_template_name
            context = build_detection_payload(result, sort)

        try:
            return self.env.get_template(template_name).render(context)
        except TemplateError as e:
            error_msg = f"Report rendering failed: {e}"
            logger.error(error_msg, exc_info=True)
            raise ReportRenderError(error_msg) from e

    def render_json(
        self, result: Union[DetectionResult, SortedDetectionResult], sort: str = "none"
    ) -> str:
        """Render ``result`` as a single JSON document (with trailing newline)."""
        return json.dumps(self.build_payload(result, sort), ensure_ascii=False, indent=2) + "\n"

    def render(
        self,
        result: Union[DetectionResult, SortedDetectionResult],
        format_type: str = "text",
        sort: str = "none",
    ) -> str:
        if format_type == "json":
            return self.render_json(result, sort)
        if format_type == "text":
            return self.render_text(result, sort)
        raise ValueError(
            f"Invalid report format: {format_type}. Must be one of: {', '.join(REPORT_FORMATS)}"
        )

    @staticmethod
    def build_payload(
        result: Union[DetectionResult, SortedDetectionResult], sort: str = "none"
    ) -> Dict[str, Any]:
        if isinstance(result, SortedDetectionResult):
            return build_sorted_payload(result, sort)
        return build_detection_payload(result, sort)


_default_renderer = None


def _renderer() -> ReportRenderer:
    global _default_renderer
    if _default_renderer is None:
        _default_renderer = ReportRenderer()
    return _default_renderer


def render_text(result: Union[DetectionResult, SortedDetectionResult], sort: str = "none") -> str:
    return _renderer().render_text(result, sort)


def render_json(result: Union[DetectionResult, SortedDetectionResult], sort: str = "none") -> str:
    return _renderer().render_json(result, sort)


def render_report(
    result: Union[DetectionResult, SortedDetectionResult],
    format_type: str = "text",
    sort: str = "none",
) -> str:
    return _renderer().render(result, format_type, sort)
