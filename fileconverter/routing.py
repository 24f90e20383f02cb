"""Mapping (source extension, target format) to a conversion operation."""
import logging
import os
from typing import NamedTuple, Optional

from .errors import MissingTargetFormat, UnsupportedConversion
from .intake import timestamped

logger = logging.getLogger(__name__)


class ConversionRoute(NamedTuple):
    source: str
    target: str
    operation: str
    # operations that write into a directory get "<base>-<stamp>-<output_dir>"
    output_dir: Optional[str] = None


COMPATIBILITY_TABLE = (
    ConversionRoute("docx", "pdf", "office_to_pdf"),
    ConversionRoute("pptx", "pdf", "office_to_pdf"),
    ConversionRoute("xlsx", "pdf", "office_to_pdf"),
    ConversionRoute("pdf", "jpg", "pdf_to_jpg", output_dir="pages"),
    ConversionRoute("pdf", "docx", "pdf_to_docx", output_dir="docx"),
    ConversionRoute("jpg", "pdf", "image_to_pdf"),
    ConversionRoute("jpeg", "pdf", "image_to_pdf"),
    ConversionRoute("png", "pdf", "image_to_pdf"),
)


def describe_table(table):
    """'DOCX/PPTX/XLSX→PDF, PDF→JPG, ...' in table order."""
    groups = {}
    for route in table:
        groups.setdefault((route.operation, route.target), []).append(route.source.upper())
    return ", ".join(f"{'/'.join(sources)}→{target.upper()}" for (_, target), sources in groups.items())


class ConversionRouter:
    """Pure lookup plus dispatch; it never converts anything itself."""

    def __init__(self, table, operations, output_folder):
        self.table = tuple(table)
        self.operations = dict(operations)
        self.output_folder = output_folder
        self._routes = {(route.source, route.target): route for route in self.table}

        missing = {route.operation for route in self.table} - set(self.operations)
        if missing:
            raise ValueError(f"No implementation for operations: {', '.join(sorted(missing))}")

    @property
    def supported(self):
        return describe_table(self.table)

    def resolve(self, extension, target_format):
        source = (extension or "").lower().lstrip(".")
        target = (target_format or "").strip().lower()
        if not target:
            raise MissingTargetFormat()

        route = self._routes.get((source, target))
        if route is None:
            raise UnsupportedConversion(f".{source}" if source else "", target, self.supported)
        return route

    def dispatch(self, route, upload_path, original_name, scratch):
        """Run ``route`` on ``upload_path`` and return the produced file.

        Output locations are recorded on ``scratch`` before the operation
        starts so a failed conversion still gets cleaned up.
        """
        base_name = os.path.splitext(os.path.basename(original_name))[0] or "converted"
        out_base = os.path.join(self.output_folder, timestamped(base_name))
        operation = self.operations[route.operation]

        logger.info("Routing %s -> %s via %s", route.source, route.target, route.operation)

        if route.output_dir:
            output_dir = f"{out_base}-{route.output_dir}"
            scratch.output_dir = output_dir
            os.makedirs(output_dir, exist_ok=True)
            output_path = operation(upload_path, output_dir)
        else:
            output_path = f"{out_base}.{route.target}"
            scratch.output_path = output_path
            operation(upload_path, output_path)

        scratch.output_path = output_path
        return output_path
