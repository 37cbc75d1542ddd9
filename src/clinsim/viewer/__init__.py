"""clinsim Viewer -- 会话日志读侧：查询、分面、筛选、统计与导出"""

from .client import LearningEventsClient, parse_stored_events
from .config import ViewerConfig, load_viewer_config
from .exceptions import EventFetchError, ViewerError
from .export import (
    CSV_HEADER,
    build_export_document,
    clipboard_summary,
    export_csv,
    export_filename,
    export_json,
)
from .facets import EventFacets, SessionFacet, derive_facets
from .filters import EventFilter
from .render import format_duration, format_timestamp, render_entry
from .service import SessionLogViewer
from .stats import EventStatistics, VerbCount, compute_statistics

__all__ = [
    "SessionLogViewer",
    "LearningEventsClient",
    "parse_stored_events",
    "ViewerConfig",
    "load_viewer_config",
    "ViewerError",
    "EventFetchError",
    "EventFilter",
    "EventFacets",
    "SessionFacet",
    "derive_facets",
    "EventStatistics",
    "VerbCount",
    "compute_statistics",
    "CSV_HEADER",
    "build_export_document",
    "export_json",
    "export_csv",
    "clipboard_summary",
    "export_filename",
    "format_timestamp",
    "format_duration",
    "render_entry",
]
