"""JSON audit trail for uploads, conversions and rejected requests.

Each entry is one JSON object per line in the audit log:
``timestamp``, ``event_type``, ``action``, ``user_id``, ``status`` and an
event-specific ``details`` object.
"""
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import json
import logging
from ..config import config
from .logger import setup_logger

PathLike = Union[str, Path]


class AuditLogger:
    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or setup_logger("audit", config.AUDIT_LOG_FILE_PATH, config.LOG_MAX_BYTES)

    def _emit(self,
        event_type: str,
        action: str,
        user_id: str,
        details: Dict[str, Any],
        status: str = "success",
        failure_level: int = logging.ERROR
    ) -> None:
        entry = {
            "timestamp": datetime.utcnow().isoformat(),
            "event_type": event_type,
            "action": action,
            "user_id": user_id,
            "status": status,
            "details": details
        }
        level = logging.INFO if status == "success" else failure_level
        self.logger.log(level, json.dumps(entry, default=str))

    def log_staging(self,
        action: str,
        path: PathLike,
        size: Optional[int] = None,
        user_id: str = "system",
        **details: Any
    ) -> None:
        """A staging file was saved or deleted."""
        staged = {"file_name": Path(path).name, "path": str(path), **details}
        if size is not None:
            staged["file_size"] = size
        self._emit("staging", action, user_id, staged)

    def log_conversion(self,
        input_file: PathLike,
        output_file: PathLike,
        elapsed_ms: float,
        plan: Dict[str, List[Any]],
        user_id: str = "system"
    ) -> None:
        """A workbook was written; records the row count of every sheet."""
        self._emit("conversion", "convert_xml_to_xlsx", user_id, {
            "input_file": str(input_file),
            "output_file": str(output_file),
            "conversion_time_ms": round(elapsed_ms, 1),
            "sheets": {name: len(rows) for name, rows in plan.items()},
            "rows_processed": sum(len(rows) for rows in plan.values())
        })

    def log_rejected_request(self,
        status_code: int,
        detail: str,
        path: str,
        ip_address: str,
        user_id: str = "anonymous"
    ) -> None:
        self._emit("security", "request_rejected", user_id, {
            "status_code": status_code,
            "detail": detail,
            "path": path,
            "ip_address": ip_address
        }, status="rejected", failure_level=logging.WARNING)

    def log_lifecycle(self, action: str, **details: Any) -> None:
        self._emit("lifecycle", action, "system", {
            "version": config.VERSION,
            **details
        })

    def log_error(self,
        action: str,
        error: Exception,
        user_id: str = "system",
        **details: Any
    ) -> None:
        """A failure, with the pipeline error code when there is one."""
        failure = {
            "error_type": type(error).__name__,
            "error_message": str(error),
            **details
        }
        error_code = getattr(error, "error_code", None)
        if error_code:
            failure["error_code"] = error_code
        self._emit("error", action, user_id, failure, status="error")

# Create singleton instance
audit_logger = AuditLogger()
