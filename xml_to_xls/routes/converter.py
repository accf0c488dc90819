from fastapi import APIRouter, UploadFile, File, HTTPException
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import FileResponse
from starlette.background import BackgroundTask
from datetime import datetime
from pathlib import Path
import logging

from ..models.schemas import HealthResponse
from ..services.staging import cleanup_files, release_on_failure, staging_path
from ..utils.audit import audit_logger
from ..utils.converter import converter, output_path_for, OUTPUT_SUFFIX
from ..config import config

logger = logging.getLogger("xml_to_xls")

router = APIRouter(prefix=config.API_V1_PREFIX)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def log_progress(percent: int, message: str) -> None:
    logger.info(f"Progress: {percent}% - {message}")


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        version=config.VERSION,
        timestamp=datetime.utcnow()
    )

@router.post("/upload")
async def upload_xml(
    file: UploadFile = File(...)
):
    """Convert an uploaded XML file and return the Excel workbook."""
    logger.info(f"File upload attempt: filename={file.filename}, content_type={file.content_type}")

    if not config.validate_content_type(file.content_type):
        raise HTTPException(status_code=415, detail="Only XML files are allowed")

    input_path = staging_path(file.filename)
    output_path = output_path_for(input_path)

    with release_on_failure(input_path, output_path):
        total_size = 0
        with open(input_path, "wb") as f:
            while chunk := await file.read(config.UPLOAD_CHUNK_SIZE):
                total_size += len(chunk)
                # Check file size limit during streaming
                if total_size > config.max_upload_bytes():
                    raise HTTPException(
                        status_code=413,
                        detail=f"File size exceeds {config.MAX_UPLOAD_SIZE_MB}MB limit"
                    )
                f.write(chunk)

        audit_logger.log_staging("save", input_path, size=total_size, content_type=file.content_type)

        await run_in_threadpool(
            converter.convert,
            input_path,
            output_path,
            progress_callback=log_progress
        )

    download_name = Path(file.filename or input_path.name).stem + OUTPUT_SUFFIX
    logger.info(f"File conversion successful: {file.filename} -> {download_name}")
    return FileResponse(
        output_path,
        media_type=XLSX_MEDIA_TYPE,
        filename=download_name,
        background=BackgroundTask(cleanup_files, [input_path, output_path])
    )
