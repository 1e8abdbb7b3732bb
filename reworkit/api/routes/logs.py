from typing import Dict, Union

from fastapi import APIRouter, Depends, Request, Response
from python_multipart import create_form_parser
from python_multipart.multipart import Field, File

from reworkit.api.dependencies.auth import verify_secret
from reworkit.api.dependencies.store import get_log_sink, get_result_store
from reworkit.api.schemas.request_schemas import LogSubmission, REQUIRED_FIELDS
from reworkit.common.config.constants import PUSH_LOG_PATH
from reworkit.common.config.logging_config import get_logger
from reworkit.common.exceptions.base_exceptions import ValidationException
from reworkit.storage.log_storage import LogBlobSink
from reworkit.storage.result_store import ResultStore


logger = get_logger(__name__)
router = APIRouter()

MULTIPART_CONTENT_TYPE = "multipart/form-data"


def part_bytes(part: Union[Field, File]) -> bytes:
    """Raw payload of one form part, whether or not it was sent with a filename."""
    if isinstance(part, File):
        file_object = part.file_object
        file_object.seek(0)
        try:
            return file_object.read()
        finally:
            part.close()

    return part.value or b""


async def read_submission(request: Request) -> LogSubmission:
    content_type = request.headers.get("content-type", "")
    if not content_type.lower().startswith(MULTIPART_CONTENT_TYPE):
        raise ValidationException(
            message=f"Expected a {MULTIPART_CONTENT_TYPE} body, got {content_type or 'no content type'}"
        )

    fields: Dict[str, str] = {}
    log = bytearray()

    def on_part(part: Union[Field, File]) -> None:
        name = (part.field_name or b"").decode("utf-8", errors="replace")
        data = part_bytes(part)

        if name in REQUIRED_FIELDS:
            fields[name] = data.decode("utf-8", errors="replace")
            if name == "package":
                logger.info(f"Received package: {fields[name]}")
        elif name == "log":
            log.extend(data)
        else:
            logger.info(f"Received unknown field: {name}")

    try:
        parser = create_form_parser({"Content-Type": content_type}, on_part, on_part)
        async for chunk in request.stream():
            parser.write(chunk)
        parser.finalize()
    except ValueError as e:
        raise ValidationException(message=f"Invalid multipart body: {e}")

    return LogSubmission.from_form(fields, bytes(log))


@router.post(PUSH_LOG_PATH, dependencies=[Depends(verify_secret)])
async def push_log(
    request: Request,
    store: ResultStore = Depends(get_result_store),
    log_sink: LogBlobSink = Depends(get_log_sink),
) -> Response:
    submission = await read_submission(request)
    filename = submission.filename

    log_sink.schedule(filename, submission.log)

    await store.upsert(submission.package, submission.arch, submission.success, filename)
    logger.info(f"Recorded {submission.package}/{submission.arch} success={submission.success}")

    return Response(status_code=200)
