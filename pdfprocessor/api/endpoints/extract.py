import os
from typing import List, Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import Response
from pydantic import BaseModel

from pdfprocessor.api.state import get_pipeline
from pdfprocessor.common.logging_config import current_context, get_logger, get_request_id
from pdfprocessor.common.models import FailedDocument
from pdfprocessor.exporters.excel_exporter import ExcelExporter
from pdfprocessor.parsing.pipeline import ExtractorPipeline

logger = get_logger(__name__)
router = APIRouter()

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


class ProfileInfo(BaseModel):
    name: str
    bank_id: str
    columns: List[str]
    keywords: List[str]


@router.get("/profiles", response_model=List[ProfileInfo])
def list_profiles(pipeline: ExtractorPipeline = Depends(get_pipeline)):
    return [
        ProfileInfo(name=p.name, bank_id=p.bank_id, columns=p.column_names, keywords=list(p.keywords))
        for p in pipeline.registry.layouts
    ]


@router.post("/{profile}")
async def extract_statements(profile: str, files: Optional[List[UploadFile]] = File(None),
                             pipeline: ExtractorPipeline = Depends(get_pipeline)):
    """
    Parse every uploaded PDF with the given layout profile and return the
    consolidated workbook, one sheet per account.
    """
    layout = pipeline.registry.get_by_name(profile)
    if layout is None:
        raise HTTPException(status_code=404, detail=f"Layout desconhecido: {profile}")
    if not files:
        raise HTTPException(status_code=400, detail="Nenhum arquivo enviado.")

    batch = []
    rejected = []
    for file in files:
        name = file.filename or "arquivo.pdf"
        if os.path.splitext(name)[1].lower() != '.pdf':
            rejected.append(FailedDocument(source_file=name, error="Somente arquivos PDF são suportados.",
                                           error_type="UnsupportedFile"))
            continue
        batch.append((name, await file.read()))

    logger.info(f"Extraction requested: {profile}", files=len(files), rejected=len(rejected))
    # the pool thread has no request id of its own
    consolidated = await run_in_threadpool(pipeline.process_batch, batch, layout, current_context())
    consolidated.failed[:0] = rejected

    failed_names = ",".join(quote(f.source_file) for f in consolidated.failed)
    if consolidated.record_count == 0:
        logger.warning("No records extracted", profile=profile, failed_files=len(consolidated.failed))
        raise HTTPException(
            status_code=400,
            detail={
                "message": "Nenhum lançamento encontrado nos arquivos enviados.",
                "failed": [f.to_dict() for f in consolidated.failed],
            },
            headers={"X-Failed-Files": failed_names} if failed_names else None,
        )

    content = ExcelExporter().generate(consolidated, layout)
    headers = {
        "Content-Disposition": f'attachment; filename="{layout.name}_extrato.xlsx"',
        "X-Request-ID": get_request_id(),
    }
    if failed_names:
        headers["X-Failed-Files"] = failed_names
    logger.info(
        f"Workbook generated: {consolidated.record_count} record(s)",
        accounts=len(consolidated.accounts), failed_files=len(consolidated.failed),
    )
    return Response(content=content, media_type=XLSX_MEDIA_TYPE, headers=headers)
