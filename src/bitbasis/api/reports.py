"""Reports API: realized-gains workbook download."""

import uuid
from datetime import datetime
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from bitbasis.api.deps import get_db, get_user_id
from bitbasis.config import settings
from bitbasis.report.data_collector import ReportDataCollector
from bitbasis.report.excel_writer import ExcelWriter

router = APIRouter(prefix="/api/reports", tags=["reports"])

DbDep = Annotated[AsyncSession, Depends(get_db)]
UserDep = Annotated[uuid.UUID, Depends(get_user_id)]

XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.get("/realized-gains.xlsx")
async def download_realized_gains(
    db: DbDep,
    user_id: UserDep,
    date_from: Optional[datetime] = Query(None),
    date_to: Optional[datetime] = Query(None),
) -> StreamingResponse:
    data = await ReportDataCollector(db).collect(
        user_id,
        settings.short_term_rate,
        settings.long_term_rate,
        include_loss_offset=settings.include_loss_offset,
        date_from=date_from,
        date_to=date_to,
    )
    buf = ExcelWriter().write_to_buffer(data)
    return StreamingResponse(
        buf,
        media_type=XLSX_CONTENT_TYPE,
        headers={"Content-Disposition": 'attachment; filename="realized_gains.xlsx"'},
    )
