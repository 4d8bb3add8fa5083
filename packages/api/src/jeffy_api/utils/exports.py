"""CSV and PDF download responses."""

from __future__ import annotations

from datetime import date
from typing import Any

from fastapi.responses import Response, StreamingResponse

from jeffy_shared.exports import frame_to_csv_bytes, rows_to_frame


def csv_response(
    rows: list[dict[str, Any]],
    columns: tuple[str, ...] | list[str],
    filename_stem: str,
) -> StreamingResponse:
    """Stream rows as a dated CSV attachment, header row included even when empty."""
    content = frame_to_csv_bytes(rows_to_frame(rows, columns))
    filename = f"{filename_stem}-{date.today().isoformat()}.csv"
    return StreamingResponse(
        iter([content]),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def pdf_response(content: bytes, filename: str, *, inline: bool = True) -> Response:
    disposition = "inline" if inline else "attachment"
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'{disposition}; filename="{filename}"'},
    )
