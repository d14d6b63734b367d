"""
Browser Tables - FastAPI Entry Point

Extracts a table from a URL into header rows, body rows and records.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from .browser import TableBrowser
from .config import CONFIG
from .errors import TableError
from .schemas import HeaderSelectors, RowSelectors, TableExtractionRequest, TableExtractionResult
from .table import PlaywrightTable

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan manager"""
    logger.info("🚀 Browser Tables service starting...")
    yield
    logger.info("👋 Browser Tables service shutting down...")


app = FastAPI(
    title="Browser Tables",
    description="Span-aware HTML table extraction",
    version=VERSION,
    lifespan=lifespan
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health():
    """Health check"""
    return {"status": "healthy", "service": "browser-tables", "version": VERSION}


@app.post("/extract", response_model=TableExtractionResult)
async def extract(request: TableExtractionRequest):
    """
    Load a page and extract one table from it.

    Table errors (missing rows, bad spans, unstable content) answer 422;
    browser launch and navigation failures answer 502.
    """
    logger.info(f"📥 Extracting {request.table_selector!r} from {request.url}")

    browser = TableBrowser()
    if not await browser.launch(headless=True):
        raise HTTPException(status_code=502, detail="Failed to launch browser")

    try:
        if not await browser.navigate(request.url):
            raise HTTPException(status_code=502, detail=f"Failed to navigate to {request.url}")

        table = PlaywrightTable(
            browser.page.locator(request.table_selector),
            header=HeaderSelectors(
                row_selector=request.header_row_selector,
                column_selector=request.header_cell_selector,
                set_main_header_row=request.main_header_row,
            ),
            row=RowSelectors(
                row_selector=request.body_row_selector,
                column_selector=request.body_cell_selector,
            ),
        )

        if request.stability:
            await table.wait_for_stable(
                stability_duration=request.stability.stability_duration,
                check_interval=request.stability.check_interval,
                timeout=request.stability.timeout,
                body_row_options=request.body_row_options,
            )

        records = await table.get_json(
            timeout=request.timeout,
            header_row_options=request.header_row_options,
            body_row_options=request.body_row_options,
        )

        logger.info(f"✅ Extracted {len(records)} rows from {request.url}")
        return TableExtractionResult(
            success=True,
            headers=table.header_rows,
            rows=table.body_rows,
            records=records,
        )
    except (TableError, ValueError) as e:
        logger.error(f"❌ Extraction failed: {e}")
        raise HTTPException(status_code=422, detail=str(e))
    finally:
        await browser.close()


def main():
    import uvicorn
    uvicorn.run(app, host=CONFIG.SERVICE_HOST, port=CONFIG.SERVICE_PORT)


# For running directly
if __name__ == "__main__":
    main()
