"""
Country File Lookup - FastAPI Application
"""

import asyncio
import logging
import os
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import FastAPI, Request, HTTPException, Depends
from pydantic import BaseModel

from config import config
from cty_client import fetch_table
from cty_loader import load_table
from cty_lookup import lookup
from cty_parser import CONTINENTS, CountryTable

# Configure logging
logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


class LookupResponse(BaseModel):
    callsign: str
    name: str
    continent: str
    cq_zone: int
    itu_zone: int
    latitude: float
    longitude: float
    utc_offset: float
    primary_prefix: str
    matched_prefix: str
    match_length: int
    exact_match: bool
    waedc: bool


class EntitySummary(BaseModel):
    name: str
    primary_prefix: str
    continent: str
    cq_zone: int
    itu_zone: int
    alias_count: int
    waedc: bool


async def build_table() -> CountryTable:
    """Build the country table from the configured source."""
    if config.CTY_SOURCE == "url":
        return await fetch_table()
    if config.CTY_SOURCE != "file":
        logger.warning(f"Unknown CTY_SOURCE '{config.CTY_SOURCE}', loading from file")
    return await asyncio.to_thread(load_table)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - build the table once, drop it on shutdown."""
    app.state.cty_table = await build_table()
    yield
    app.state.cty_table = None


# Initialize app
app = FastAPI(
    title="Country File Lookup",
    description="Resolve amateur radio callsigns to DXCC entities using a cty.dat country file.",
    version="1.0.0",
    lifespan=lifespan,
)


def get_table(request: Request) -> CountryTable:
    """Dependency returning the table owned by the app."""
    table = getattr(request.app.state, "cty_table", None)
    if table is None:
        raise HTTPException(status_code=503, detail="Country table not loaded")
    return table


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok"}


@app.get("/version")
async def get_version(table: CountryTable = Depends(get_table)):
    """Data version and size of the loaded table."""
    return {"version": table.version, "entities": len(table)}


@app.get("/lookup/{callsign:path}", response_model=LookupResponse)
async def lookup_callsign(callsign: str, table: CountryTable = Depends(get_table)):
    """Resolve a callsign to its country."""
    result = lookup(table, callsign)
    if result is None:
        raise HTTPException(status_code=404, detail=f"No country found for {callsign.strip().upper()}")
    return result.to_dict()


@app.get("/entities", response_model=List[EntitySummary])
async def list_entities(continent: Optional[str] = None, table: CountryTable = Depends(get_table)):
    """List entities in file order, optionally filtered by continent code."""
    if continent is not None:
        continent = continent.upper()
        if continent not in CONTINENTS:
            raise HTTPException(status_code=400, detail=f"Unknown continent: {continent}")

    return [
        EntitySummary(
            name=entry.name,
            primary_prefix=entry.primary_prefix,
            continent=entry.continent,
            cq_zone=entry.cq_zone,
            itu_zone=entry.itu_zone,
            alias_count=len(entry.aliases),
            waedc=entry.waedc,
        )
        for entry in table
        if continent is None or entry.continent == continent
    ]


# Run with uvicorn
if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
