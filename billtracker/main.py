"""FastAPI application for the utility bill tracker."""

import logging
from functools import lru_cache
from uuid import UUID

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from billtracker.config import settings
from billtracker.db.base import BillStore
from billtracker.errors import BillNotFound, EmptyMessage, InvalidUtilityType
from billtracker.models import (
    AnalyticsResult,
    Bill,
    BillCreate,
    ChatRequest,
    ChatResponse,
    MarkPaidRequest,
    Month,
    MonthlyTotal,
    TrendPoint,
    UtilityStats,
    parse_utility_type,
)
from billtracker.services.advisor import classify_and_reply
from billtracker.services.analytics import compute_analytics
from billtracker.services.cost_summary import (
    compute_cost_summary,
    compute_monthly_summary,
    compute_yearly_summary,
)
from billtracker.services.trends import compute_trends

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Utility Bill Tracker",
    description="Track utility bills and get consumption insights",
    version="0.1.0",
)

# CORS for the React frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@lru_cache
def get_store() -> BillStore:
    """Get the configured bill store (created once per process)."""
    if settings.storage_backend == "memory":
        from billtracker.db.memory import InMemoryBillStore

        return InMemoryBillStore()

    from billtracker.db.sqlite import Database

    return Database()


@app.on_event("startup")
async def startup():
    """Initialize on startup."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    settings.log_config()


@app.get("/health")
async def health_check(store: BillStore = Depends(get_store)):
    """Health check endpoint."""
    return {"status": "healthy", "bill_count": store.count()}


# ==================== BILL ENDPOINTS ====================


@app.post("/bill", response_model=Bill, status_code=201)
async def create_bill(fields: BillCreate, store: BillStore = Depends(get_store)):
    """Record a new bill."""
    return store.create(fields)


@app.get("/bills", response_model=list[Bill])
async def list_bills(
    utility_type: str | None = Query(None, alias="utilityType"),
    store: BillStore = Depends(get_store),
):
    """List bills, newest year first and calendar order within a year."""
    try:
        utility = parse_utility_type(utility_type)
    except InvalidUtilityType as e:
        raise HTTPException(status_code=400, detail=str(e))

    bills = store.list_all(utility)
    return sorted(bills, key=lambda b: (-b.year, b.month.index))


@app.put("/bill/{bill_id}", response_model=Bill)
async def update_bill(bill_id: UUID, fields: BillCreate, store: BillStore = Depends(get_store)):
    """Replace a bill's month, year, utility, units and amount."""
    try:
        return store.update(bill_id, fields)
    except BillNotFound:
        raise HTTPException(status_code=404, detail="Bill not found")


@app.patch("/bill/{bill_id}/paid", response_model=Bill)
async def mark_bill_paid(
    bill_id: UUID,
    request: MarkPaidRequest | None = None,
    store: BillStore = Depends(get_store),
):
    """Mark a bill as paid."""
    payment_date = request.payment_date if request else None
    try:
        return store.mark_paid(bill_id, payment_date)
    except BillNotFound:
        raise HTTPException(status_code=404, detail="Bill not found")


@app.delete("/bill/{bill_id}")
async def delete_bill(bill_id: UUID, store: BillStore = Depends(get_store)):
    """Delete a bill."""
    try:
        store.delete(bill_id)
    except BillNotFound:
        raise HTTPException(status_code=404, detail="Bill not found")
    return {"message": "Bill deleted successfully"}


# ==================== INSIGHT ENDPOINTS ====================


@app.get("/trends", response_model=list[TrendPoint])
async def get_trends(
    utility_type: str | None = Query(None, alias="utilityType"),
    store: BillStore = Depends(get_store),
):
    """Get consumption totals per month, oldest first."""
    try:
        return compute_trends(store.list_all(), utility_type)
    except InvalidUtilityType as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.get("/analytics", response_model=AnalyticsResult)
async def get_analytics(
    utility_type: str | None = Query(None, alias="utilityType"),
    threshold: str | None = None,
    store: BillStore = Depends(get_store),
):
    """Get averages, high-consumption alerts and a per-utility breakdown."""
    try:
        utility = parse_utility_type(utility_type)
    except InvalidUtilityType as e:
        raise HTTPException(status_code=400, detail=str(e))

    return compute_analytics(store.list_all(utility), threshold)


@app.get("/cost-summary", response_model=dict[str, UtilityStats])
async def get_cost_summary(store: BillStore = Depends(get_store)):
    """Get totals and averages for electricity, water and gas."""
    return compute_cost_summary(store.list_all())


@app.get("/summary/monthly", response_model=dict[str, UtilityStats])
async def get_monthly_summary(month: Month, year: int, store: BillStore = Depends(get_store)):
    """Get per-utility totals for one month."""
    return compute_monthly_summary(store.list_all(), month, year)


@app.get("/summary/yearly", response_model=list[MonthlyTotal])
async def get_yearly_summary(year: int, store: BillStore = Depends(get_store)):
    """Get per-month totals for one year."""
    return compute_yearly_summary(store.list_all(), year)


@app.post("/chat", response_model=ChatResponse)
async def chat(request: ChatRequest, store: BillStore = Depends(get_store)):
    """Answer a question about bills or energy saving."""
    try:
        reply = classify_and_reply(request.message, store)
    except EmptyMessage as e:
        raise HTTPException(status_code=400, detail=str(e))
    return ChatResponse(reply=reply)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "billtracker.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.dev_mode,
    )
