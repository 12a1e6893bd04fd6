from fastapi import FastAPI, HTTPException, Query
from .schemas import FeedRequest, FeedResponse, ResetRequest, ProfileResponse
from . import service
from feedrank.errors import FeedInputError

# API layer: thin FastAPI routes that validate inputs, call service, and return clean JSON.
app = FastAPI(title="Feed Ranking API")

@app.get("/healthz")
def healthz():
    # Liveness/readiness check.
    return {"ok": True}

@app.post("/feed", response_model=FeedResponse)
def feed(req: FeedRequest):
    # Return one page of the session's feed (next page when `page` is omitted).
    try:
        return service.load_feed(req.session_id, req.page, req.inputs.dict())
    except FeedInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except service.SessionBusy:
        raise HTTPException(status_code=409, detail="a page load for this session is already in flight")

@app.post("/feed/reset")
def feed_reset(req: ResetRequest):
    # Drop the session so the next request starts over.
    return service.reset_session(req.session_id)

@app.get("/profile", response_model=ProfileResponse)
def profile(session_id: str = Query(..., description="session id used with /feed")):
    # Keyword profile of the session's last request (diagnostics).
    out = service.profile_for(session_id)
    if out is None:
        raise HTTPException(status_code=404, detail="unknown session")
    return out
