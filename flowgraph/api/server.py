"""
Flow Graph API Server
=====================

HTTP surface over graph sessions. One session per root address.

Endpoints:
- GET    /health
- GET    /api/v1/graph/{address}                 -> root graph view (loads on first call)
- POST   /api/v1/graph/{address}/expand          -> expand addresses concurrently
- GET    /api/v1/graph/{address}/path            -> shortest address chain between two nodes
- GET    /api/v1/graph/{address}/metrics         -> structural metrics + session counters
- DELETE /api/v1/graph/{address}                 -> drop the session
- GET    /api/v1/address/{address}               -> balance summary
- GET    /api/v1/address/{address}/counterparties
- GET    /api/v1/address/{address}/transactions   -> ?direction=all|in|out&status=all|confirmed|unconfirmed

Usage:
    uvicorn flowgraph.api.server:app --reload
"""

from __future__ import annotations
from contextlib import asynccontextmanager
from typing import Dict, List, Optional
import logging

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from ..config import FlowGraphConfig
from ..contracts import Address, ChainDataProvider, FetchFailure
from ..core.classifier import DirectionFilter, StatusFilter, filter_summaries, summarize_transaction
from ..core.counterparties import TOP_N, extract_counterparties
from ..core.topology import analyze
from ..expansion import GraphSession

logger = logging.getLogger(__name__)


class ExpandRequest(BaseModel):
    addresses: List[str] = Field(..., min_length=1)


def _fetch_error(failure: FetchFailure) -> HTTPException:
    return HTTPException(status_code=502, detail=str(failure))


def create_app(
    provider: Optional[ChainDataProvider] = None,
    config: Optional[FlowGraphConfig] = None
) -> FastAPI:
    """
    Build the app. Without a provider, a BlockstreamFetcher is created from
    the environment at startup.
    """
    sessions: Dict[Address, GraphSession] = {}
    state = {'provider': provider, 'config': config}

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if state['config'] is None:
            state['config'] = FlowGraphConfig.from_env()
        if state['provider'] is None:
            from chaindata import BlockstreamFetcher
            state['provider'] = BlockstreamFetcher.from_config(state['config'].provider)
        logger.info("Chain data provider: %s", type(state['provider']).__name__)
        yield
        sessions.clear()

    app = FastAPI(
        title="Flow Graph API",
        version="0.1.0",
        description="Money-flow graph exploration around Bitcoin addresses",
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["*"],
    )

    def _session_for(address: Address) -> GraphSession:
        session = sessions.get(address)
        if session is None or session.graph is None:
            raise HTTPException(status_code=404, detail=f"No graph loaded for {address}")
        return session

    def _view(session: GraphSession, routes: bool = False) -> dict:
        from rendering import GraphViewMapper
        view = GraphViewMapper().to_view(
            session.graph, session.store, sizes={} if routes else None
        )
        payload = view.to_dict()
        payload['loading'] = sorted(session.store.loading)
        payload['expanded'] = sorted(session.store.expanded)
        return payload

    # =========================================================================
    # ENDPOINTS
    # =========================================================================

    @app.get("/health")
    async def health_check():
        return {"status": "online", "sessions": len(sessions)}

    @app.get("/api/v1/graph/{address}")
    async def get_graph(address: str, routes: bool = False):
        session = sessions.get(address)
        if session is None or session.graph is None:
            session = GraphSession(state['provider'], state['config'], name=address[:12])
            sessions[address] = session
            try:
                await session.load_root(address)
            except FetchFailure as failure:
                if sessions.get(address) is session:
                    del sessions[address]
                raise _fetch_error(failure)
        return _view(session, routes)

    @app.post("/api/v1/graph/{address}/expand")
    async def expand(address: str, request: ExpandRequest, routes: bool = False):
        session = _session_for(address)
        outcomes = await session.expand_many(request.addresses)
        payload = _view(session, routes)
        payload['outcomes'] = [o.to_dict() for o in outcomes]
        return payload

    @app.get("/api/v1/graph/{address}/path")
    async def trace_path(address: str, source: str, target: str):
        session = _session_for(address)
        path = analyze(session.graph).trace_path(source, target)
        if path is None:
            raise HTTPException(status_code=404, detail=f"No path between {source} and {target}")
        return {"source": source, "target": target, "path": path}

    @app.get("/api/v1/graph/{address}/metrics")
    async def graph_metrics(address: str):
        session = _session_for(address)
        return {
            "topology": analyze(session.graph).compute_metrics().to_dict(),
            "session": session.metrics.snapshot(),
            "generation": session.generation,
        }

    @app.delete("/api/v1/graph/{address}")
    async def drop_graph(address: str):
        session = sessions.pop(address, None)
        if session is None:
            raise HTTPException(status_code=404, detail=f"No graph loaded for {address}")
        session.reset()
        return {"dropped": address}

    @app.get("/api/v1/address/{address}")
    async def address_info(address: str):
        from rendering import detect_address_format
        try:
            info = await state['provider'].fetch_address_info(address)
        except FetchFailure as failure:
            raise _fetch_error(failure)
        return {
            "address": info.address,
            "format": detect_address_format(info.address).value,
            "balance_satoshis": info.balance_satoshis,
            "tx_count": info.chain_stats.tx_count + info.mempool_stats.tx_count,
        }

    @app.get("/api/v1/address/{address}/counterparties")
    async def counterparties(address: str, limit: int = Query(TOP_N, ge=1)):
        try:
            transactions = await state['provider'].fetch_transactions(address)
        except FetchFailure as failure:
            raise _fetch_error(failure)
        ranked = extract_counterparties(transactions, address, top_n=limit)
        return {"address": address, "counterparties": [c.to_dict() for c in ranked]}

    @app.get("/api/v1/address/{address}/transactions")
    async def transactions(
        address: str,
        direction: DirectionFilter = DirectionFilter.ALL,
        status: StatusFilter = StatusFilter.ALL
    ):
        try:
            txs = await state['provider'].fetch_transactions(address)
        except FetchFailure as failure:
            raise _fetch_error(failure)
        summaries = filter_summaries(
            (summarize_transaction(tx, address) for tx in txs), direction, status
        )
        rows = []
        for s in summaries:
            rows.append({
                "txid": s.txid,
                "direction": s.direction.value,
                "value_satoshis": s.value_satoshis,
                "fee": s.fee,
                "confirmed": s.confirmed,
                "block_time": s.block_time,
            })
        return {"address": address, "transactions": rows}

    return app


app = create_app()
