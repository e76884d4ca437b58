"""FastAPI backend exposing the family tree store as JSON."""

import logging
from datetime import date
from typing import List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from family_legacy.errors import PersistenceError
from family_legacy.graph.builder import build_graph
from family_legacy.graph.diagram import build_diagram
from family_legacy.graph.layout import LayoutEngine
from family_legacy.graph.repository import FamilyRepository
from family_legacy.models import Edge, Gender, MediaItem, Member, Position, RelationKind

logger = logging.getLogger(__name__)


def _messages(error: ValidationError) -> list[str]:
    return [f"{'.'.join(str(loc) for loc in err['loc']) or 'member'}: {err['msg']}" for err in error.errors()]


class MemberIn(BaseModel):
    id: Optional[str] = None
    first_name: str
    last_name: str
    maiden_name: Optional[str] = None
    birth_date: Optional[date] = None
    death_date: Optional[date] = None
    gender: Optional[Gender] = None
    bio: Optional[str] = None
    position: Optional[Position] = None


class MemberPatch(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    maiden_name: Optional[str] = None
    birth_date: Optional[date] = None
    death_date: Optional[date] = None
    gender: Optional[Gender] = None
    bio: Optional[str] = None


class EdgeIn(BaseModel):
    from_id: str
    to_id: str
    kind: str  # parent | spouse | child


class PlacedMember(BaseModel):
    member: Member
    position: Position
    rank: Optional[int] = None


class TreeOut(BaseModel):
    members: List[PlacedMember]
    edges: List[Edge]
    junctions: List[dict]


def create_api(repository: Optional[FamilyRepository] = None,
               engine: Optional[LayoutEngine] = None) -> FastAPI:
    """Build the API app over one repository."""
    repository = repository or FamilyRepository()
    engine = engine or LayoutEngine()

    logger.info("Serving family tree API from %s", repository.db_path)
    app = FastAPI(title="Family Legacy API")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def require(member_id: str) -> Member:
        member = repository.get_member(member_id)
        if member is None:
            raise HTTPException(status_code=404, detail=f"Member not found: {member_id}")
        return member

    @app.exception_handler(PersistenceError)
    async def persistence_failed(request, exc: PersistenceError):
        return JSONResponse(status_code=503, content={"detail": str(exc)})

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.get("/members", response_model=List[Member])
    def list_members():
        return repository.list_members()

    @app.get("/members/{member_id}", response_model=Member)
    def get_member(member_id: str):
        return require(member_id)

    @app.post("/members", response_model=Member, status_code=201)
    def create_member(body: MemberIn):
        fields = body.model_dump(exclude_none=True)
        try:
            member = Member(**fields)
        except ValidationError as e:
            raise HTTPException(status_code=422, detail=_messages(e))
        if repository.get_member(member.id) is not None:
            raise HTTPException(status_code=409, detail=f"Member already exists: {member.id}")
        return repository.create_member(member)

    @app.patch("/members/{member_id}", response_model=Member)
    def update_member(member_id: str, body: MemberPatch):
        current = require(member_id)
        changes = body.model_dump(exclude_unset=True)
        try:
            updated = Member(**{**current.model_dump(), **changes})
        except ValidationError as e:
            raise HTTPException(status_code=422, detail=_messages(e))
        repository.update_member(member_id, **{k: getattr(updated, k) for k in changes})
        return updated

    @app.delete("/members/{member_id}", status_code=204)
    def delete_member(member_id: str):
        require(member_id)
        repository.delete_member(member_id)

    @app.put("/members/{member_id}/position", response_model=Member)
    def set_position(member_id: str, body: Position):
        require(member_id)
        repository.set_member_position(member_id, body.x, body.y)
        return repository.get_member(member_id)

    @app.post("/members/{member_id}/media", response_model=Member, status_code=201)
    def add_media(member_id: str, body: MediaItem):
        require(member_id)
        repository.add_media(member_id, body)
        return repository.get_member(member_id)

    @app.get("/edges", response_model=List[Edge])
    def list_edges():
        return repository.list_edges()

    @app.post("/edges")
    def create_edge(body: EdgeIn):
        try:
            edge = Edge.normalize(body.from_id, body.to_id, body.kind)
        except ValueError:
            raise HTTPException(status_code=422, detail=f"Unknown relationship kind: {body.kind}")
        if edge.is_self_loop:
            raise HTTPException(status_code=422, detail="A member cannot be related to themselves")
        require(edge.from_id)
        require(edge.to_id)
        if edge.kind == RelationKind.PARENT:
            graph = build_graph(repository.list_members(), repository.list_edges())
            if graph.is_ancestor(edge.to_id, edge.from_id):
                raise HTTPException(status_code=422, detail="A member cannot be their own ancestor")
        created = repository.create_edge(edge.from_id, edge.to_id, edge.kind)
        return {"edge": edge, "created": created}

    @app.delete("/edges")
    def delete_edge(body: EdgeIn):
        try:
            removed = repository.delete_edge(body.from_id, body.to_id, body.kind)
        except ValueError:
            raise HTTPException(status_code=422, detail=f"Unknown relationship kind: {body.kind}")
        return {"removed": removed}

    @app.get("/tree", response_model=TreeOut)
    def tree():
        """Members with laid-out positions, edges and marriage junctions."""
        graph = build_graph(repository.list_members(), repository.list_edges())
        layout = engine.layout(graph)
        diagram = build_diagram(graph, layout)
        return TreeOut(
            members=[
                PlacedMember(member=m, position=layout.positions[mid], rank=layout.ranks.get(mid))
                for mid, m in graph.members.items()
            ],
            edges=graph.edges,
            junctions=[
                {"spouses": list(node.ref.spouses), "x": node.position.x, "y": node.position.y}
                for node in diagram.nodes if node.is_marriage
            ],
        )

    return app
