"""
Shared fixtures: an in-memory stand-in for the async MongoDB client.

Only the surface the gateway uses is modelled: `client[db]`, `db[collection]`,
`db.command("ping")`, `collection.find(filter, projection)` returning a cursor
with `sort/skip/limit/to_list`, `collection.find_one(...)` and `client.close()`.
"""

import asyncio
from collections.abc import Generator
import copy
from typing import Any

from bson import ObjectId
from fastapi import FastAPI
from fastapi.testclient import TestClient
from pymongo.errors import PyMongoError, ServerSelectionTimeoutError
import pytest

from nouns_gateway.app_factory import create_app
from nouns_gateway.config import GatewaySettings


def _matches(document: dict[str, Any], query: dict[str, Any]) -> bool:
    for key, condition in query.items():
        value = document.get(key)
        if isinstance(condition, dict) and "$in" in condition:
            if value not in condition["$in"]:
                return False
        elif value != condition:
            return False
    return True


def _project(document: dict[str, Any], projection: dict[str, int] | None) -> dict[str, Any]:
    if not projection:
        return copy.deepcopy(document)
    included = [k for k, v in projection.items() if v]
    result = {k: copy.deepcopy(document[k]) for k in included if k in document}
    if projection.get("_id", 1) and "_id" in document and "_id" not in result:
        result["_id"] = document["_id"]
    return result


def _apply_sort(
    documents: list[dict[str, Any]], sort: list[tuple[str, int]] | None
) -> list[dict[str, Any]]:
    result = list(documents)
    for field, direction in reversed(sort or []):
        result.sort(key=lambda d, f=field: d.get(f), reverse=direction < 0)
    return result


class FakeCursor:
    def __init__(self, collection: "FakeCollection", query: dict, projection: dict | None):
        self.collection = collection
        self.query = query
        self.projection = projection
        self.sort_spec: list[tuple[str, int]] | None = None
        self.skip_count = 0
        self.limit_count = 0

    def sort(self, key_or_list: Any, direction: int | None = None) -> "FakeCursor":
        if isinstance(key_or_list, str):
            key_or_list = [(key_or_list, direction if direction is not None else 1)]
        self.sort_spec = list(key_or_list)
        return self

    def skip(self, count: int) -> "FakeCursor":
        self.skip_count = count
        return self

    def limit(self, count: int) -> "FakeCursor":
        self.limit_count = count
        return self

    async def to_list(self, length: int | None = None) -> list[dict[str, Any]]:
        self.collection.calls.append(
            {
                "op": "find",
                "filter": self.query,
                "projection": self.projection,
                "sort": self.sort_spec,
                "skip": self.skip_count,
                "limit": self.limit_count,
            }
        )
        if self.collection.error is not None:
            raise self.collection.error
        matched = [d for d in self.collection.documents if _matches(d, self.query)]
        matched = _apply_sort(matched, self.sort_spec)[self.skip_count :]
        if self.limit_count:
            matched = matched[: self.limit_count]
        if length is not None:
            matched = matched[:length]
        return [_project(d, self.projection) for d in matched]


class FakeCollection:
    def __init__(self, name: str, documents: list[dict[str, Any]] | None = None) -> None:
        self.name = name
        self.documents = list(documents or [])
        self.calls: list[dict[str, Any]] = []
        self.error: PyMongoError | None = None

    def find(self, query: dict | None = None, projection: dict | None = None) -> FakeCursor:
        return FakeCursor(self, query or {}, projection)

    async def find_one(
        self,
        query: dict | None = None,
        projection: dict | None = None,
        sort: list[tuple[str, int]] | None = None,
    ) -> dict[str, Any] | None:
        self.calls.append(
            {"op": "find_one", "filter": query or {}, "projection": projection, "sort": sort}
        )
        if self.error is not None:
            raise self.error
        matched = [d for d in self.documents if _matches(d, query or {})]
        matched = _apply_sort(matched, sort)
        return _project(matched[0], projection) if matched else None


class FakeDatabase:
    def __init__(self, name: str = "noun") -> None:
        self.name = name
        self.collections: dict[str, FakeCollection] = {}
        self.ping_count = 0
        self.ping_error: PyMongoError | None = None

    def __getitem__(self, name: str) -> FakeCollection:
        if name not in self.collections:
            self.collections[name] = FakeCollection(name)
        return self.collections[name]

    def seed(self, name: str, documents: list[dict[str, Any]]) -> None:
        self[name].documents.extend(documents)

    def all_calls(self) -> list[dict[str, Any]]:
        return [call for c in self.collections.values() for call in c.calls]

    async def command(self, name: str) -> dict[str, Any]:
        assert name == "ping"
        self.ping_count += 1
        # Yield so concurrent callers get a chance to race the connect
        await asyncio.sleep(0)
        if self.ping_error is not None:
            raise self.ping_error
        return {"ok": 1.0}


class FakeClient:
    def __init__(self, database: FakeDatabase, uri: str, **kwargs: Any) -> None:
        self.database = database
        self.uri = uri
        self.kwargs = kwargs
        self.closed = False

    def __getitem__(self, name: str) -> FakeDatabase:
        self.database.name = name
        return self.database

    async def close(self) -> None:
        self.closed = True


class FakeClientFactory:
    """Callable replacing AsyncMongoClient; records every client it builds."""

    def __init__(self, database: FakeDatabase | None = None) -> None:
        self.database = database or FakeDatabase()
        self.clients: list[FakeClient] = []

    def __call__(self, uri: str, **kwargs: Any) -> FakeClient:
        client = FakeClient(self.database, uri, **kwargs)
        self.clients.append(client)
        return client


# Created in a later block than any higher-numbered proposal
LATEST_PROPOSAL_ID = 12


def _proposal(number: int) -> dict[str, Any]:
    return {
        "_id": ObjectId(),
        "id": number,
        "proposer": f"0xproposer{number}",
        "description": f"# Proposal {number}",
        "calldatas": ["0x"],
        "targets": ["0xtarget"],
        "values": ["0"],
        "startBlock": 2000 + number,
        "endBlock": 3000 + number,
        "txHash": f"0xtx{number}",
        "blockNumber": 1100 if number == LATEST_PROPOSAL_ID else 1000 + number,
        "msgSender": f"0xsender{number}",
        "signers": ["0xnot-projected"],
    }


def seed_governance(database: FakeDatabase) -> None:
    """Seed every collection with a small, known data set."""
    database.seed("ProposalCreated", [_proposal(n) for n in range(1, 26)])
    database.seed(
        "VoteCast",
        [
            {"_id": ObjectId(), "proposalId": "3", "blockNumber": 1101, "reason": "",
             "support": 1, "voter": "0xa", "votes": 2, "txHash": "0xv1"},
            {"_id": ObjectId(), "proposalId": 3, "blockNumber": 1105, "reason": "yes",
             "support": 1, "voter": "0xb", "votes": 1, "txHash": "0xv2"},
            {"_id": ObjectId(), "proposalId": "4", "blockNumber": 1103, "reason": "",
             "support": 0, "voter": "0xc", "votes": 5, "txHash": "0xv3"},
        ],
    )
    database.seed(
        "FeedbackSent",
        [
            {"_id": ObjectId(), "proposalId": "3", "blockNumber": 1090, "reason": "early",
             "support": 2, "msgSender": "0xd", "txHash": "0xf1"},
            {"_id": ObjectId(), "proposalId": "3", "blockNumber": 1095, "reason": "later",
             "support": 1, "msgSender": "0xe", "txHash": "0xf2"},
        ],
    )
    database.seed(
        "PostUpdate",
        [
            {"_id": ObjectId(), "propId": "3", "txHash": f"0xp{n}", "blockNumber": 1200 + n,
             "msgSender": "0xbuilder", "update": f"update {n}", "isCompleted": n == 3}
            for n in range(1, 4)
        ]
        + [
            {"_id": ObjectId(), "propId": "7", "txHash": "0xp7", "blockNumber": 1150,
             "msgSender": "0xother", "update": "kickoff", "isCompleted": False}
        ],
    )
    database.seed(
        "ProposalCandidateCreated",
        [
            {"_id": ObjectId(), "id": "c1", "proposer": "0xalice", "description": "v1",
             "calldatas": [], "targets": [], "values": [], "startBlock": 0, "endBlock": 0,
             "txHash": "0xc1", "blockNumber": 1300, "slug": "alpha",
             "proposalIdToUpdate": "0", "encodedProposalHash": "0xhash1"},
            {"_id": ObjectId(), "id": "c2", "proposer": "0xalice", "description": "v2",
             "calldatas": [], "targets": [], "values": [], "startBlock": 0, "endBlock": 0,
             "txHash": "0xc2", "blockNumber": 1310, "slug": "alpha",
             "proposalIdToUpdate": "0", "encodedProposalHash": "0xhash2"},
            {"_id": ObjectId(), "id": "c3", "proposer": "0xbob", "description": "beta",
             "calldatas": [], "targets": [], "values": [], "startBlock": 0, "endBlock": 0,
             "txHash": "0xc3", "blockNumber": 1305, "slug": "beta",
             "proposalIdToUpdate": "0", "encodedProposalHash": "0xhash3"},
        ],
    )
    database.seed(
        "CandidateFeedbackSent",
        [
            {"_id": ObjectId(), "slug": "alpha", "blockNumber": 1320, "reason": "nice",
             "support": 1, "msgSender": "0xf", "txHash": "0xcf1"},
            {"_id": ObjectId(), "slug": "alpha", "blockNumber": 1330, "reason": "nicer",
             "support": 1, "msgSender": "0xg", "txHash": "0xcf2"},
            {"_id": ObjectId(), "slug": "beta", "blockNumber": 1325, "reason": "meh",
             "support": 2, "msgSender": "0xh", "txHash": "0xcf3"},
        ],
    )
    database.seed(
        "SignatureAdded",
        [
            {"_id": ObjectId(), "slug": "alpha", "blockNumber": 1340, "reason": "sponsor",
             "signer": "0xsigner1", "proposer": "0xalice", "txHash": "0xs1"},
            {"_id": ObjectId(), "slug": "alpha", "blockNumber": 1350, "reason": "",
             "signer": "0xsigner2", "proposer": "0xalice", "txHash": "0xs2"},
        ],
    )


@pytest.fixture
def settings() -> GatewaySettings:
    """Gateway settings pointing at a fake deployment."""
    return GatewaySettings(MONGODB_URI="mongodb://fake-host:27017", MONGODB_DATABASE="noun")


@pytest.fixture
def fake_database() -> FakeDatabase:
    database = FakeDatabase()
    seed_governance(database)
    return database


@pytest.fixture
def client_factory(fake_database: FakeDatabase) -> FakeClientFactory:
    return FakeClientFactory(fake_database)


@pytest.fixture
def app(settings: GatewaySettings, client_factory: FakeClientFactory) -> FastAPI:
    return create_app(settings, client_factory=client_factory)


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def unreachable_factory() -> FakeClientFactory:
    factory = FakeClientFactory()
    factory.database.ping_error = ServerSelectionTimeoutError("fake-host:27017: timed out")
    return factory
