"""
Query builders for the governance routes.

Every builder is a pure function returning a QuerySpec: the filter, the fixed
field projection, the sort order and the page window of one route. Nothing
from the request reaches a filter except path identifiers, which are matched
by equality only.
"""

from typing import Any

from pymongo import DESCENDING

from nouns_gateway.enums import CollectionName

from .schemas import Pagination, QuerySpec


def _projection(*fields: str) -> dict[str, int]:
    projection = {"_id": 0}
    projection.update(dict.fromkeys(fields, 1))
    return projection


PROPOSAL_PROJECTION = _projection(
    "id",
    "proposer",
    "description",
    "calldatas",
    "targets",
    "values",
    "startBlock",
    "endBlock",
    "txHash",
    "blockNumber",
    "msgSender",
)

CANDIDATE_PROJECTION = _projection(
    "id",
    "proposer",
    "description",
    "calldatas",
    "targets",
    "values",
    "startBlock",
    "endBlock",
    "txHash",
    "blockNumber",
    "slug",
    "proposalIdToUpdate",
    "encodedProposalHash",
)

VOTE_PROJECTION = _projection(
    "proposalId", "blockNumber", "reason", "support", "voter", "votes", "txHash"
)

PROPOSAL_FEEDBACK_PROJECTION = _projection(
    "proposalId", "blockNumber", "reason", "support", "msgSender", "txHash"
)

CANDIDATE_FEEDBACK_PROJECTION = _projection(
    "slug", "blockNumber", "reason", "support", "msgSender", "txHash"
)

SIGNATURE_PROJECTION = _projection(
    "slug", "blockNumber", "reason", "signer", "proposer", "txHash"
)

POST_UPDATE_PROJECTION = _projection(
    "propId", "txHash", "blockNumber", "msgSender", "update", "isCompleted"
)

BY_ID_DESC = [("id", DESCENDING)]
BY_BLOCK_DESC = [("blockNumber", DESCENDING)]

# BSON integers are signed 64-bit
MAX_INT64 = 2**63 - 1


def _parse_int(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


def parse_pagination(
    page: str | None,
    limit: str | None,
    default_limit: int = 10,
    max_limit: int = 50,
) -> Pagination:
    """
    Build a page window from raw query parameters.

    Missing or non-numeric values use the defaults (page 1, `default_limit`).
    The page is floored at 1 and the limit clamped to [1, max_limit]. The page
    is also capped so the resulting skip still fits in a BSON int64.
    """
    parsed_page = _parse_int(page)
    parsed_limit = _parse_int(limit)

    page_number = max(parsed_page if parsed_page is not None else 1, 1)
    page_size = parsed_limit if parsed_limit is not None else default_limit
    page_size = min(max(page_size, 1), max_limit)
    page_number = min(page_number, MAX_INT64 // page_size + 1)
    return Pagination(page=page_number, limit=page_size)


def match_id(value: str) -> Any:
    """
    Equality matcher for a numeric identifier taken from the path.

    Event mirrors store ids either as decimal strings or as integers, so a
    decimal value matches both representations. Values too large for a BSON
    int64 can only be stored as strings and match the string alone.
    """
    value = value.strip()
    if value.isdecimal() and len(value) <= 19 and int(value) <= MAX_INT64:
        return {"$in": [value, int(value)]}
    return value


def list_proposals(pagination: Pagination) -> QuerySpec:
    return QuerySpec(
        collection=CollectionName.PROPOSAL_CREATED,
        projection=PROPOSAL_PROJECTION,
        sort=BY_ID_DESC,
        skip=pagination.skip,
        limit=pagination.limit,
    )


def latest_proposal() -> QuerySpec:
    return QuerySpec(
        collection=CollectionName.PROPOSAL_CREATED,
        projection=PROPOSAL_PROJECTION,
        sort=BY_BLOCK_DESC,
        limit=1,
    )


def proposal_by_id(prop_id: str) -> QuerySpec:
    return QuerySpec(
        collection=CollectionName.PROPOSAL_CREATED,
        filter={"id": match_id(prop_id)},
        projection=PROPOSAL_PROJECTION,
        limit=1,
    )


def proposal_feedback(prop_id: str) -> QuerySpec:
    return QuerySpec(
        collection=CollectionName.FEEDBACK_SENT,
        filter={"proposalId": match_id(prop_id)},
        projection=PROPOSAL_FEEDBACK_PROJECTION,
        sort=BY_BLOCK_DESC,
    )


def proposal_votes(prop_id: str) -> QuerySpec:
    return QuerySpec(
        collection=CollectionName.VOTE_CAST,
        filter={"proposalId": match_id(prop_id)},
        projection=VOTE_PROJECTION,
        sort=BY_BLOCK_DESC,
    )


def list_propdates(pagination: Pagination) -> QuerySpec:
    return QuerySpec(
        collection=CollectionName.POST_UPDATE,
        projection=POST_UPDATE_PROJECTION,
        sort=BY_BLOCK_DESC,
        skip=pagination.skip,
        limit=pagination.limit,
    )


def propdates_for_proposal(prop_id: str) -> QuerySpec:
    return QuerySpec(
        collection=CollectionName.POST_UPDATE,
        filter={"propId": match_id(prop_id)},
        projection=POST_UPDATE_PROJECTION,
        sort=BY_BLOCK_DESC,
    )


def list_candidates(pagination: Pagination) -> QuerySpec:
    return QuerySpec(
        collection=CollectionName.PROPOSAL_CANDIDATE_CREATED,
        projection=CANDIDATE_PROJECTION,
        sort=BY_BLOCK_DESC,
        skip=pagination.skip,
        limit=pagination.limit,
    )


def candidate_by_slug(slug: str) -> QuerySpec:
    # Slugs are reusable across proposers; the most recent creation wins
    return QuerySpec(
        collection=CollectionName.PROPOSAL_CANDIDATE_CREATED,
        filter={"slug": slug},
        projection=CANDIDATE_PROJECTION,
        sort=BY_BLOCK_DESC,
        limit=1,
    )


def candidate_feedback(slug: str) -> QuerySpec:
    return QuerySpec(
        collection=CollectionName.CANDIDATE_FEEDBACK_SENT,
        filter={"slug": slug},
        projection=CANDIDATE_FEEDBACK_PROJECTION,
        sort=BY_BLOCK_DESC,
    )


def candidate_signatures(slug: str) -> QuerySpec:
    return QuerySpec(
        collection=CollectionName.SIGNATURE_ADDED,
        filter={"slug": slug},
        projection=SIGNATURE_PROJECTION,
        sort=BY_BLOCK_DESC,
    )
