"""
Governance query API

Read-only routes over the proposal, candidate, vote, feedback, signature and
propdate collections.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from nouns_gateway.base_schemas import DocumentJSONResponse
from nouns_gateway.config import GatewaySettings
from nouns_gateway.dependencies import get_app_settings, get_repository
from nouns_gateway.enums import ServiceEndpoint

from . import queries
from .repository import GovernanceRepository

router = APIRouter(tags=["governance"], default_response_class=DocumentJSONResponse)

Repository = Annotated[GovernanceRepository, Depends(get_repository)]
Settings = Annotated[GatewaySettings, Depends(get_app_settings)]


def _wants_summary(summary: str | None) -> bool:
    return summary == "true"


@router.get(ServiceEndpoint.NOUNS.value, response_class=PlainTextResponse)
async def list_nouns() -> str:
    return "List of all Nouns NFTs"


@router.get(ServiceEndpoint.NOUN.value, response_class=PlainTextResponse)
async def get_noun(noun_id: str) -> str:
    return f"Details of Noun NFT #{noun_id}"


@router.get(ServiceEndpoint.PROPS.value)
async def list_proposals(
    repository: Repository,
    settings: Settings,
    page: str | None = None,
    limit: str | None = None,
) -> DocumentJSONResponse:
    """List proposals, highest id first."""
    pagination = queries.parse_pagination(
        page, limit, settings.default_page_limit, settings.max_page_limit
    )
    documents = await repository.find_many(queries.list_proposals(pagination))
    return DocumentJSONResponse(documents)


# Registered before PROP so "latest" is never read as a proposal id
@router.get(ServiceEndpoint.PROPS_LATEST.value)
async def latest_proposal(repository: Repository) -> DocumentJSONResponse:
    """The most recently created proposal, or null on an empty mirror."""
    spec = queries.latest_proposal()
    return DocumentJSONResponse(await repository.find_one(spec))


@router.get(ServiceEndpoint.PROP.value, response_model=None)
async def get_proposal(
    prop_id: str,
    repository: Repository,
    summary: str | None = None,
) -> DocumentJSONResponse | PlainTextResponse:
    """
    Proposal by id.

    With `summary=true` a placeholder text is returned and the store is not
    queried.
    """
    if _wants_summary(summary):
        return PlainTextResponse(f"Summary of Proposal #{prop_id}")
    document = await repository.find_one(queries.proposal_by_id(prop_id))
    return DocumentJSONResponse(document)


@router.get(ServiceEndpoint.PROP_FEEDBACK.value)
async def get_proposal_feedback(prop_id: str, repository: Repository) -> DocumentJSONResponse:
    documents = await repository.find_many(queries.proposal_feedback(prop_id))
    return DocumentJSONResponse(documents)


@router.get(ServiceEndpoint.PROP_VOTES.value, response_model=None)
async def get_proposal_votes(
    prop_id: str,
    repository: Repository,
    summary: str | None = None,
) -> DocumentJSONResponse | PlainTextResponse:
    if _wants_summary(summary):
        return PlainTextResponse(f"Summary of all votes for Proposal #{prop_id}")
    documents = await repository.find_many(queries.proposal_votes(prop_id))
    return DocumentJSONResponse(documents)


@router.get(ServiceEndpoint.PROPDATES.value)
async def list_propdates(
    repository: Repository,
    settings: Settings,
    page: str | None = None,
    limit: str | None = None,
) -> DocumentJSONResponse:
    pagination = queries.parse_pagination(
        page, limit, settings.default_page_limit, settings.max_page_limit
    )
    documents = await repository.find_many(queries.list_propdates(pagination))
    return DocumentJSONResponse(documents)


@router.get(ServiceEndpoint.PROP_PROPDATES.value)
async def get_propdates_for_proposal(
    prop_id: str, repository: Repository
) -> DocumentJSONResponse:
    documents = await repository.find_many(queries.propdates_for_proposal(prop_id))
    return DocumentJSONResponse(documents)


@router.get(ServiceEndpoint.CANDIDATES.value)
async def list_candidates(
    repository: Repository,
    settings: Settings,
    page: str | None = None,
    limit: str | None = None,
) -> DocumentJSONResponse:
    pagination = queries.parse_pagination(
        page, limit, settings.default_page_limit, settings.max_page_limit
    )
    documents = await repository.find_many(queries.list_candidates(pagination))
    return DocumentJSONResponse(documents)


@router.get(ServiceEndpoint.CANDIDATE.value, response_model=None)
async def get_candidate(
    slug: str,
    repository: Repository,
    summary: str | None = None,
) -> DocumentJSONResponse | PlainTextResponse:
    if _wants_summary(summary):
        return PlainTextResponse(f"Summary of Candidate with slug #{slug}")
    document = await repository.find_one(queries.candidate_by_slug(slug))
    return DocumentJSONResponse(document)


@router.get(ServiceEndpoint.CANDIDATE_FEEDBACK.value)
async def get_candidate_feedback(slug: str, repository: Repository) -> DocumentJSONResponse:
    documents = await repository.find_many(queries.candidate_feedback(slug))
    return DocumentJSONResponse(documents)


@router.get(ServiceEndpoint.CANDIDATE_SIGNATURES.value)
async def get_candidate_signatures(slug: str, repository: Repository) -> DocumentJSONResponse:
    documents = await repository.find_many(queries.candidate_signatures(slug))
    return DocumentJSONResponse(documents)
