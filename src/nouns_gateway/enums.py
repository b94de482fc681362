"""
Enumerations and constants for the governance query gateway.
"""

from enum import Enum


class CollectionName(str, Enum):
    """Event collections mirrored from the governance contracts."""

    PROPOSAL_CREATED = "ProposalCreated"
    PROPOSAL_CANDIDATE_CREATED = "ProposalCandidateCreated"
    VOTE_CAST = "VoteCast"
    FEEDBACK_SENT = "FeedbackSent"
    CANDIDATE_FEEDBACK_SENT = "CandidateFeedbackSent"
    SIGNATURE_ADDED = "SignatureAdded"
    POST_UPDATE = "PostUpdate"


class ServiceEndpoint(str, Enum):
    """API endpoints exposed by the gateway, relative to their mount point."""

    # Operational endpoints (mounted at the root)
    HEALTH = "/health"
    METRICS = "/metrics"

    # Governance endpoints (mounted under the API base path)
    NOUNS = "/nouns"
    NOUN = "/nouns/{noun_id}"
    PROPS = "/props"
    PROPS_LATEST = "/props/latest"
    PROP = "/props/{prop_id}"
    PROP_FEEDBACK = "/props/{prop_id}/feedback"
    PROP_VOTES = "/props/{prop_id}/votes"
    PROPDATES = "/propdates"
    PROP_PROPDATES = "/propdates/{prop_id}"
    CANDIDATES = "/candidates"
    CANDIDATE = "/candidates/{slug}"
    CANDIDATE_FEEDBACK = "/candidates/{slug}/feedback"
    CANDIDATE_SIGNATURES = "/candidates/{slug}/signatures"
