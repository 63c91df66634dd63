"""Shared test data factories."""

from tests.fixtures.factories import (
    RecordingSender,
    auth_headers,
    make_brand,
    make_campaign,
    make_campaign_payload,
    make_campaign_spec,
    make_email,
    make_file,
    make_influencer,
    make_user,
    proof_payload,
)

__all__ = [
    "RecordingSender",
    "auth_headers",
    "make_brand",
    "make_campaign",
    "make_campaign_payload",
    "make_campaign_spec",
    "make_email",
    "make_file",
    "make_influencer",
    "make_user",
    "proof_payload",
]
