from __future__ import annotations

from dataclasses import dataclass

import boto3

DEFAULT_REGION = "us-east-1"


@dataclass(slots=True, frozen=True)
class ClientConfig:
    region: str = DEFAULT_REGION
    endpoint_url: str | None = None     # e.g. LocalStack
    profile: str | None = None


def resolve_region(explicit: str | None, profile: str | None = None) -> str:
    """--region, then the boto3 default chain (env vars, profile), then us-east-1."""
    if explicit:
        return explicit
    session = boto3.Session(profile_name=profile)
    return session.region_name or DEFAULT_REGION


def load_config(region: str | None = None, endpoint_url: str | None = None,
                profile: str | None = None) -> ClientConfig:
    return ClientConfig(
        region=resolve_region(region, profile),
        endpoint_url=endpoint_url or None,
        profile=profile or None,
    )
