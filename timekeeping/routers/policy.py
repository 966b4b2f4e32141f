from fastapi import APIRouter

from timekeeping.schemas import (
    JurisdictionListResponse,
    JurisdictionRead,
    OvertimePolicyRead,
    ResolvePolicyRequest,
    ResolvePolicyResponse,
)
from timekeeping.services.policy_registry import (
    DEFAULT_OVERTIME_POLICY,
    JURISDICTION_POLICIES,
    KNOWN_JURISDICTIONS,
    is_known_jurisdiction,
    resolve_overtime_policy,
)

router = APIRouter(tags=["policy"])


def _known_jurisdictions() -> list[JurisdictionRead]:
    items: list[JurisdictionRead] = []
    listed_codes: set[str] = set()
    for item in KNOWN_JURISDICTIONS:
        policy = JURISDICTION_POLICIES.get(item["code"])
        items.append(
            JurisdictionRead(
                code=item["code"],
                name=item["name"],
                features=dict(item["features"]),
                overtime_policy=OvertimePolicyRead.model_validate(policy) if policy else None,
            )
        )
        listed_codes.add(item["code"])

    for code, policy in sorted(JURISDICTION_POLICIES.items()):
        if code in listed_codes:
            continue
        items.append(
            JurisdictionRead(
                code=code,
                name=code,
                overtime_policy=OvertimePolicyRead.model_validate(policy),
            )
        )
    return items


@router.get("/api/policy/jurisdictions", response_model=JurisdictionListResponse)
def list_jurisdictions() -> JurisdictionListResponse:
    return JurisdictionListResponse(
        default_policy=OvertimePolicyRead.model_validate(DEFAULT_OVERTIME_POLICY),
        jurisdictions=_known_jurisdictions(),
    )


@router.post("/api/policy/overtime/resolve", response_model=ResolvePolicyResponse)
def resolve_policy(payload: ResolvePolicyRequest) -> ResolvePolicyResponse:
    override = payload.override.to_domain() if payload.override else None
    policy = resolve_overtime_policy(payload.jurisdiction, override)
    return ResolvePolicyResponse(
        jurisdiction=payload.jurisdiction,
        known_jurisdiction=is_known_jurisdiction(payload.jurisdiction),
        policy=OvertimePolicyRead.model_validate(policy),
    )
