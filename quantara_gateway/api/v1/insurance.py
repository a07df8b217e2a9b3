"""Insurance vault endpoints - /v1/insurance"""

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from quantara_gateway.api.dependencies import get_event_bus, get_request_id
from quantara_gateway.api.v1.schemas import ClaimRequest, VaultCreateRequest, VaultResponse
from quantara_gateway.domain.events import EventBus
from quantara_gateway.domain.insurance import create_vault, is_healthy, process_claim
from quantara_gateway.domain.models import EventType, InsuranceVault
from quantara_gateway.infrastructure.database.repositories import InsuranceVaultRepository
from quantara_gateway.infrastructure.database.session import get_db
from quantara_gateway.infrastructure.observability.logging import log_claim
from quantara_gateway.infrastructure.observability.metrics import insurance_claim_counter

router = APIRouter()


def vault_response(vault: InsuranceVault) -> VaultResponse:
    return VaultResponse(
        id=vault.id,
        pool_id=vault.pool_id,
        total_reserve=vault.total_reserve,
        coverage_ratio=vault.coverage_ratio,
        claims_paid=vault.claims_paid,
        status=vault.status,
        healthy=is_healthy(vault),
        created_at=vault.created_at,
    )


@router.post("/insurance/vaults", response_model=VaultResponse, status_code=201)
def create_vault_endpoint(request_body: VaultCreateRequest, db: Session = Depends(get_db)):
    vault = create_vault(request_body.pool_id, request_body.initial_reserve, request_body.coverage_ratio)
    vault = InsuranceVaultRepository(db).create(vault)
    db.commit()
    return vault_response(vault)


@router.get("/insurance/vaults/{vault_id}", response_model=VaultResponse)
def get_vault(vault_id: str, db: Session = Depends(get_db)):
    vault = InsuranceVaultRepository(db).get(vault_id)
    if vault is None:
        raise HTTPException(status_code=404, detail="Insurance vault not found")
    return vault_response(vault)


@router.post("/insurance/vaults/{vault_id}/claims", response_model=VaultResponse)
def submit_claim(
    vault_id: str,
    request_body: ClaimRequest,
    request: Request,
    db: Session = Depends(get_db),
    event_bus: EventBus = Depends(get_event_bus),
):
    """
    Pay a default claim from the vault reserve.

    A claim above the remaining reserve empties the vault and marks it
    depleted; the response carries only the resulting vault state.
    """
    request_id = get_request_id(request)
    repo = InsuranceVaultRepository(db)
    vault = repo.get(vault_id)
    if vault is None:
        raise HTTPException(status_code=404, detail="Insurance vault not found")

    updated = repo.update(process_claim(vault, request_body.amount))
    db.commit()

    insurance_claim_counter.labels(outcome="depleted" if updated.status == "depleted" else "covered").inc()
    log_claim(request_id, updated.id, request_body.amount, updated.total_reserve, updated.status)
    event_bus.publish(
        EventType.INSURANCE_TRIGGERED,
        {
            "vaultId": updated.id,
            "poolId": updated.pool_id,
            "claimAmount": request_body.amount,
            "totalReserve": updated.total_reserve,
            "status": updated.status,
        },
    )

    return vault_response(updated)
