from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from bank_portal.db.base import get_db
from bank_portal.schemas.member import MemberCreate, MemberUpdate, MemberResponse
from bank_portal.services.member import create_member, get_member, list_members, update_member
from typing import List
from uuid import UUID

router = APIRouter(prefix="/api/member", tags=["member"])


@router.post("/create", response_model=MemberResponse, status_code=status.HTTP_201_CREATED)
def create_member_endpoint(payload: MemberCreate, db: Session = Depends(get_db)):
    """Onboard a member with their account, opening balance and development fee."""
    return create_member(
        db,
        mobile=payload.mobile,
        account_number=payload.account_number,
        name=payload.name,
        fathers_name=payload.fathers_name,
        address=payload.address,
        initial_amount=payload.initial_amount,
        development_fee=payload.development_fee,
    )


@router.get("/get/{member_id}", response_model=MemberResponse)
def get_member_endpoint(member_id: UUID, db: Session = Depends(get_db)):
    return get_member(db, member_id)


@router.get("/list", response_model=List[MemberResponse])
def list_members_endpoint(db: Session = Depends(get_db)):
    return list_members(db)


@router.put("/update/{member_id}", response_model=MemberResponse)
def update_member_endpoint(member_id: UUID, payload: MemberUpdate, db: Session = Depends(get_db)):
    """Update member details. Members cannot be deleted."""
    return update_member(
        db,
        member_id,
        name=payload.name,
        fathers_name=payload.fathers_name,
        mobile=payload.mobile,
        address=payload.address,
    )
