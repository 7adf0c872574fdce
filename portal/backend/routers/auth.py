from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from portal.backend.core.current_user import get_current_user
from portal.backend.core.deps import get_db
from portal.backend.core.security import create_access_token, verify_password
from portal.backend.models.user import User
from portal.backend.serializers import user_out
from portal.schemas.user import LoginRequest, LoginResponse, MeResponse

router = APIRouter()


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        401: {"description": "Invalid email or password"},
    },
)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == payload.email).first()
    if not user or not verify_password(payload.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    token = create_access_token(db, user)
    return LoginResponse(token=token, user=user_out(user))


@router.get("/me", response_model=MeResponse)
def me(current_user: User = Depends(get_current_user)):
    return MeResponse(user=user_out(current_user))
