"""Auth 기능 API 라우터입니다. 요청을 검증하고 서비스 레이어로 비즈니스 로직을 위임합니다."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from teamswap.database import get_db
from teamswap.schemas.user import IdentityOut, LoginRequest, SignUpRequest, TokenResponse
from teamswap.services import auth_service
from teamswap.middleware.auth_middleware import get_current_user
from teamswap.models.user import User

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _token_response(user: User) -> TokenResponse:
    token = auth_service.create_access_token(user.user_id)
    return TokenResponse(access_token=token, user=IdentityOut.model_validate(user))


@router.post("/signup", response_model=TokenResponse, status_code=201)
def signup(request: SignUpRequest, db: Session = Depends(get_db)):
    user = auth_service.sign_up(db, request)
    return _token_response(user)


@router.post("/login", response_model=TokenResponse)
def login(request: LoginRequest, db: Session = Depends(get_db)):
    user = auth_service.sign_in(db, request.email, request.password)
    return _token_response(user)


@router.post("/logout")
def logout(current_user: User = Depends(get_current_user)):
    return {"message": "로그아웃 되었습니다."}


@router.get("/me", response_model=IdentityOut)
def me(current_user: User = Depends(get_current_user)):
    return current_user
