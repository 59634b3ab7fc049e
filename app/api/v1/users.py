from fastapi import APIRouter, Depends

from app.api.dependencies import get_current_user
from app.chat.schemas import UserOut
from app.models.user import User


router = APIRouter(prefix="/auth", tags=["users"])


@router.get("/user", response_model=UserOut)
def read_current_user(current_user: User = Depends(get_current_user)):
    return current_user
