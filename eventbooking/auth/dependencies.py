from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from eventbooking.database import get_db
from eventbooking.auth.utils import verify_token
from eventbooking.auth.service import UserService
from eventbooking.auth.schemas import Capability, CurrentUser
from eventbooking.auth.permissions import has_capability

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")

def get_current_user(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> CurrentUser:
    """Resolve the authenticated user and their roles once per request"""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    
    token_data = verify_token(token, credentials_exception)
    
    user = UserService.get_user_by_id(db, user_id=token_data["user_id"])
    if user is None or not user.is_active:
        raise credentials_exception
    
    return UserService.to_current_user(db, user)

def require_capability(capability: Capability):
    """Build a dependency that admits only users holding the capability"""
    
    def checker(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if not has_capability(current_user, capability):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not enough permissions"
            )
        return current_user
    
    return checker
