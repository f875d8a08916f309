from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from typing import List, Optional

from eventbooking.models import User, Role, UserHasRole
from eventbooking.auth.schemas import UserCreate, User as UserSchema, CurrentUser, RoleName
from eventbooking.auth.utils import get_password_hash, verify_password
from eventbooking.errors import ConflictError
from eventbooking.logger import logger

class UserService:
    @staticmethod
    def get_user_by_email(db: Session, email: str) -> Optional[User]:
        """Get user by email"""
        return db.query(User).filter(User.email == email).first()
    
    @staticmethod
    def get_user_by_id(db: Session, user_id: int) -> Optional[User]:
        """Get user by ID"""
        return db.query(User).filter(User.id == user_id).first()
    
    @staticmethod
    def get_or_create_role(db: Session, name: str) -> Role:
        role = db.query(Role).filter(Role.name == name).first()
        if role is None:
            role = Role(name=name)
            db.add(role)
            db.flush()
        return role
    
    @staticmethod
    def assign_role(db: Session, user: User, role_name: str) -> None:
        role = UserService.get_or_create_role(db, role_name)
        db.add(UserHasRole(user_id=user.id, role_id=role.id))
    
    @staticmethod
    def create_user(db: Session, user: UserCreate, role_name: Optional[str] = None) -> User:
        """Create a new user with the customer role, or organizer when requested"""
        if role_name is None:
            role_name = RoleName.ORGANIZER.value if user.register_as_organizer else RoleName.CUSTOMER.value
        
        db_user = User(
            name=user.name,
            email=user.email,
            phone=user.phone,
            password=get_password_hash(user.password)
        )
        
        try:
            db.add(db_user)
            db.flush()
            UserService.assign_role(db, db_user, role_name)
            db.commit()
            db.refresh(db_user)
        except IntegrityError:
            db.rollback()
            raise ConflictError("Email already registered")
        
        logger.info(f"Registered user {db_user.id} with role {role_name}")
        return db_user
    
    @staticmethod
    def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
        """Authenticate user with email and password"""
        user = UserService.get_user_by_email(db, email)
        if not user or not user.is_active:
            return None
        if not verify_password(password, user.password):
            return None
        return user
    
    @staticmethod
    def get_user_roles(db: Session, user_id: int) -> List[str]:
        """Get user's role names"""
        rows = (
            db.query(Role.name)
            .join(UserHasRole, UserHasRole.role_id == Role.id)
            .filter(UserHasRole.user_id == user_id)
            .all()
        )
        return [name for (name,) in rows]
    
    @staticmethod
    def to_schema(db: Session, user: User) -> UserSchema:
        return UserSchema(
            id=user.id,
            name=user.name,
            email=user.email,
            phone=user.phone,
            roles=UserService.get_user_roles(db, user.id),
            created_at=user.created_at
        )
    
    @staticmethod
    def to_current_user(db: Session, user: User) -> CurrentUser:
        return CurrentUser(
            id=user.id,
            name=user.name,
            email=user.email,
            roles=UserService.get_user_roles(db, user.id)
        )
