# backend/routes/auth.py
from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.orm import Session
from utils.hashing import verify_password
from utils.tokenJWT import create_access_token, get_current_user
from utils.audit import client_ip, write_log
from models import users as models
from schemas import user as schemas
from database import get_db

router = APIRouter(tags=["Auth"])


# Authenticate user and issue JWT token
@router.post("/login", response_model=schemas.Token)
def login(payload: schemas.UserLogin, request: Request, db: Session = Depends(get_db)):
    db_user = db.query(models.User).filter(models.User.username == payload.username.strip()).first()

    # Unknown, disabled and wrong-password logins look the same to the caller
    if not db_user or not db_user.is_active or not verify_password(payload.password, db_user.password_hash):
        if db_user:
            write_log(db, user_id=db_user.id, table="users", record_id=db_user.id,
                      operation="LOGIN_FAIL", ip=client_ip(request))
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    access_token = create_access_token(data={"sub": db_user.username})

    write_log(db, user_id=db_user.id, table="users", record_id=db_user.id,
              operation="LOGIN", ip=client_ip(request))

    return {"access_token": access_token, "token_type": "bearer"}


# Retrieve current authenticated user details
@router.get("/me", response_model=schemas.UserResponse)
def me(current_user: models.User = Depends(get_current_user)):
    return current_user
