"""
Accounts API Entrypoint - Thin API over the provisioning service
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from pydantic import BaseModel
import logging
import os

from accounts.adapters import orm
from accounts.service_layer.provisioning import UserProvisioningService
from accounts.service_layer.unit_of_work import SqlAlchemyUnitOfWork
from shared.adapters.notifications import SmtpNotifier
from shared.domain.exceptions import LabOpsError

log_level = os.getenv('LOG_LEVEL', 'INFO').upper()
logging.basicConfig(
    level=getattr(logging, log_level),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

orm.start_mappers()
logger.info("ORM mappers initialized")

app = FastAPI(
    title="Accounts API",
    description="User provisioning for laboratory patients, doctors and staff",
    version="1.0.0"
)


def get_provisioning_service() -> UserProvisioningService:
    return UserProvisioningService(SqlAlchemyUnitOfWork(), SmtpNotifier())


# ---------- Response models ----------

class CreatedUserResponse(BaseModel):
    id: str
    username: str


class UpdatedUserResponse(BaseModel):
    user_id: str
    username: str


def _http_error(e: LabOpsError) -> HTTPException:
    return HTTPException(status_code=e.status_code, detail=str(e))


# ---------- Endpoints ----------

@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "lab-ops-accounts-api",
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


@app.post("/api/v1/users", status_code=201, response_model=CreatedUserResponse)
def create_user(
    user: Dict[str, Any],
    notify: bool = True,
    service: UserProvisioningService = Depends(get_provisioning_service),
):
    """
    Create a user, allocate a unique username and mail the issued password.
    """
    try:
        created = service.create_user(user, notify=notify)
        return CreatedUserResponse(id=created.id, username=created.username)
    except LabOpsError as e:
        logger.error(f"Error creating user: {e}")
        raise _http_error(e)
    except Exception as e:
        logger.error(f"Unexpected error creating user: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@app.post("/api/v1/users/bulk")
def create_users(
    users: List[Dict[str, Any]],
    service: UserProvisioningService = Depends(get_provisioning_service),
):
    """
    Create many users at once. Each entry reports its own outcome.
    """
    results = service.create_users(users)
    return {"data": [r.to_dict() for r in results]}


@app.get("/api/v1/users")
def list_users(
    request: Request,
    service: UserProvisioningService = Depends(get_provisioning_service),
):
    """
    Search users. Every query parameter is a filter and all of them must match.
    """
    try:
        return {"data": service.get_users(dict(request.query_params))}
    except LabOpsError as e:
        raise _http_error(e)


@app.get("/api/v1/users/lookup/{username}")
def lookup_user(
    username: str,
    service: UserProvisioningService = Depends(get_provisioning_service),
):
    """Find a user by username or e-mail."""
    user = service.get_user(username)
    if user is None:
        raise HTTPException(status_code=404, detail=f"No user found for {username}")
    return user


@app.get("/api/v1/users/{user_id}")
def get_user(
    user_id: str,
    service: UserProvisioningService = Depends(get_provisioning_service),
):
    try:
        return service.get_user_by_id(user_id)
    except LabOpsError as e:
        raise _http_error(e)


@app.patch("/api/v1/users/{user_id}", response_model=UpdatedUserResponse)
def update_user(
    user_id: str,
    user: Optional[Dict[str, Any]] = None,
    service: UserProvisioningService = Depends(get_provisioning_service),
):
    try:
        username = service.update_user(user_id, user or {})
        return UpdatedUserResponse(user_id=user_id, username=username)
    except LabOpsError as e:
        logger.error(f"Error updating user {user_id}: {e}")
        raise _http_error(e)


def main():
    """Serve the accounts API with uvicorn."""
    import uvicorn

    uvicorn.run(app, host=os.getenv("API_BIND", "0.0.0.0"), port=int(os.getenv("API_PORT", 8000)))


if __name__ == "__main__":
    main()
