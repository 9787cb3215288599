"""
Orders API Entrypoint - Thin API with Command Dispatch
Writes go through the message bus, reads through views.
"""
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel
import logging
import os

from accounts.adapters import orm as accounts_orm
from orders import views
from orders.adapters import orm
from orders.domain.commands import AttachResult, CreateOrder
from orders.service_layer import messagebus
from orders.service_layer.unit_of_work import SqlAlchemyUnitOfWork
from shared.domain.exceptions import LabOpsError

log_level = os.getenv('LOG_LEVEL', 'INFO').upper()
logging.basicConfig(
    level=getattr(logging, log_level),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

accounts_orm.start_mappers()
orm.start_mappers()
logger.info("ORM mappers initialized")

app = FastAPI(
    title="Laboratory Orders API",
    description="Lab test orders, results and patient-facing order views",
    version="1.0.0"
)


def get_uow() -> SqlAlchemyUnitOfWork:
    return SqlAlchemyUnitOfWork()


# ---------- Request/Response models ----------

class OrderRequest(BaseModel):
    patient_id: str
    doctor_id: str
    exam_type_id: str


class ResultRequest(BaseModel):
    bacteriologist_id: str
    payload: Dict[str, Any] = {}


class CreatedResponse(BaseModel):
    data: str
    message: str


def _http_error(e: LabOpsError) -> HTTPException:
    return HTTPException(status_code=e.status_code, detail=str(e))


# ---------- Endpoints ----------

@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "lab-ops-orders-api",
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


@app.post("/api/v1/orders", status_code=201, response_model=CreatedResponse)
def create_order(order: OrderRequest, uow: SqlAlchemyUnitOfWork = Depends(get_uow)):
    """
    Record a lab test requested by a doctor.

    The patient gets a message that the test has been scheduled.
    """
    try:
        cmd = CreateOrder(
            patient_id=order.patient_id,
            doctor_id=order.doctor_id,
            exam_type_id=order.exam_type_id,
        )
        [order_id] = messagebus.handle(cmd, uow)
        return CreatedResponse(data=order_id, message="Patient test created")
    except LabOpsError as e:
        raise _http_error(e)
    except Exception as e:
        logger.error(f"Failed to create order: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@app.post("/api/v1/orders/{order_id}/result", status_code=201, response_model=CreatedResponse)
def attach_result(order_id: str, result: ResultRequest, uow: SqlAlchemyUnitOfWork = Depends(get_uow)):
    """Attach the result of an order and mark it complete."""
    try:
        cmd = AttachResult(
            order_id=order_id,
            bacteriologist_id=result.bacteriologist_id,
            payload=result.payload,
        )
        [result_id] = messagebus.handle(cmd, uow)
        return CreatedResponse(data=result_id, message="Test result attached")
    except LabOpsError as e:
        raise _http_error(e)
    except Exception as e:
        logger.error(f"Failed to attach result to order {order_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@app.get("/api/v1/orders/{order_id}")
def get_order(order_id: str, uow: SqlAlchemyUnitOfWork = Depends(get_uow)):
    """Order details with exam, doctor, patient and, when complete, result."""
    try:
        return {
            "data": views.order_detail(order_id, uow),
            "message": "Patient test details retrieved",
        }
    except LabOpsError as e:
        raise _http_error(e)


@app.get("/api/v1/orders")
def list_orders(
    patient: Optional[str] = None,
    username: Optional[str] = None,
    is_complete: Optional[bool] = None,
    uow: SqlAlchemyUnitOfWork = Depends(get_uow),
):
    """Orders of one patient, given by id or by username/e-mail."""
    try:
        return {
            "data": views.patient_orders(uow, patient=patient, username=username, is_complete=is_complete),
            "message": "Patient tests retrieved",
        }
    except LabOpsError as e:
        raise _http_error(e)


@app.get("/api/v1/messages/{patient_id}")
def list_messages(patient_id: str, uow: SqlAlchemyUnitOfWork = Depends(get_uow)):
    return {"data": views.patient_messages(patient_id, uow)}


def main():
    """Serve the orders API with uvicorn."""
    import uvicorn

    uvicorn.run(app, host=os.getenv("API_BIND", "0.0.0.0"), port=int(os.getenv("API_PORT", 8000)))


if __name__ == "__main__":
    main()
