from fastapi import APIRouter, Response
from loguru import logger
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from starlette import status

router = APIRouter()


@router.get('/api')
def status_get(response: Response) -> str:
    """
    Fast check to ensure API is running.
    Load balancers and deploy scripts poll this, keep it cheap.
    """
    message = '📸 Ready for the shoot 📸'
    response.headers['Content-Type'] = 'text/html; charset=utf-8'

    return message


@router.get('/database')
def database_health_check(response: Response) -> str:
    """
    Fast check to ensure database connectivity.
    """
    from collab.network.database.session import db

    is_healthy = True
    try:
        db.session.execute(text('SELECT 1'))
        line = '✅ DB is happy'
    except SQLAlchemyError as e:
        logger.warning(f'database healthcheck failed: {e}')
        line = '❌ DB is sad'
        is_healthy = False

    response.headers['Content-Type'] = 'text/html; charset=utf-8'
    response.status_code = status.HTTP_200_OK if is_healthy else status.HTTP_503_SERVICE_UNAVAILABLE

    return line
