import decimal

from fastapi import APIRouter, status
from fastapi.testclient import TestClient

from collab.common.exceptions import APIException, InternalException
from collab.common.result import ErrorKindEnum, ServiceResult, unwrap_or_raise
from collab.network.http.server import server

api_test_router = APIRouter()


@api_test_router.get('/common/exception/api')
def get_api_exception():
    message = "Ouch i'm in conflict!"
    raise APIException(message=message, code=status.HTTP_409_CONFLICT)


@api_test_router.get('/common/exception/internal')
def get_internal_exception():
    class BadException(InternalException): ...

    raise BadException('database password is hunter2', context={'broken': 'test'})


@api_test_router.get('/common/exception/validation')
def get_pydantic_exception(some_decimal: decimal.Decimal):
    return


@api_test_router.get('/common/exception/upstream')
def get_upstream_failure():
    return unwrap_or_raise(ServiceResult.fail(ErrorKindEnum.UPSTREAM_FAILURE, 'upstream failure'))


server.include_router(api_test_router, prefix='/test')


def test_inbound_validation_exception_handler(client: TestClient) -> None:
    response = client.get('/test/common/exception/validation', params={'some_decimal': 'nvm'})
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    content = response.json()
    assert content['error_type'] == 'VALIDATION'
    assert content['detail'][0]['input'] == 'nvm'
    assert content['detail'][0]['message'] == 'Input should be a valid decimal'


def test_api_exception_handler(client: TestClient) -> None:
    response = client.get('/test/common/exception/api')
    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json()['detail'] == "Ouch i'm in conflict!"


def test_internal_exception_handler_hides_detail(client: TestClient) -> None:
    response = client.get('/test/common/exception/internal')
    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json() == {'detail': InternalException.default_detail}


def test_upstream_failure_is_bad_gateway(client: TestClient) -> None:
    response = client.get('/test/common/exception/upstream')
    assert response.status_code == status.HTTP_502_BAD_GATEWAY
    assert response.json() == {'detail': 'upstream failure', 'error_type': 'UPSTREAM_FAILURE'}


def test_security_headers(client: TestClient) -> None:
    response = client.get('/healthcheck/api')
    assert response.headers['X-Frame-Options'] == 'DENY'
    assert response.headers['X-Content-Type-Options'] == 'nosniff'
