"""Success envelope shared by every API view.

Errors are rendered by :func:`finance.exceptions.api_exception_handler`
with the same ``success`` flag.
"""
from rest_framework import status as http_status
from rest_framework.response import Response


def ok(data=None, *, message: str | None = None, pagination: dict | None = None,
       status: int = http_status.HTTP_200_OK) -> Response:
    body = {'success': True, 'data': data}
    if message:
        body['message'] = message
    if pagination is not None:
        body['pagination'] = pagination
    return Response(body, status=status)


def created(data=None, *, message: str | None = None) -> Response:
    return ok(data, message=message, status=http_status.HTTP_201_CREATED)
