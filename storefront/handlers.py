import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from .errors import StorefrontError

logger = logging.getLogger('django')


def api_exception_handler(exc, context):
    """DRF 异常处理入口

    业务异常返回具体原因；未知异常只返回通用信息，不暴露内部细节。
    """
    if isinstance(exc, StorefrontError):
        logger.info(f"business error: {exc.code} {exc.message}")
        return Response(exc.to_dict(), status=exc.status_code)

    response = exception_handler(exc, context)
    if response is not None:
        return response

    view = context.get('view')
    logger.exception(f"unhandled error in {view.__class__.__name__ if view else 'unknown view'}")
    return Response(
        {'success': False, 'error': 'Internal server error'},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
