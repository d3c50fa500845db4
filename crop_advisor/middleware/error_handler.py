"""
Global error handling middleware.
"""
import logging
from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from typing import Callable

from crop_advisor.domain.exceptions import (
    InvalidFeatureError,
    NotTrainedError,
    RetrainError,
)
from crop_advisor.infrastructure.advice_client import AdviceServiceError


logger = logging.getLogger(__name__)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Global error handling middleware.

    Catches unhandled exceptions and returns consistent error responses.
    """

    async def dispatch(self, request: Request, call_next: Callable):
        """
        Process the request and handle any exceptions.

        Args:
            request: The incoming request
            call_next: The next middleware or route handler

        Returns:
            Response object
        """
        extra = {"path": request.url.path, "method": request.method}
        try:
            response = await call_next(request)
            return response

        except InvalidFeatureError as e:
            logger.warning(f"Invalid features: {str(e)}", extra=extra)
            return JSONResponse(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                content={
                    "error": "Invalid features",
                    "detail": str(e),
                }
            )

        except NotTrainedError as e:
            logger.error(f"Model not trained: {str(e)}", extra=extra)
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={
                    "error": "Model not available",
                    "detail": "Recommendation unavailable",
                }
            )

        except RetrainError as e:
            logger.error(f"Retrain rejected: {str(e)}", extra=extra)
            return JSONResponse(
                status_code=status.HTTP_409_CONFLICT,
                content={
                    "error": "Model already trained",
                    "detail": str(e),
                }
            )

        except AdviceServiceError as e:
            logger.error(
                f"Advice service error: {str(e)}",
                extra={**extra, "status_code": e.status_code},
            )
            return JSONResponse(
                status_code=status.HTTP_502_BAD_GATEWAY,
                content={
                    "error": "Advice service error",
                    "detail": e.message,
                }
            )

        except ValueError as e:
            logger.warning(f"Validation error: {str(e)}", extra=extra)
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content={
                    "error": "Invalid request",
                    "detail": str(e),
                }
            )

        except Exception as e:
            logger.exception(f"Unhandled exception: {str(e)}", extra=extra)
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "error": "Internal server error",
                    "detail": "An unexpected error occurred",
                }
            )
