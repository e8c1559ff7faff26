"""
Translation of failed action results into HTTP errors.
"""

from fastapi import HTTPException, status

from volunteer_board_api.app.schemas.common import ActionResult


ERROR_STATUS = {
    "not_found": status.HTTP_404_NOT_FOUND,
    "unauthorized": status.HTTP_403_FORBIDDEN,
    "invalid_operation": status.HTTP_400_BAD_REQUEST,
    "storage_failure": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def raise_for_result(result: ActionResult) -> ActionResult:
    """Raise ``HTTPException`` for a failed result, otherwise return it."""
    if not result.success:
        status_code = ERROR_STATUS.get(result.error or "", status.HTTP_400_BAD_REQUEST)
        raise HTTPException(status_code=status_code, detail=result.message)
    return result
