from fastapi import Depends, HTTPException, status

from portal.backend.core.current_user import get_current_user
from portal.backend.models.user import User


def _require_role(role: str, detail: str):
    def dependency(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role != role:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
        return current_user

    return dependency


require_teacher = _require_role("teacher", "Teacher role required")
require_student = _require_role("student", "Student role required")
