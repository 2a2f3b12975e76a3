from fastapi import Depends, HTTPException

from ..services.route_authorization import Role
from .dependencies import get_current_user


def _role_required(required_role: Role):
    def check_role(user=Depends(get_current_user)):
        if user.role != required_role.value:
            raise HTTPException(
                status_code=403,
                detail=f"Forbidden: {required_role.value.capitalize()} role required",
            )
        return user
    return check_role


recruiter_only = _role_required(Role.RECRUITER)
candidate_only = _role_required(Role.CANDIDATE)
