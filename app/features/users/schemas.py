"""
Pydantic schemas for user accounts.
"""
from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class UserData(BaseModel):
    """
    An account as edited by an operator.

    The password is only ever set by the operator and is never read back
    from storage. A password of None leaves the stored one unchanged.
    """
    username: Optional[str] = Field(None, max_length=128)
    password: Optional[str] = Field(None, repr=False)
    attributes: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(from_attributes=True, validate_assignment=True)

    @field_validator("username")
    @classmethod
    def username_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("Username must not be blank")
        return v
