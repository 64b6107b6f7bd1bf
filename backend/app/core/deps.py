"""
Dependencies FastAPI compartilhadas pelos endpoints.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db

# Type alias para uso nos endpoints
DbSession = Annotated[AsyncSession, Depends(get_db)]
