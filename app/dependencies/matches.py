from typing import Annotated

from fastapi import Depends

from app.services.match.service import MatchService, get_match_service

MatchServiceDep = Annotated[MatchService, Depends(get_match_service)]
