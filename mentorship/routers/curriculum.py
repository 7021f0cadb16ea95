# mentorship/routers/curriculum.py
from fastapi import APIRouter, Depends
from typing import List

from mentorship.schemas import CurriculumEntry
from mentorship.utils.deps import get_catalog

router = APIRouter(prefix="/curriculum", tags=["curriculum"])


@router.get("/", response_model=List[CurriculumEntry], response_model_by_alias=True)
def list_curriculum(catalog=Depends(get_catalog)):
    """The ordered problem list curriculum tasks walk through"""
    return catalog.entries
