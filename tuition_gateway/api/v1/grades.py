"""GET /v1/grades/category - Grade performance classification"""

from fastapi import APIRouter, Query

from tuition_gateway.api.v1.schemas import GradeCategoryResponse
from tuition_gateway.domain.grades import (
    category_description,
    category_from_grade,
    category_label,
    normalize_grade,
)

router = APIRouter()


@router.get("/grades/category", response_model=GradeCategoryResponse)
def get_grade_category(grade: float = Query(..., ge=0, le=100, description="Grade on a 0-10 or 0-100 scale")):
    category = category_from_grade(grade)
    return GradeCategoryResponse(
        grade=grade,
        normalized_grade=normalize_grade(grade),
        category=category.value,
        label=category_label(category),
        description=category_description(category),
    )
