"""Grade classification into performance categories"""

from enum import Enum


class GradeCategory(str, Enum):
    OPTIMAL = "optimal"
    SATISFACTORY = "satisfactory"
    IN_PROGRESS = "in_progress"
    LOW = "low"
    CRITICAL = "critical"


_LABELS = {
    GradeCategory.OPTIMAL: "Óptimo",
    GradeCategory.SATISFACTORY: "Satisfactorio",
    GradeCategory.IN_PROGRESS: "En proceso",
    GradeCategory.LOW: "Bajo",
    GradeCategory.CRITICAL: "Crítico",
}

_DESCRIPTIONS = {
    GradeCategory.OPTIMAL: "Nivel óptimo de desempeño (9.0 - 10.0)",
    GradeCategory.SATISFACTORY: "Nivel satisfactorio de desempeño (8.0 - 8.9)",
    GradeCategory.IN_PROGRESS: "Nivel en proceso de desempeño (7.0 - 7.9)",
    GradeCategory.LOW: "Nivel bajo de desempeño (6.0 - 6.9)",
    GradeCategory.CRITICAL: "Nivel crítico de desempeño (menor a 6.0)",
}


def normalize_grade(grade: float) -> float:
    """Grades above 10 are on a 0-100 scale; bring them to 0-10"""
    return grade / 10 if grade > 10 else grade


def category_from_grade(grade: float) -> GradeCategory:
    """
    Classify a grade (0-10 or 0-100 scale).

    Thresholds: >=9 optimal, >=8 satisfactory, >=7 in progress, >=6 low, else critical.
    """
    grade = normalize_grade(grade)
    if grade >= 9:
        return GradeCategory.OPTIMAL
    elif grade >= 8:
        return GradeCategory.SATISFACTORY
    elif grade >= 7:
        return GradeCategory.IN_PROGRESS
    elif grade >= 6:
        return GradeCategory.LOW
    else:
        return GradeCategory.CRITICAL


def category_label(category: GradeCategory) -> str:
    return _LABELS[category]


def category_description(category: GradeCategory) -> str:
    return _DESCRIPTIONS[category]
