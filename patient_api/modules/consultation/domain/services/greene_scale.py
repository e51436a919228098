# 📄 File: patient_api/modules/consultation/domain/services/greene_scale.py
# 🧭 Purpose (Layman Explanation):
# Turns the patient's symptom answers into the Modified Greene Scale, a standard 0-3 score per
# symptom that doctors use to track menopause symptoms before and after treatment.
# 🧪 Purpose (Technical Summary):
# Scores the 21 Greene items from module_1 answers. Catalog answers score by option position;
# free-form legacy answers fall back to keyword matching checked from most to least severe.
# 🔗 Dependencies:
# consultation catalog, pydantic
# 🔄 Connected Modules / Calls From:
# consultation summary endpoint, consultation document builder

from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel

from patient_api.modules.consultation.domain.catalog import MODULE_1

MAX_ITEM_SCORE = 3

# Document row order, which differs from the questionnaire order
GREENE_SCALE_ITEMS: List[Tuple[str, str]] = [
    ("hot_flushes", "Hot Flushes"),
    ("light_headedness", "Light headed feelings"),
    ("headaches", "Headaches"),
    ("brain_fog", "Brain fog"),
    ("irritability", "Irritability"),
    ("depression", "Depression"),
    ("unloved", "Unloved feelings"),
    ("anxiety", "Anxiety"),
    ("mood_fluctuations", "Mood changes"),
    ("sleeplessness", "Sleeplessness"),
    ("tiredness", "Unusual tiredness"),
    ("backaches", "Backache"),
    ("joint_pains", "Joint Pains"),
    ("muscle_pains", "Muscle Pains"),
    ("facial_hair", "New facial hair"),
    ("skin_dryness", "Dry skin"),
    ("crawling_skin", "Crawling feelings under skin"),
    ("sex_drive", "Less sexual feelings"),
    ("vaginal_dryness", "Dry vagina"),
    ("intercourse_comfort", "Uncomfortable intercourse"),
    ("urination_frequency", "Urinary frequency"),
]

# Checked in order; "severe mood fluctuations compared to normal" must score 3, not 0
SEVERITY_KEYWORDS: List[Tuple[int, Tuple[str, ...]]] = [
    (3, ("severe", "much more", "quite a few")),
    (2, ("moderate", "regular")),
    (1, ("mild", "small amount", "some occasional")),
]


class GreeneScaleItem(BaseModel):
    question_id: str
    label: str
    answer: Optional[str] = None
    score: int


class GreeneScaleResult(BaseModel):
    items: List[GreeneScaleItem]
    total_score: int
    max_score: int


def score_answer(question_id: str, answer: Optional[str]) -> int:
    """
    Score one symptom answer on the 0-3 scale.

    Args:
        question_id: Greene item question id
        answer: Stored answer value, if any

    Returns:
        int: 0 for no answer or no change, up to 3 for severe
    """
    if not answer:
        return 0

    question = MODULE_1.get_question(question_id)
    if question is not None and answer in question.options:
        return question.options.index(answer)

    lowered = answer.lower()
    for score, keywords in SEVERITY_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return score
    return 0


def calculate_greene_scale(module_1_responses: Dict[str, str]) -> GreeneScaleResult:
    """Score every Greene item from a module_1 response set."""
    items = [
        GreeneScaleItem(
            question_id=question_id,
            label=label,
            answer=module_1_responses.get(question_id),
            score=score_answer(question_id, module_1_responses.get(question_id)),
        )
        for question_id, label in GREENE_SCALE_ITEMS
    ]
    return GreeneScaleResult(
        items=items,
        total_score=sum(item.score for item in items),
        max_score=MAX_ITEM_SCORE * len(items),
    )
