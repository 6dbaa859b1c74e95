from __future__ import annotations

import re
from typing import Dict, Iterable, List

_SYNONYMS: Dict[str, List[str]] = {
    "diabetes": ["diabetes", "diabetes mellitus", "diabetic", "hyperglycemia", "insulin resistance"],
    "cancer": ["cancer", "carcinoma", "tumor", "neoplasm", "malignancy", "oncology"],
    "malaria": ["malaria", "plasmodium", "antimalarial", "tropical disease"],
    "dwarfism": [
        "dwarfism",
        "achondroplasia",
        "short stature",
        "skeletal dysplasia",
        "growth hormone deficiency",
    ],
    "tuberculosis": ["tuberculosis", "TB", "mycobacterium", "pulmonary tuberculosis"],
    "alzheimer": ["alzheimer", "dementia", "cognitive decline", "neurodegeneration"],
    "parkinson": ["parkinson", "parkinsons disease", "movement disorder", "tremor"],
    "asthma": ["asthma", "bronchial asthma", "airway inflammation", "respiratory disease"],
    "arthritis": ["arthritis", "rheumatoid arthritis", "osteoarthritis", "joint inflammation"],
    "hypertension": [
        "hypertension",
        "high blood pressure",
        "elevated blood pressure",
        "cardiovascular",
    ],
    "depression": ["depression", "major depressive disorder", "mood disorder", "mental health"],
    "anxiety": ["anxiety", "anxiety disorder", "panic disorder", "mental health"],
    "obesity": ["obesity", "overweight", "weight management", "metabolic syndrome"],
    "stroke": ["stroke", "cerebrovascular accident", "brain attack", "cerebral infarction"],
    "heart disease": [
        "heart disease",
        "cardiovascular disease",
        "coronary artery disease",
        "cardiac",
    ],
    "epilepsy": ["epilepsy", "seizure", "seizure disorder", "neurological disorder"],
    "migraine": ["migraine", "headache", "chronic migraine", "neurological"],
    "lupus": ["lupus", "systemic lupus erythematosus", "autoimmune disease", "SLE"],
    "celiac": ["celiac", "celiac disease", "gluten intolerance", "gluten sensitivity"],
    "crohn": ["crohn", "crohns disease", "inflammatory bowel disease", "IBD"],
    "psoriasis": ["psoriasis", "skin disorder", "autoimmune skin disease"],
    "hepatitis": ["hepatitis", "liver inflammation", "viral hepatitis"],
    "hiv": ["hiv", "aids", "human immunodeficiency virus", "antiretroviral"],
    "leukemia": ["leukemia", "blood cancer", "hematological malignancy"],
    "lymphoma": ["lymphoma", "non-hodgkin lymphoma", "hodgkin lymphoma", "blood cancer"],
    "anemia": ["anemia", "iron deficiency", "low hemoglobin", "blood disorder"],
    "thyroid": ["thyroid", "hypothyroidism", "hyperthyroidism", "thyroid disorder"],
    "kidney disease": [
        "kidney disease",
        "renal disease",
        "chronic kidney disease",
        "nephropathy",
    ],
    "liver disease": ["liver disease", "cirrhosis", "hepatic disease", "liver dysfunction"],
}

_NON_WORD_RE = re.compile(r"[^\w\s]")


def expand_medical_terms(terms: Iterable[str]) -> List[str]:
    """Return *terms* plus known synonyms, deduplicated, first-seen order.

    An exact (case-insensitive) key match wins; otherwise the first key that
    contains or is contained in the term is used.
    """
    seen: Dict[str, None] = {}
    for raw in terms or []:
        term = str(raw or "").strip()
        if not term:
            continue
        seen.setdefault(term, None)
        normalized = term.lower()

        synonyms = _SYNONYMS.get(normalized)
        if synonyms is None:
            for key, values in _SYNONYMS.items():
                if key in normalized or normalized in key:
                    synonyms = values
                    break
        for synonym in synonyms or []:
            seen.setdefault(synonym, None)
    return list(seen)


def normalize_condition(value: str) -> str:
    return _NON_WORD_RE.sub("", str(value or "").lower()).strip()


def split_terms(value: str | None) -> List[str]:
    """Split a comma-separated query parameter into trimmed, non-empty terms."""
    return [part.strip() for part in str(value or "").split(",") if part.strip()]
