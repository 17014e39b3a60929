from graph.state import MessageState
from loguru import logger

BASE_SCORE = 10
MAX_SCORE = 100
QUALIFICATION_THRESHOLD = 50

PRODUCT_KEYWORDS = {
    "agrotech": 20, "hometech": 20, "aquatech": 20,
    "indutech": 20, "packtech": 20, "weed": 15, "mulch": 15,
    "farm": 10, "agriculture": 15, "crop": 15,
    "விவசாய": 15, "खेत": 15, "ಕೃಷಿ": 15, "కృషి": 15,
}

# (alternatives, points): one bonus per group, however many alternatives match
QUERY_BONUSES = [
    (("price", "cost"), 15),
    (("delivery", "shipping"), 10),
    (("bulk", "wholesale"), 20),
]


def score_lead(message: str) -> int:
    """Score a customer message by product keywords and buying signals."""
    text = (message or "").lower()
    score = BASE_SCORE

    for keyword, points in PRODUCT_KEYWORDS.items():
        if keyword in text:
            score += points

    for alternatives, points in QUERY_BONUSES:
        if any(word in text for word in alternatives):
            score += points

    return min(score, MAX_SCORE)


def is_qualified(score: int) -> bool:
    return score >= QUALIFICATION_THRESHOLD


def score(state: MessageState) -> MessageState:
    """Attach the lead score to the message state."""
    lead_score = score_lead(state["message"].text)
    logger.info(f"Lead score: {lead_score} for {state['message'].sender}")
    return {"score": lead_score}
