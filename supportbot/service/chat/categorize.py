import supportbot.config.config as configs

ACTIONS = {
    "catering": [
        {"type": "link", "label": "View Catering Options", "url": "https://stackcreamery.com/catering"},
        {"type": "form", "label": "Request Catering Quote", "url": "https://stackcreamery.com/catering-form"},
    ],
    "ordering": [
        {"type": "link", "label": "Order Online", "url": "https://stackcreamery.com/order"},
    ],
    "location": [
        {"type": "link", "label": "Get Directions", "url": "https://maps.google.com/stackcreamery"},
    ],
    "menu": [
        {"type": "link", "label": "View Full Menu", "url": "https://stackcreamery.com/menu"},
    ],
}


def categorize_message(message: str) -> str:
    """
    First matching keyword group wins, checked in declaration order.
    Topic groups are checked before the inappropriate-term filter.
    """
    lower = (message or "").lower()
    for category, keywords in configs.CATEGORIES.items():
        if any(keyword in lower for keyword in keywords):
            return category
    if any(term in lower for term in configs.INAPPROPRIATE_TERMS):
        return "inappropriate"
    return "general"


def generate_actions(category: str) -> list[dict]:
    return [dict(action) for action in ACTIONS.get(category, [])]


def is_unknown_answer(category: str, reply: str) -> bool:
    if category != "general":
        return False
    return any(marker in reply for marker in configs.UNKNOWN_ANSWER_MARKERS)
