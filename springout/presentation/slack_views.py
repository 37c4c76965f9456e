from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from ..domain.models import ASK_FOR_HELP, HELP_CATEGORIES, OFFER_HELP

CATEGORY_LABELS = {
    "cooking": "Cooking",
    "gardening": "Gardening",
    "cleaning": "Cleaning",
}

CONFIRMATION_TEXT = {
    OFFER_HELP: "Thanks for offering to help with {label}! People nearby can find you via {url}",
    ASK_FOR_HELP: "We've noted that you'd like some help with {label}. Have a look at {url} to get started.",
}


def build_home_view(images: Mapping[str, Optional[str]]) -> Dict[str, Any]:
    """App Home タブ用のビュー。カテゴリごとにボタンと代表画像を並べる。"""

    blocks: List[Dict[str, Any]] = [
        {
            "type": "header",
            "text": {"type": "plain_text", "text": "Welcome to Spring Out"},
        },
        {
            "type": "section",
            "text": {
                "type": "mrkdwn",
                "text": "Neighbours helping neighbours. Pick a category to offer or ask for help.",
            },
        },
        {"type": "divider"},
    ]
    for category in HELP_CATEGORIES:
        label = CATEGORY_LABELS[category]
        section: Dict[str, Any] = {
            "type": "section",
            "text": {"type": "mrkdwn", "text": f"*{label}*"},
        }
        image_url = images.get(category)
        if image_url:
            section["accessory"] = {"type": "image", "image_url": image_url, "alt_text": label}
        blocks.append(section)
        blocks.append(
            {
                "type": "actions",
                "block_id": f"help_{category}",
                "elements": [
                    _button("Offer help", OFFER_HELP, category, style="primary"),
                    _button("Ask for help", ASK_FOR_HELP, category),
                ],
            }
        )
    return {"type": "home", "blocks": blocks}


def build_confirmation_text(action: str, category: str, site_url: str) -> str:
    label = CATEGORY_LABELS.get(category, category).lower()
    template = CONFIRMATION_TEXT.get(action, CONFIRMATION_TEXT[ASK_FOR_HELP])
    return template.format(label=label, url=f"{site_url}/{category}")


def _button(text: str, action_id: str, value: str, style: Optional[str] = None) -> Dict[str, Any]:
    button: Dict[str, Any] = {
        "type": "button",
        "text": {"type": "plain_text", "text": text},
        "action_id": action_id,
        "value": value,
    }
    if style:
        button["style"] = style
    return button
