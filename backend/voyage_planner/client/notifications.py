"""Toast notifications shown outside the form fields."""

import logging
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Toast:
    title: str
    description: str = ""
    variant: str = "default"  # default | destructive


@dataclass
class NotificationCenter:
    toasts: list[Toast] = field(default_factory=list)

    def toast(self, title: str, description: str = "", variant: str = "default") -> Toast:
        item = Toast(title=title, description=description, variant=variant)
        self.toasts.append(item)
        logger.debug(f"Toast ({variant}): {title}")
        return item

    def dismiss_all(self) -> None:
        self.toasts.clear()
