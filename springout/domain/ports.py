from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Sequence

from .models import SlackInstallation, SlackUserLink


class SlackPort:
    def build_authorize_url(self) -> str: ...

    def oauth_access(self, code: str) -> Dict[str, Any]: ...

    def publish_home_view(self, token: str, user_id: str, view: Mapping[str, Any]) -> None: ...

    def post_message(self, token: str, channel: str, text: str, blocks: Optional[Sequence[Mapping[str, Any]]] = None) -> None: ...


class PublisherPort:
    def publish(self, service: str, message: Any, message_type: str) -> str: ...


class ImageIndexPort:
    def set_image(self, category_id: str, file_name: str, url: Optional[str]) -> None: ...

    def fetch_images(self, category_id: str) -> Dict[str, Optional[str]]: ...


class InstallationRepositoryPort:
    def save_installation(self, installation: SlackInstallation) -> None: ...

    def fetch_installation(self, team_id: str) -> Optional[SlackInstallation]: ...

    def delete_installation(self, team_id: str) -> None: ...


class SlackUserRepositoryPort:
    def save_link(self, link: SlackUserLink) -> None: ...

    def fetch_link(self, uid: str) -> Optional[SlackUserLink]: ...

    def delete_link(self, uid: str) -> None: ...


class UserDirectoryPort:
    def ensure_user(self, uid: str, display_name: str = "") -> str: ...
