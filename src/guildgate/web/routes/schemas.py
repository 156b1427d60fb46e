from typing import Optional

from pydantic import BaseModel, ConfigDict

from guildgate.integrations.discord_oauth import (
    DISCORD_AVATAR_URL,
    DISCORD_DEFAULT_AVATAR_URL,
    OAUTH_SCOPES,
)

__all__ = [
    "TokenResponse",
    "DiscordUser",
]


class _DiscordModel(BaseModel):
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)


class TokenResponse(_DiscordModel):
    access_token: str
    scope: Optional[str] = None

    @property
    def scopes(self) -> list[str]:
        return self.scope.split(" ") if self.scope else []

    @property
    def has_required_scopes(self) -> bool:
        return all(s in self.scopes for s in OAUTH_SCOPES)


class DiscordUser(_DiscordModel):
    id: str
    username: str
    global_name: Optional[str] = None
    avatar: Optional[str] = None
    discriminator: Optional[str] = None

    @property
    def display_name(self) -> str:
        """Prefer the global display name; fall back to the unique username."""
        return self.global_name or self.username

    @property
    def avatar_url(self) -> str:
        """Custom avatar, or one of Discord's five default avatars.

        The default is picked from the legacy discriminator (``"0"`` for
        migrated accounts). Anything that does not parse as an integer counts
        as 0.
        """

        if self.avatar:
            return DISCORD_AVATAR_URL.format(user_id=self.id, avatar=self.avatar)

        try:
            discriminator = int(self.discriminator or "0")
        except ValueError:
            discriminator = 0
        return DISCORD_DEFAULT_AVATAR_URL.format(index=discriminator % 5)
