"""Client for icanhazdadjoke.com."""

from jokes_mcp.utils.http import fetch_text


class DadJokeClient:
    """Client for the icanhazdadjoke API (plain-text mode)."""

    BASE_URL = "https://icanhazdadjoke.com/"

    async def random_joke(self) -> str:
        return await fetch_text(self.BASE_URL)


# Singleton client
_client: DadJokeClient | None = None


def get_client() -> DadJokeClient:
    """Get the dad joke client instance."""
    global _client
    if _client is None:
        _client = DadJokeClient()
    return _client
