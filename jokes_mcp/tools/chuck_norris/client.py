"""Client for the public Chuck Norris jokes API (api.chucknorris.io)."""

from jokes_mcp.utils.http import fetch_json

# Categories rarely change; keep them for an hour
CATEGORIES_CACHE_TTL = 3600


class ChuckNorrisClient:
    """Client for api.chucknorris.io."""

    BASE_URL = "https://api.chucknorris.io/jokes"

    async def random_joke(self, category: str | None = None) -> str:
        """Return the text of a random joke, optionally from a category."""
        params = {"category": category} if category else None
        data = await fetch_json(f"{self.BASE_URL}/random", params=params)
        return data["value"]

    async def categories(self) -> list[str]:
        """Return the list of known joke categories."""
        return await fetch_json(
            f"{self.BASE_URL}/categories", cache_ttl=CATEGORIES_CACHE_TTL
        )


# Singleton client
_client: ChuckNorrisClient | None = None


def get_client() -> ChuckNorrisClient:
    """Get the Chuck Norris client instance."""
    global _client
    if _client is None:
        _client = ChuckNorrisClient()
    return _client
