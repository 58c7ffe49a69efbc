"""MCP prompts for burnout review conversations."""

from __future__ import annotations

from fastmcp import FastMCP


def register_forecast_prompts(mcp: FastMCP) -> None:
    """Register burnout domain MCP prompts."""

    @mcp.prompt()
    def weekly_burnout_review(user_id: str, focus: str = "overall balance") -> str:
        """Prompt template for a weekly look back at burnout risk."""
        return f"""Let's do my weekly burnout review (user id: {user_id}).

1. Pull my latest forecast and the last few from my history
2. Tell me my risk level, emotional weather and which way the trend is heading
3. Explain the primary factor in plain language
4. Pick the two recommendations that matter most for {focus}
5. Suggest when I should check in next

Keep it short and kind. This is a self-check, not a diagnosis."""
