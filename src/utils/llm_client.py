"""Conversational Product Hunt agent backed by an LLM with tool calling.

Supports multiple providers via environment variables:
  - Anthropic (default): ANTHROPIC_API_KEY
  - OpenAI-compatible (OpenAI/DeepSeek/Kimi/Qwen):
      LLM_PROVIDER=openai_compatible
      LLM_API_KEY=sk-xxx
      LLM_BASE_URL=https://api.openai.com/v1
      LLM_MODEL=gpt-4o
"""

import json
import os

from utils.logging_config import get_logger

logger = get_logger("llm_client")

DEFAULT_ANTHROPIC_MODEL = "claude-sonnet-4-5-20250929"
DEFAULT_OPENAI_MODEL = "gpt-4o"
MAX_TOKENS = 2048
MAX_TOOL_ROUNDS = 4

SYSTEM_PROMPT = """You are a helpful Product Hunt assistant.

Primary capabilities:
- Fetch top Product Hunt products for a day or a timeframe with the get_top_products,
  get_top_products_by_votes and get_top_products_by_timeframe tools.
- Search Product Hunt posts via Algolia with the search_products tool.
- Answer practical questions about launching on Product Hunt: timing, maker and hunter
  roles, assets, upvote etiquette, comment strategy and ranking factors.

Guidelines:
- Pass the user's own words for dates ("yesterday", "last 7 days", "from:2024-08-01 to:2024-08-15")
  as the timeframe argument, together with the user's timezone when known.
- Prefer the rendered table a tool returns when listing products.
- Include links when known. If external APIs are unavailable, say that demo data is shown.
- Keep launch advice concise and actionable, as steps or checklists."""

DEMO_REPLY = (
    "Chat is running in demo mode because no LLM API key is configured. "
    "Set ANTHROPIC_API_KEY (or LLM_PROVIDER=openai_compatible with LLM_API_KEY) to enable it. "
    "Top products and search still work through the API."
)

NO_ANSWER_REPLY = "Sorry, I couldn't finish that request. Please try rephrasing it."


async def _run_tool(tools, name: str, arguments: dict) -> str:
    """Run one tool call and serialize its result for the model."""
    try:
        result = await tools.call(name, arguments)
    except ValueError as e:
        logger.warning("Agent requested invalid tool call %s: %s", name, e)
        result = {"error": str(e)}
    return json.dumps(result, ensure_ascii=False, default=str)


async def chat(message: str, tools, model: str = None, api_key: str = None) -> str:
    """Answer a user message, letting the model call Product Hunt tools.

    Provider selection (via LLM_PROVIDER env var):
      - "openai_compatible": Uses the OpenAI SDK
      - "" or unset: Uses the Anthropic SDK

    Args:
        message: The user's chat message.
        tools: A ``HuntTools`` instance the model may call.
        model: Model ID override.
        api_key: API key override.

    Returns:
        The assistant reply text. Provider errors propagate to the caller.
    """
    provider = os.environ.get("LLM_PROVIDER", "").lower().strip()

    if provider == "openai_compatible":
        return await _chat_openai_compatible(message, tools, model, api_key)
    return await _chat_anthropic(message, tools, model, api_key)


async def _chat_anthropic(message: str, tools, model: str = None, api_key: str = None) -> str:
    """Tool-calling loop against the Anthropic Messages API."""
    api_key = (
        api_key
        or os.environ.get("LLM_API_KEY")
        or os.environ.get("ANTHROPIC_API_KEY")
    )
    if not api_key:
        logger.info("No API key found, replying in demo mode")
        return DEMO_REPLY

    model = model or os.environ.get("LLM_MODEL") or DEFAULT_ANTHROPIC_MODEL

    try:
        import anthropic
    except ImportError:
        logger.warning("anthropic package not installed, run: pip install anthropic")
        return DEMO_REPLY

    from services.tools import TOOL_DEFINITIONS

    client = anthropic.AsyncAnthropic(api_key=api_key)
    messages = [{"role": "user", "content": message}]

    for round_no in range(MAX_TOOL_ROUNDS):
        response = await client.messages.create(
            model=model,
            max_tokens=MAX_TOKENS,
            system=SYSTEM_PROMPT,
            tools=TOOL_DEFINITIONS,
            messages=messages,
        )
        if response.stop_reason != "tool_use":
            return "".join(
                block.text for block in response.content if block.type == "text"
            ).strip() or NO_ANSWER_REPLY

        messages.append({"role": "assistant", "content": response.content})
        results = []
        for block in response.content:
            if block.type != "tool_use":
                continue
            logger.debug("Round %d: Anthropic requested %s", round_no + 1, block.name)
            results.append({
                "type": "tool_result",
                "tool_use_id": block.id,
                "content": await _run_tool(tools, block.name, block.input or {}),
            })
        messages.append({"role": "user", "content": results})

    logger.warning("Tool-calling loop hit %d rounds without a final answer", MAX_TOOL_ROUNDS)
    return NO_ANSWER_REPLY


async def _chat_openai_compatible(
    message: str, tools, model: str = None, api_key: str = None
) -> str:
    """Tool-calling loop against an OpenAI-compatible chat completions API.

    Configure via environment variables:
      LLM_API_KEY: API key for the provider
      LLM_BASE_URL: API base URL (optional)
      LLM_MODEL: Model ID (e.g. gpt-4o)
    """
    api_key = api_key or os.environ.get("LLM_API_KEY")
    if not api_key:
        logger.info("No LLM_API_KEY found, replying in demo mode")
        return DEMO_REPLY

    model = model or os.environ.get("LLM_MODEL") or DEFAULT_OPENAI_MODEL
    base_url = os.environ.get("LLM_BASE_URL")

    try:
        from openai import AsyncOpenAI
    except ImportError:
        logger.warning("openai package not installed, run: pip install openai")
        return DEMO_REPLY

    from services.tools import openai_tool_specs

    kwargs = {"api_key": api_key}
    if base_url:
        kwargs["base_url"] = base_url
    client = AsyncOpenAI(**kwargs)

    messages = [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": message},
    ]
    for _ in range(MAX_TOOL_ROUNDS):
        response = await client.chat.completions.create(
            model=model,
            max_tokens=MAX_TOKENS,
            messages=messages,
            tools=openai_tool_specs(),
        )
        reply = response.choices[0].message
        if not reply.tool_calls:
            return (reply.content or "").strip() or NO_ANSWER_REPLY

        messages.append({
            "role": "assistant",
            "content": reply.content,
            "tool_calls": [
                {
                    "id": call.id,
                    "type": "function",
                    "function": {
                        "name": call.function.name,
                        "arguments": call.function.arguments,
                    },
                }
                for call in reply.tool_calls
            ],
        })
        for call in reply.tool_calls:
            try:
                arguments = json.loads(call.function.arguments or "{}")
            except json.JSONDecodeError:
                arguments = {}
            messages.append({
                "role": "tool",
                "tool_call_id": call.id,
                "content": await _run_tool(tools, call.function.name, arguments),
            })

    logger.warning("Tool-calling loop hit %d rounds without a final answer", MAX_TOOL_ROUNDS)
    return NO_ANSWER_REPLY
