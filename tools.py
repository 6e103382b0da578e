"""MCP Tools, resources and prompts for mcp-test-server.

Stateless test tools exposed on the /mcp endpoint, grouped the way client
test suites exercise them: math, string, encoding, utility and testing
(delays and deliberate failures). A small static resource catalog and a
few prompt templates are registered on the same FastMCP instance.
"""

import asyncio
import base64
import binascii
import hashlib
import json
import logging
import random
import uuid
from datetime import datetime, timezone
from typing import Any

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from fastmcp.prompts import Message

logger = logging.getLogger(__name__)

# Create the FastMCP server instance
mcp = FastMCP("mcp-test-server")


# ============== Math ==============

def add(a: float, b: float) -> float:
    """Add two numbers."""
    logger.info("[TOOL] add invoked")
    return a + b


def subtract(a: float, b: float) -> float:
    """Subtract the second number from the first."""
    logger.info("[TOOL] subtract invoked")
    return a - b


def multiply(a: float, b: float) -> float:
    """Multiply two numbers."""
    logger.info("[TOOL] multiply invoked")
    return a * b


def divide(a: float, b: float) -> float:
    """Divide the first number by the second.

    Raises:
        ToolError: If the divisor is zero
    """
    logger.info("[TOOL] divide invoked")
    if b == 0:
        raise ToolError("Division by zero")
    return a / b


# ============== String ==============

def echo(message: str) -> str:
    """Echo back the input message.

    Args:
        message: The message to echo back

    Returns:
        The echoed message with a prefix
    """
    logger.info(f"[TOOL] echo invoked, message length: {len(message)}")
    return f"Echo: {message}"


def concat(strings: list[str]) -> str:
    """Concatenate strings without a separator."""
    logger.info(f"[TOOL] concat invoked, parts: {len(strings)}")
    return "".join(strings)


def uppercase(text: str) -> str:
    """Convert text to uppercase."""
    return text.upper()


def lowercase(text: str) -> str:
    """Convert text to lowercase."""
    return text.lower()


def reverse_string(text: str) -> str:
    """Reverse a string."""
    logger.info(f"[TOOL] reverse_string invoked, text length: {len(text)}")
    return text[::-1]


def length(text: str) -> int:
    """Number of characters in the text."""
    return len(text)


# ============== Encoding ==============

def json_parse(json_text: str) -> str:
    """Parse a JSON string and return it pretty-printed."""
    try:
        value = json.loads(json_text)
    except json.JSONDecodeError as e:
        raise ToolError(f"Invalid JSON: {e}") from e
    return json.dumps(value, indent=2)


def json_stringify(value: Any) -> str:
    """Serialize a value to a compact JSON string."""
    return json.dumps(value, separators=(",", ":"))


def base64_encode(text: str) -> str:
    """Base64 encode UTF-8 text."""
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def base64_decode(encoded: str) -> str:
    """Decode base64 into UTF-8 text.

    Raises:
        ToolError: If the input is not valid base64 or not UTF-8 once decoded
    """
    try:
        return base64.b64decode(encoded, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        logger.info(f"[TOOL] base64_decode rejected input: {e}")
        raise ToolError(f"Invalid base64 input: {e}") from e


def hash_sha256(text: str) -> str:
    """Hex SHA-256 digest of UTF-8 text."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


# ============== Utility ==============

def random_number(min_value: int, max_value: int) -> int:
    """Random integer in [min_value, max_value]."""
    if min_value > max_value:
        raise ToolError("min_value must be less than or equal to max_value")
    return random.randint(min_value, max_value)


def random_uuid() -> str:
    """Random UUID v4."""
    return str(uuid.uuid4())


def current_time() -> str:
    """Current UTC time as an ISO 8601 timestamp."""
    return datetime.now(timezone.utc).isoformat()


# ============== Testing ==============

async def sleep(duration_ms: int) -> str:
    """Sleep for the given number of milliseconds."""
    logger.info(f"[TOOL] sleep invoked, duration: {duration_ms}ms")
    await asyncio.sleep(duration_ms / 1000)
    return f"Slept for {duration_ms}ms"


async def slow_echo(text: str, delay_ms: int) -> str:
    """Echo text back after a delay in milliseconds."""
    logger.info(f"[TOOL] slow_echo invoked, delay: {delay_ms}ms")
    await asyncio.sleep(delay_ms / 1000)
    return text


def fail() -> str:
    """Always returns an error."""
    logger.info("[TOOL] fail invoked")
    raise ToolError("This tool always fails")


def fail_with_message(message: str) -> str:
    """Returns an error carrying the given message."""
    logger.info("[TOOL] fail_with_message invoked")
    raise ToolError(message)


def nested_data(depth: int) -> dict:
    """Nested object ``depth`` levels deep, ending in the string "leaf"."""
    data: Any = "leaf"
    for level in range(1, depth + 1):
        data = {"level": level, "nested": data}
    return {"data": data}


def large_response(size_bytes: int) -> str:
    """Text of at least ``size_bytes`` bytes, built from repeated lines."""
    line = "This is a line of text to create a large response.\n"
    return line * -(-size_bytes // len(line))


def noop() -> str:
    """Returns immediately without side effects."""
    return "ok"


# Registered without the decorator so the functions stay directly callable.
for _tool in (
    add, subtract, multiply, divide,
    echo, concat, uppercase, lowercase, reverse_string, length,
    json_parse, json_stringify, base64_encode, base64_decode, hash_sha256,
    random_number, random_uuid, current_time,
    sleep, slow_echo, fail, fail_with_message, nested_data, large_response, noop,
):
    mcp.tool()(_tool)


# ============== Resources ==============

STATIC_RESOURCE_PREFIX = "test://static/"

# 1x1 transparent PNG
IMAGE_PNG = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNk+M9QDwADhgGAWjR9awAAAABJRU5ErkJggg=="
)


@mcp.resource(
    f"{STATIC_RESOURCE_PREFIX}hello.txt",
    name="hello.txt",
    description="A simple hello world text file",
    mime_type="text/plain",
)
def hello_txt() -> str:
    return "Hello, World!"


@mcp.resource(
    f"{STATIC_RESOURCE_PREFIX}data.json",
    name="data.json",
    description="Sample JSON data",
    mime_type="application/json",
)
def data_json() -> str:
    return json.dumps({"name": "test", "version": "1.0", "items": [1, 2, 3]})


@mcp.resource(
    f"{STATIC_RESOURCE_PREFIX}image.png",
    name="image.png",
    description="A 1x1 pixel PNG image",
    mime_type="image/png",
)
def image_png() -> bytes:
    return IMAGE_PNG


@mcp.resource(
    f"{STATIC_RESOURCE_PREFIX}large.txt",
    name="large.txt",
    description="A large text file for pagination testing (10KB+)",
    mime_type="text/plain",
)
def large_txt() -> str:
    return "".join(
        f"This is line number {i:05} of the large text file for pagination testing.\n"
        for i in range(150)
    )


# ============== Prompts ==============

@mcp.prompt(name="greeting", description="A simple greeting prompt")
def greeting(name: str) -> str:
    return f"Hello, {name}!"


@mcp.prompt(name="code_review", description="Multi-message prompt for code review")
def code_review(code: str, language: str) -> list[Message]:
    return [
        Message(f"Please review this {language} code:\n\n```{language}\n{code}\n```"),
        Message("I'll review this code for quality, security, and best practices.", role="assistant"),
    ]


@mcp.prompt(name="summarize", description="Prompt to summarize text")
def summarize(text: str) -> str:
    return f"Please summarize the following text:\n\n{text}"


@mcp.prompt(name="translate", description="Translate text to another language")
def translate(text: str, language: str) -> str:
    return f"Please translate the following text to {language}:\n\n{text}"
