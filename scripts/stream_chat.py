"""
stream_chat.py
Signs in with the development test account and streams one chat reply
from a running server.
Run:
    python scripts/stream_chat.py "What is surrender?"
Prerequisites:
    ENABLE_TEST_ACCOUNT=true and NOUS_API_KEY set on the server
"""

import asyncio
import json
import logging
import sys

import httpx

# ------------------ PARAMETERS ------------------
API_BASE = "http://localhost:8000"
EMAIL = "test@buddhabot.dev"
PASSWORD = "buddhabot-test-password"
DEFAULT_QUESTION = "How do I stay present when I'm anxious?"
TIMEOUT = 30.0  # the server is cut off at 25 s anyway
# ------------------------------------------

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s %(levelname)s - %(message)s"
)


async def main(question: str) -> int:
    async with httpx.AsyncClient(base_url=API_BASE, timeout=TIMEOUT) as client:
        logging.info("Signing in with the test account")
        resp = await client.post(
            "/api/auth/callback/credentials",
            json={"email": EMAIL, "password": PASSWORD},
        )
        if resp.status_code != 200:
            logging.error(f"Sign-in failed: {resp.status_code} {resp.text}")
            return 1

        payload = {
            "messages": [
                {"role": "user", "parts": [{"type": "text", "text": question}]}
            ]
        }
        logging.info(f"Asking: {question}")
        async with client.stream("POST", "/api/chat", json=payload) as resp:
            if resp.status_code != 200:
                body = await resp.aread()
                logging.error(f"Chat failed: {resp.status_code} {body.decode()}")
                return 1

            async for line in resp.aiter_lines():
                if not line.startswith("data: "):
                    continue
                data = line[len("data: "):]
                if data == "[DONE]":
                    print()
                    logging.info("Stream complete")
                    return 0
                part = json.loads(data)
                if part["type"] == "text-delta":
                    print(part["delta"], end="", flush=True)
                elif part["type"] == "error":
                    print()
                    logging.error(f"Stream interrupted: {part.get('errorText')}")
                    return 1

    logging.error("Stream ended without an end marker")
    return 1


if __name__ == "__main__":
    question = " ".join(sys.argv[1:]) or DEFAULT_QUESTION
    sys.exit(asyncio.run(main(question)))
