import os
import tempfile

# Settings are read at import time
os.environ.setdefault("FROM_EMAIL", "newsletter@example.com")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("GEMINI_API_KEY", "test-gemini-key")
os.environ.setdefault("AWS_REGION", "us-east-1")
os.environ.setdefault("OUTBOX_PATH", os.path.join(tempfile.mkdtemp(), "outbox.sqlite3"))
os.environ.setdefault("SEND_BATCH_PAUSE_SECONDS", "0")

import pytest

from letteros.ai.errors import AIServiceError
from letteros.models.launch_content import LaunchContext


class FakeLLM:
    """Returns canned responses in order and records every prompt"""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.prompts = []
        self.calls = []

    async def generate(self, prompt, temperature=None, max_output_tokens=None):
        self.prompts.append(prompt)
        self.calls.append({"temperature": temperature, "max_output_tokens": max_output_tokens})
        if not self.responses:
            raise AIServiceError("No more canned responses")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def launch_context():
    return LaunchContext(
        name="Focus Coaching",
        description="Eight-week coaching program for remote engineers",
        target_audience="Remote software engineers",
        value_proposition="Ship deep work every day",
        tone="Warm and direct",
        target_pain="Constant context switching",
        lp_url="https://example.com/focus",
        price="$490",
    )
