"""Shared builders and doubles for the test suite."""

import json
import os
from typing import Any, Dict, List

from langchain_core.messages import AIMessage
from langchain_core.runnables import RunnableLambda


def make_metadata(timestamp: str, pass_rate: float, **fields: Any) -> Dict[str, Any]:
    """Builds a metadata.json payload as a client project would push it."""
    total = fields.pop("total_tests", 100)
    passed = fields.pop("passed", round(total * pass_rate / 100))
    data = {
        "project": "demo",
        "timestamp": timestamp,
        "run_number": 1,
        "branch": "main",
        "status": "success" if passed == total else "failure",
        "total_tests": total,
        "passed": passed,
        "failed": total - passed,
        "pass_rate": pass_rate,
    }
    data.update(fields)
    return data


def metadata_path(reports_dir: str, project: str, timestamp: str) -> str:
    return os.path.join(reports_dir, project, timestamp, "metadata.json")


def write_metadata_file(reports_dir, project: str, timestamp: str, content) -> str:
    """Writes a metadata file to disk; `content` is a dict or raw text."""
    path = metadata_path(str(reports_dir), project, timestamp)
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(content if isinstance(content, str) else json.dumps(content))
    return path


class RecordingLLM:
    """A chat model double that records the messages it receives."""

    def __init__(self, answer: str = "Healthy run.\n\nDetails follow."):
        self.answer = answer
        self.calls: List[list] = []

    def _respond(self, messages):
        self.calls.append(messages)
        return AIMessage(content=self.answer)

    def runnable(self):
        return RunnableLambda(self._respond)
